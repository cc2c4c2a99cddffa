"""
주가 데이터(캔들) 정의 및 데이터 제공 추상 클래스.

[ 역할 ]
    OHLCV 캔들 데이터 타입과, 캔들 시퀀스를 제공하는 인터페이스 정의.
    데이터 소스(파일, API, DB 등)에 독립적으로 전략/백테스트에 데이터 공급.

[ 구현체 ]
    - data/market_data.py::DataFrameProvider  (DataFrame 기반, 백테스트용)
    - 향후: 원격 시세 API 구현체

[ 계약 ]
    history()는 타임스탬프 오름차순으로 정렬된 Candle 리스트를 반환해야 한다.
    타임스탬프는 거래소 현지 시간대(America/New_York)로 변환되어 있어야 한다.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime

import pandas as pd

from tradesim.utils.market_hours import EXCHANGE_TZ

CANDLE_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]


@dataclass(frozen=True)
class Candle:
    """단일 봉(캔들) 데이터. 생성 후 변경 불가."""
    open: float      # 시가
    close: float     # 종가
    high: float      # 고가
    low: float       # 저가
    volume: int      # 거래량
    timestamp: datetime

    @property
    def is_bullish(self) -> bool:
        """양봉: 종가 > 시가."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """음봉: 종가 < 시가."""
        return self.close < self.open

    def __str__(self) -> str:
        ts = self.timestamp.strftime("%m/%d/%y %I:%M:%S %p %z")
        return f"{ts}, O: {self.open}, C: {self.close}, H: {self.high}, L: {self.low}, V: {self.volume}"


def frame_to_candles(df: pd.DataFrame) -> list[Candle]:
    """OHLCV DataFrame을 캔들 리스트로 변환.

    timestamp 컬럼이 naive면 거래소 현지 시각으로 간주하고,
    시간대가 있으면 거래소 시간대로 변환한다. 결과는 시간 오름차순.
    """
    if df.empty:
        return []

    missing = [c for c in CANDLE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"필수 컬럼 누락: {missing}")

    df = df.copy()
    ts = pd.to_datetime(df["timestamp"])
    if ts.dt.tz is None:
        ts = ts.dt.tz_localize(EXCHANGE_TZ)
    else:
        ts = ts.dt.tz_convert(EXCHANGE_TZ)
    df["timestamp"] = ts
    df = df.sort_values("timestamp").reset_index(drop=True)

    return [
        Candle(
            open=float(r.open),
            close=float(r.close),
            high=float(r.high),
            low=float(r.low),
            volume=int(r.volume),
            timestamp=r.timestamp.to_pydatetime(),
        )
        for r in df.itertuples(index=False)
    ]


class PriceSource(ABC):
    """캔들 데이터 제공 추상 클래스.

    모든 데이터 제공자 구현체는 이 클래스를 상속받아 아래 메서드를 구현해야 한다.
    """

    @abstractmethod
    def history(
        self,
        ticker: str,
        start_date: date,
        end_date: date,
    ) -> list[Candle]:
        """캔들 조회.

        Args:
            ticker: 종목 코드
            start_date: 시작일 (포함)
            end_date: 종료일 (포함)

        Returns:
            타임스탬프 오름차순 Candle 리스트
        """
        ...

    @abstractmethod
    def get_tickers(self) -> list[str]:
        """조회 가능한 종목 코드 목록."""
        ...
