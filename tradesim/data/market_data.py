"""
시장 데이터 관리 모듈.

[ 역할 ]
    DataFrameProvider  - core/data_provider.py::PriceSource 구현체
                         미리 로드된 DataFrame에서 캔들 제공 (백테스트/테스트용)
    MarketDataManager  - PriceSource를 감싸서 메모리 캐싱 + 편의 메서드 제공

[ 호출하는 곳 ]
    - run_backtest.py에서 샘플 데이터를 DataFrameProvider에 로드
    - MarketDataManager.history_days()로 최근 N일 캔들 조회
"""

from datetime import date, timedelta

import pandas as pd

from tradesim.core.data_provider import CANDLE_COLUMNS, Candle, PriceSource, frame_to_candles


class DataFrameProvider(PriceSource):
    """DataFrame 기반 데이터 제공자.

    사용법:
        provider = DataFrameProvider()
        provider.load_data("AAPL", minute_df)   # DataFrame 로드
        candles = provider.history("AAPL", date(2020, 9, 21), date(2020, 9, 25))
    """

    def __init__(self):
        self._data: dict[str, list[Candle]] = {}  # ticker → 시간순 캔들

    def load_data(self, ticker: str, df: pd.DataFrame) -> None:
        """데이터 로드.

        Args:
            ticker: 종목 코드
            df: OHLCV DataFrame (columns: timestamp, open, high, low, close, volume)
        """
        self._data[ticker] = frame_to_candles(df)

    def history(
        self,
        ticker: str,
        start_date: date,
        end_date: date,
    ) -> list[Candle]:
        """기간 내 캔들 조회 (시작/종료일 포함)."""
        if ticker not in self._data:
            return []
        return [
            c for c in self._data[ticker]
            if start_date <= c.timestamp.date() <= end_date
        ]

    def get_tickers(self) -> list[str]:
        """로드된 종목 목록."""
        return list(self._data.keys())


class MarketDataManager:
    """PriceSource 위에 캐싱 레이어를 추가한 매니저.

    사용 예:
        manager = MarketDataManager(DataFrameProvider())
        candles = manager.history_days("AAPL", days=9, end_date=date(2020, 9, 25))
    """

    def __init__(self, price_source: PriceSource):
        self.provider = price_source
        self._cache: dict[str, list[Candle]] = {}  # "ticker_start_end" → 캔들

    def history(
        self,
        ticker: str,
        start_date: date,
        end_date: date,
        use_cache: bool = True,
    ) -> list[Candle]:
        """캔들 조회 (캐싱 지원)."""
        cache_key = f"{ticker}_{start_date}_{end_date}"

        if use_cache and cache_key in self._cache:
            return self._cache[cache_key]

        candles = self.provider.history(ticker, start_date, end_date)
        if use_cache:
            self._cache[cache_key] = candles
        return candles

    def history_days(
        self,
        ticker: str,
        days: int,
        end_date: date,
    ) -> list[Candle]:
        """end_date 기준 최근 days일(달력 기준) 캔들 조회."""
        start = end_date - timedelta(days=days)
        return self.history(ticker, start, end_date)

    def to_frame(self, candles: list[Candle]) -> pd.DataFrame:
        """캔들 리스트를 DataFrame으로 변환 (리포트/분석용)."""
        return pd.DataFrame(
            [
                {
                    "timestamp": c.timestamp,
                    "open": c.open,
                    "high": c.high,
                    "low": c.low,
                    "close": c.close,
                    "volume": c.volume,
                }
                for c in candles
            ],
            columns=CANDLE_COLUMNS,
        )

    def clear_cache(self) -> None:
        """캐시 초기화."""
        self._cache.clear()
