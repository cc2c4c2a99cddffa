"""
이동평균 돌파(SMA Crossover) 전략 구현.

[ 역할 ]
    core/trading_strategy.py::TradingStrategy의 구현체.
    "가격이 이동평균선 아래로 내려갔다가(셋업) 양봉으로 다시 올라오면 매수,
     음봉으로 이동평균선 아래로 마감하면 전량 매도"

[ 전략 흐름 ]
    warm_up(): 처음 window개 캔들로 SMA 초기화
               마지막 워밍업 종가 < SMA 이면 armed = True

    매 캔들마다 on_candle() 호출됨
        ├── 1. 종가를 SMA에 추가 (같은 캔들에서 지표 갱신 후 판단)
        ├── 2. SMA 값 없으면 판단 생략
        ├── 3. 청산: 종가 < SMA + 음봉 + 보유 중 → 종가에 매도
        ├── 4. 진입: 종가 > SMA + 양봉 + armed → max_shares만큼 매수, armed 해제
        ├── 5. 재셋업: 종가 < SMA + 미보유 → armed = True
        └── 6. 항상 close_position_for_day() (15:55 이후 강제 청산)
    3/4/5는 위 우선순위로 하나만 실행된다.

[ 파라미터 (config.yaml의 strategy 섹션에서 로드) ]
    window: 이동평균선 기간 (캔들 개수)
"""

from typing import Any, Iterable, Sequence

from tradesim.core.data_provider import Candle
from tradesim.core.trading_strategy import TradingStrategy
from tradesim.data.account import Account
from tradesim.indicators.moving_average import SimpleMovingAverage
from tradesim.strategies import register


@register("sma_crossover")
class SmaCrossover(TradingStrategy):
    """이동평균 돌파 전략 구현체."""

    DEFAULT_PARAMS = {
        "window": 9,
    }

    def __init__(
        self,
        ticker: str,
        candles: Iterable[Candle],
        params: dict[str, Any] | None = None,
    ):
        merged = {**self.DEFAULT_PARAMS, **(params or {})}
        super().__init__(name="sma_crossover", ticker=ticker, candles=candles, params=merged)
        self.sma = SimpleMovingAverage(self.window)
        self.armed = False

    @property
    def window(self) -> int:
        return int(self.params["window"])

    def warm_up(self, candles: Sequence[Candle]) -> Sequence[Candle]:
        if len(candles) < self.window:
            return ()

        warmup = candles[:self.window]
        for candle in warmup:
            self.sma.add(candle.close)

        self.armed = warmup[-1].close < self.sma.value
        return candles[self.window:]

    def on_candle(self, candle: Candle, account: Account) -> None:
        ma_value = self.sma.add(candle.close)

        if ma_value is not None:
            if candle.close < ma_value and candle.is_bearish and account.is_position_open():
                account.close_position(self.ticker, candle.close, candle.timestamp)
            elif candle.close > ma_value and candle.is_bullish and self.armed:
                shares = account.max_shares(candle.close, candle.timestamp)
                account.open_position(self.ticker, candle.close, shares, candle.timestamp)
                self.armed = False
            elif candle.close < ma_value and not account.is_position_open():
                self.armed = True

        account.close_position_for_day(self.ticker, candle)
