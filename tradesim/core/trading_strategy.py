"""
매매 전략 추상 클래스 정의.

[ 역할 ]
    캔들 시퀀스를 한 번 순회하면서 Account에 진입/청산을 지시하는 실행기 인터페이스.

[ 구현체 ]
    - strategies/sma_crossover.py::SmaCrossover (이동평균 돌파 전략)

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.run()에서 전략 생성 후 execute(account) 호출

[ 실행 흐름 ]
    execute(account)
        ├── warm_up(candles)        → 지표 초기화, 남은 캔들 반환
        └── 남은 캔들마다 on_candle(candle, account)

[ 제약 ]
    캔들 시퀀스는 시간 오름차순, 정확히 한 번만 소비된다 (재실행 불가).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from tradesim.core.data_provider import Candle
from tradesim.core.exceptions import StrategyAlreadyExecuted
from tradesim.data.account import Account, Position

logger = logging.getLogger("tradesim.strategy")


class TradingStrategy(ABC):
    """매매 전략 추상 클래스.

    새 전략을 만들려면 이 클래스를 상속받아 2개 메서드를 구현하면 된다:
    - warm_up(): 지표 초기화에 쓸 캔들을 소비하고 나머지를 반환
    - on_candle(): 캔들 1개에 대한 진입/청산 판단
    """

    def __init__(
        self,
        name: str,
        ticker: str,
        candles: Iterable[Candle],
        params: dict[str, Any] | None = None,
    ):
        self.name = name
        self.ticker = ticker
        self.candles: tuple[Candle, ...] = tuple(candles)
        self.params = params or {}
        self._executed = False

    @property
    def executed(self) -> bool:
        return self._executed

    def execute(self, account: Account) -> list[Position]:
        """전체 캔들 시퀀스를 한 번 순회하며 전략 실행.

        Raises:
            StrategyAlreadyExecuted: 두 번째 호출 시
        """
        if self._executed:
            raise StrategyAlreadyExecuted(self.name, self.ticker)
        self._executed = True

        remaining = self.warm_up(self.candles)
        if not remaining:
            logger.warning(f"{self.ticker}: 워밍업 이후 캔들 없음 ({len(self.candles)}개). 거래 없음")
            return account.positions

        for candle in remaining:
            self.on_candle(candle, account)

        logger.info(f"{self.ticker}: {self.name} 실행 완료 (캔들 {len(self.candles)}개, 포지션 {len(account.positions)}개)")
        return account.positions

    @abstractmethod
    def warm_up(self, candles: Sequence[Candle]) -> Sequence[Candle]:
        """지표 초기화. 워밍업에 쓰지 않은 나머지 캔들을 반환."""
        ...

    @abstractmethod
    def on_candle(self, candle: Candle, account: Account) -> None:
        """캔들 1개 처리."""
        ...
