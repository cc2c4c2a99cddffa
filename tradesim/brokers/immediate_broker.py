"""
즉시 결제 브로커 구현.

[ 역할 ]
    core/broker_api.py::Broker 구현체.
    순수 백테스트용: 수수료/결제 지연 없이 매수는 즉시 차감, 매도는 즉시 입금.

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.make_broker() (broker="immediate")
"""

from datetime import datetime
from typing import Optional

from tradesim.core.broker_api import Broker
from tradesim.core.exceptions import InsufficientCapital
from tradesim.utils.market_hours import is_regular_session


class ImmediateBroker(Broker):
    """즉시 결제 브로커. unsettled_cash는 항상 0."""

    def __init__(self, capital: float = 1000.0):
        self._capital = capital
        self.last_rejection = None

    def capital(self, at_time: datetime) -> float:
        return self._capital

    def unsettled_cash(self) -> float:
        return 0.0

    def is_market_open(self, dt: datetime) -> bool:
        return is_regular_session(dt)

    def buy_order(
        self,
        ticker: str,
        shares: int,
        price: float,
        time: datetime,
    ) -> Optional[float]:
        cost = price * shares
        if cost > self._capital:
            self.last_rejection = InsufficientCapital(ticker, cost, self._capital, time)
            return None

        self._capital -= cost
        self.last_rejection = None
        return self._capital

    def sell_order(
        self,
        ticker: str,
        shares: int,
        price: float,
        time: datetime,
    ) -> None:
        self._capital += price * shares
