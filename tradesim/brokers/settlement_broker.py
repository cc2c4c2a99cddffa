"""
결제 지연(T+2) 브로커 구현.

[ 역할 ]
    core/broker_api.py::Broker 구현체.
    현금계좌의 결제 규칙을 모사: 매도 대금은 결제일까지 사용할 수 없고,
    미결제 대금이 있는 동안에는 새로 매수할 수 없다.

[ 결제 규칙 ]
    매도 시: price * shares - commission → unsettled_cash
             결제일 = 매도일 + 2일, 토/일이면 다음 월요일로
    capital(t) 조회 시: t.date() >= 결제일이면 unsettled_cash를 capital에 1회 합산

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.make_broker() (broker="settlement")
"""

from datetime import date, datetime
from typing import Optional

from tradesim.core.broker_api import Broker
from tradesim.core.exceptions import InsufficientCapital, SettlementPending
from tradesim.utils.market_hours import is_regular_session, settlement_date, to_exchange_time

COMMISSION = 0.01  # 매도 1건당 고정 수수료 ($)


class SettlementBroker(Broker):
    """T+2 결제 브로커. 수수료는 매도 시에만 정액 차감."""

    def __init__(
        self,
        capital: float = 1000.0,
        commission: float = COMMISSION,
    ):
        self._capital = capital
        self._unsettled_cash = 0.0
        self.settle_date: Optional[date] = None   # 미결제 대금이 자본이 되는 날
        self.commission = commission
        self.last_rejection = None

    def capital(self, at_time: datetime) -> float:
        if self.settle_date is not None and to_exchange_time(at_time).date() >= self.settle_date:
            self._capital += self._unsettled_cash
            self._unsettled_cash = 0.0
            self.settle_date = None
        return self._capital

    def unsettled_cash(self) -> float:
        return self._unsettled_cash

    def is_market_open(self, dt: datetime) -> bool:
        return is_regular_session(dt)

    def buy_order(
        self,
        ticker: str,
        shares: int,
        price: float,
        time: datetime,
    ) -> Optional[float]:
        capital = self.capital(time)

        # 결제 전에는 매수 불가
        if self._unsettled_cash > 0:
            self.last_rejection = SettlementPending(ticker, self._unsettled_cash, time)
            return None

        cost = price * shares
        if cost > capital:
            self.last_rejection = InsufficientCapital(ticker, cost, capital, time)
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
        self._unsettled_cash += price * shares - self.commission
        self.settle_date = settlement_date(time)
