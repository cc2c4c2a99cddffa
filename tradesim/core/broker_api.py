"""
브로커 추상 클래스 정의.

[ 역할 ]
    매매 대금이 언제 "사용 가능한 자본"이 되는지를 모델링하는 인터페이스.
    Account는 이 인터페이스에만 의존하고, 결제 방식은 구현체가 결정한다.

[ 구현체 ]
    - brokers/immediate_broker.py::ImmediateBroker    (즉시 결제, 순수 백테스트용)
    - brokers/settlement_broker.py::SettlementBroker  (T+2 결제 + 수수료, 현금계좌 모사)

[ 호출하는 곳 ]
    - data/account.py::Account가 생성 시 주입받아 단독 소유
    - backtest/engine.py::BacktestEngine.make_broker()에서 실행마다 새로 생성
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from tradesim.core.exceptions import OrderRejected


class Broker(ABC):
    """브로커 추상 클래스.

    모든 브로커 구현체는 이 클래스를 상속받아 아래 메서드를 구현해야 한다.
    구현체 간 상태를 공유하지 않으며, 인스턴스 하나는 계좌 하나에만 주입된다.
    """

    #: 가장 최근 buy_order() 거절 사유. 성공 시 None으로 초기화된다.
    last_rejection: Optional[OrderRejected] = None

    @abstractmethod
    def capital(self, at_time: datetime) -> float:
        """at_time 시점의 사용 가능 자본 조회."""
        ...

    @abstractmethod
    def unsettled_cash(self) -> float:
        """결제 대기 중인(사용 불가) 매도 대금."""
        ...

    @abstractmethod
    def is_market_open(self, dt: datetime) -> bool:
        """dt가 정규장 시간인지. 모든 주문 시도마다 평가된다."""
        ...

    @abstractmethod
    def buy_order(
        self,
        ticker: str,
        shares: int,
        price: float,
        time: datetime,
    ) -> Optional[float]:
        """매수 주문.

        Returns:
            체결 후 남은 자본. 거절 시 None (사유는 last_rejection).
        """
        ...

    @abstractmethod
    def sell_order(
        self,
        ticker: str,
        shares: int,
        price: float,
        time: datetime,
    ) -> None:
        """매도 주문. 항상 체결된다."""
        ...
