"""
매매 시뮬레이션 예외 정의.

[ 역할 ]
    주문 거절(복구 가능)과 계약 위반(치명적)을 구분하는 예외 계층.

[ 예외 계층 ]
    TradingError
      ├── OrderRejected            ← Account 내부에서 처리, 로그만 남기고 계속 진행
      │     ├── InsufficientCapital
      │     ├── ZeroOrNegativeShares
      │     ├── MarketClosed
      │     ├── SettlementPending
      │     └── PositionAlreadyOpen
      ├── NoOpenPosition           ← 호출자 버그. 절대 삼키지 않는다
      └── StrategyAlreadyExecuted  ← 전략은 캔들 시퀀스를 한 번만 소비

[ 호출하는 곳 ]
    - brokers/*.py: buy_order() 실패 사유를 last_rejection에 기록
    - data/account.py: 거절 사유 로깅, NoOpenPosition 발생
    - core/trading_strategy.py: StrategyAlreadyExecuted 발생
"""

from datetime import datetime
from typing import Optional


class TradingError(Exception):
    """시뮬레이션 예외의 공통 부모."""


# ─── 주문 거절 (복구 가능) ──────────────────────────────────────────────────

class OrderRejected(TradingError):
    """주문이 거절됨. 시뮬레이션은 계속 진행된다."""

    def __init__(
        self,
        message: str,
        ticker: str = "",
        time: Optional[datetime] = None,
    ):
        super().__init__(message)
        self.ticker = ticker
        self.time = time


class InsufficientCapital(OrderRejected):
    """주문 금액이 가용 자본을 초과."""

    def __init__(self, ticker: str, cost: float, capital: float, time: Optional[datetime] = None):
        super().__init__(
            f"자본 부족: {ticker} 주문금액 ${cost:,.2f} > 가용자본 ${capital:,.2f}",
            ticker=ticker,
            time=time,
        )
        self.cost = cost
        self.capital = capital


class ZeroOrNegativeShares(OrderRejected):
    """주문 수량이 0 이하."""

    def __init__(self, ticker: str, shares: int, time: Optional[datetime] = None):
        super().__init__(f"주문 수량 0 이하: {ticker} {shares}주", ticker=ticker, time=time)
        self.shares = shares


class MarketClosed(OrderRejected):
    """정규장 시간 외 주문."""

    def __init__(self, ticker: str, time: Optional[datetime] = None):
        super().__init__(f"장 운영시간 아님: {ticker} @ {time}", ticker=ticker, time=time)


class SettlementPending(OrderRejected):
    """직전 매도 대금이 아직 결제되지 않음 (현금계좌 1회 매매 제한)."""

    def __init__(self, ticker: str, unsettled_cash: float, time: Optional[datetime] = None):
        super().__init__(
            f"미결제 대금 존재: {ticker} (미결제 ${unsettled_cash:,.2f})",
            ticker=ticker,
            time=time,
        )
        self.unsettled_cash = unsettled_cash


class PositionAlreadyOpen(OrderRejected):
    """계좌에 이미 열린 포지션이 있음 (단일 포지션 계좌)."""

    def __init__(self, ticker: str, time: Optional[datetime] = None):
        super().__init__(f"이미 열린 포지션 존재: {ticker}", ticker=ticker, time=time)


# ─── 계약 위반 (치명적) ─────────────────────────────────────────────────────

class NoOpenPosition(TradingError):
    """열린 포지션 없이 청산 시도. 전략 로직 버그를 의미한다."""

    def __init__(self, ticker: str):
        super().__init__(f"청산할 포지션 없음: {ticker}")
        self.ticker = ticker


class StrategyAlreadyExecuted(TradingError):
    """이미 실행된 전략을 다시 실행하려 함."""

    def __init__(self, name: str, ticker: str):
        super().__init__(f"전략 '{name}'({ticker})은 이미 실행됨. 새 인스턴스를 생성하세요.")
        self.name = name
        self.ticker = ticker
