"""
계좌/포지션 관리 모듈.

[ 역할 ]
    포지션의 생애주기(없음 → 열림 → 닫힘)와 거래 기록을 관리.
    자본 검증/결제는 주입받은 Broker에 위임한다.

[ 주요 클래스 ]
    Close    - 청산 체결 기록 (가격/수량/시각, 변경 불가)
    Position - 개별 포지션 (진입가/수량/진입시각 + 청산 기록)
    Account  - 열린 포지션(current) 1개 + 닫힌 포지션 기록(history) + Broker

[ 불변 조건 ]
    열린 포지션은 최대 1개. current가 있으면 open_position()은 거절된다.
    history에는 닫힌 포지션만 추가되며 삭제되지 않는다.

[ 실패 처리 ]
    수량/장시간/자본/결제 관련 거절 → 로그 + rejections에 기록, 계속 진행
    열린 포지션 없이 close_position() → NoOpenPosition 발생 (호출자 버그)

[ 호출하는 곳 ]
    - strategies/sma_crossover.py에서 매 캔들마다 open/close 호출
    - backtest/metrics.py에서 account.positions로 성과 계산
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tradesim.core.broker_api import Broker
from tradesim.core.data_provider import Candle
from tradesim.core.exceptions import (
    MarketClosed,
    NoOpenPosition,
    OrderRejected,
    PositionAlreadyOpen,
    ZeroOrNegativeShares,
)
from tradesim.utils.market_hours import is_end_of_day

logger = logging.getLogger("tradesim.account")


@dataclass(frozen=True)
class Close:
    """청산 체결 기록."""
    price: float
    shares: int
    time: datetime


@dataclass
class Position:
    """개별 포지션. Account.open_position()으로만 생성된다."""
    ticker: str
    bid: float              # 진입가
    shares: int             # 진입 수량 (> 0)
    time: datetime          # 진입 시각
    open: bool = True
    closes: list[Close] = field(default_factory=list)

    @property
    def cost(self) -> float:
        return self.bid * self.shares

    def total_return(self) -> float:
        """총 손익 = Σ(청산가 * 청산수량) - 진입가 * 진입수량."""
        return sum(c.price * c.shares for c in self.closes) - self.cost

    def close(self, ask: float, time: datetime) -> Close:
        """전량 청산 기록. Account.close_position()에서만 호출."""
        fill = Close(price=ask, shares=self.shares, time=time)
        self.closes.append(fill)
        self.open = False
        return fill

    def __str__(self) -> str:
        state = "OPEN" if self.open else f"{self.total_return():+.4f}"
        line = f"{self.ticker:6} {self.shares}주 @ ${self.bid:.4f} ({self.time:%Y-%m-%d %H:%M:%S})"
        for c in self.closes:
            line += f" -> ${c.price:.4f} ({c.time:%Y-%m-%d %H:%M:%S})"
        return f"{line} [{state}]"


class Account:
    """계좌. 단일 포지션만 허용하며 Broker를 단독 소유한다."""

    def __init__(self, broker: Broker):
        self.broker = broker
        self.current: Optional[Position] = None     # 열린 포지션
        self.history: list[Position] = []           # 닫힌 포지션 (시간순)
        self.rejections: list[OrderRejected] = []   # 거절된 주문 기록

    @property
    def positions(self) -> list[Position]:
        """전체 포지션 기록. 열린 포지션이 있으면 맨 뒤."""
        if self.current is None:
            return list(self.history)
        return [*self.history, self.current]

    def is_position_open(self) -> bool:
        return self.current is not None

    def max_shares(self, price: float, time: datetime) -> int:
        """현재 자본으로 살 수 있는 최대 정수 주식 수."""
        if price <= 0:
            return 0
        return max(math.floor(self.broker.capital(time) / price), 0)

    def total_cash(self, time: datetime) -> float:
        """가용 자본 + 미결제 대금.

        capital() 이 결제일 도래분을 자본으로 옮기므로 먼저 조회한 뒤
        남은 미결제 대금을 더한다.
        """
        capital = self.broker.capital(time)
        return self.broker.unsettled_cash() + capital

    def open_position(
        self,
        ticker: str,
        bid: float,
        shares: int,
        time: datetime,
    ) -> Optional[Position]:
        """포지션 진입. 거절되면 None (예외 없음)."""
        if shares <= 0:
            return self._reject(ZeroOrNegativeShares(ticker, shares, time))

        if not self.broker.is_market_open(time):
            return self._reject(MarketClosed(ticker, time))

        if self.current is not None:
            return self._reject(PositionAlreadyOpen(ticker, time))

        if self.broker.buy_order(ticker, shares, bid, time) is None:
            reason = self.broker.last_rejection or OrderRejected("브로커 주문 거절", ticker=ticker, time=time)
            return self._reject(reason)

        self.current = Position(ticker=ticker, bid=bid, shares=shares, time=time)
        logger.debug(f"[{time}] 매수: {ticker} {shares}주 @ ${bid:,.4f}")
        return self.current

    def close_position(
        self,
        ticker: str,
        ask: float,
        time: datetime,
    ) -> Optional[Position]:
        """열린 포지션 전량 청산.

        Raises:
            NoOpenPosition: 열린 포지션이 없을 때 (호출자가 is_position_open()으로 확인해야 함)
        """
        if self.current is None:
            raise NoOpenPosition(ticker)

        # 장외 시간에는 매도/결제 스케줄 금지. 포지션은 열린 채로 유지
        if not self.broker.is_market_open(time):
            return self._reject(MarketClosed(ticker, time))

        position = self.current
        self.current = None
        self.broker.sell_order(ticker, position.shares, ask, time)
        position.close(ask, time)
        self.history.append(position)

        logger.debug(
            f"[{time}] 매도: {ticker} {position.shares}주 @ ${ask:,.4f} "
            f"(손익 ${position.total_return():+,.4f})"
        )
        return position

    def close_position_for_day(self, ticker: str, candle: Candle) -> Optional[Position]:
        """장 마감 5분 전(15:55) 이후 캔들이면 열린 포지션을 종가에 강제 청산."""
        if self.current is None or not is_end_of_day(candle.timestamp):
            return None
        logger.debug(f"[{candle.timestamp}] 장 마감 강제 청산: {ticker}")
        return self.close_position(ticker, candle.close, candle.timestamp)

    def _reject(self, reason: OrderRejected) -> None:
        self.rejections.append(reason)
        logger.info(f"주문 거절: {reason}")
        return None
