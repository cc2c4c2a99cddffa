"""
백테스팅 엔진 모듈.

[ 역할 ]
    캔들 시퀀스에 전략을 적용하여 가상 매매를 시뮬레이션하고 성과를 측정.
    종목마다 새 Broker + Account를 만들어 실행하므로 종목 간 상태 공유가 없다.

[ 실행 흐름 ]
    run() 호출 시:
        1. make_broker()로 새 브로커 생성 (immediate / settlement)
        2. Account(broker) 생성
        3. create_strategy()로 전략 생성 후 execute(account)
        4. 최종 현금(미결제 + 가용 자본) 계산
        5. metrics.calculate_metrics()로 성과 지표 계산

[ 의존성 ]
    - strategies/__init__.py::create_strategy (전략 레지스트리)
    - data/account.py::Account (포지션/거래기록 관리)
    - backtest/metrics.py::calculate_metrics() (성과 계산)

[ 호출하는 곳 ]
    - run_backtest.py (진입점)에서 생성 및 실행
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

from tradesim.backtest.metrics import RunMetrics, calculate_metrics
from tradesim.brokers.immediate_broker import ImmediateBroker
from tradesim.brokers.settlement_broker import COMMISSION, SettlementBroker
from tradesim.core.broker_api import Broker
from tradesim.core.data_provider import Candle
from tradesim.data.account import Account, Position
from tradesim.strategies import create_strategy

logger = logging.getLogger("tradesim.backtest")

BROKER_KINDS = ("immediate", "settlement")


@dataclass
class BacktestResult:
    """종목 1개 실행 결과."""
    ticker: str
    positions: list[Position] = field(default_factory=list)
    metrics: RunMetrics = field(default_factory=RunMetrics)
    ending_cash: float = 0.0
    candle_count: int = 0

    def trades(self) -> list[dict[str, Any]]:
        """포지션 기록을 리포트용 dict 리스트로 변환."""
        rows = []
        for p in self.positions:
            close = p.closes[-1] if p.closes else None
            rows.append({
                "ticker": p.ticker,
                "shares": p.shares,
                "bid": p.bid,
                "open_time": p.time,
                "ask": close.price if close else None,
                "close_time": close.time if close else None,
                "open": p.open,
                "return": p.total_return() if not p.open else None,
            })
        return rows


class BacktestEngine:
    """백테스팅 엔진. run() / run_many()로 시뮬레이션 실행."""

    def __init__(
        self,
        initial_capital: float = 1000.0,
        broker: str = "settlement",         # "immediate" 또는 "settlement"
        commission: float = COMMISSION,     # settlement 브로커 매도 수수료
    ):
        if broker not in BROKER_KINDS:
            raise ValueError(f"알 수 없는 브로커: '{broker}'. 사용 가능: {', '.join(BROKER_KINDS)}")
        self.initial_capital = initial_capital
        self.broker = broker
        self.commission = commission

    def make_broker(self) -> Broker:
        """실행마다 새 브로커 생성. 브로커 인스턴스는 계좌 간에 공유하지 않는다."""
        if self.broker == "immediate":
            return ImmediateBroker(capital=self.initial_capital)
        return SettlementBroker(capital=self.initial_capital, commission=self.commission)

    def run(
        self,
        ticker: str,
        candles: Sequence[Candle],
        strategy_name: str = "sma_crossover",
        params: dict[str, Any] | None = None,
    ) -> BacktestResult:
        """종목 1개 실행.

        Args:
            ticker: 종목 코드
            candles: 시간 오름차순 캔들
            strategy_name: 등록된 전략 이름
            params: 전략 파라미터

        Returns:
            BacktestResult: 포지션 기록 + 성과 지표
        """
        account = Account(self.make_broker())
        strategy = create_strategy(strategy_name, ticker=ticker, candles=candles, params=params)

        if candles:
            logger.info(
                f"{ticker} 실행 시작: {candles[0].timestamp} ~ {candles[-1].timestamp} "
                f"(캔들 {len(candles)}개, 브로커 {self.broker})"
            )
        else:
            logger.warning(f"{ticker}: 캔들이 없습니다.")

        positions = strategy.execute(account)

        end_time = candles[-1].timestamp if candles else datetime.fromtimestamp(0, tz=timezone.utc)
        ending_cash = account.total_cash(end_time)
        metrics = calculate_metrics(positions, ending_cash, self.initial_capital)

        logger.info(f"{ticker} 실행 완료. 거래 {metrics.total_trades}건, 최종 현금 ${ending_cash:,.4f}")
        return BacktestResult(
            ticker=ticker,
            positions=positions,
            metrics=metrics,
            ending_cash=ending_cash,
            candle_count=len(candles),
        )

    def run_many(
        self,
        data: dict[str, Sequence[Candle]],
        strategy_name: str = "sma_crossover",
        params: dict[str, Any] | None = None,
    ) -> dict[str, BacktestResult]:
        """여러 종목을 종목별 독립 계좌로 실행."""
        return {
            ticker: self.run(ticker, candles, strategy_name, params)
            for ticker, candles in data.items()
        }
