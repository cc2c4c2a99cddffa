"""
백테스트 성과 지표 계산 모듈.

[ 역할 ]
    실행이 끝난 계좌의 포지션 기록을 받아 승/패 통계를 계산.
    calculate_metrics() 함수가 핵심.

[ 계산하는 지표 ]
    - 승/패 건수, 승률 (손익 >= 0 이면 승)
    - 수익 합계 / 손실 합계 / 순손익
    - 최종 현금 (미결제 대금 + 가용 자본), 총 수익률
    - 최고/최저 거래, 연속 승/패

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.run() 완료 시 호출

[ 입력 데이터 ]
    - positions: data/account.py::Account.positions (닫힌 포지션만 분석)
"""

from dataclasses import dataclass
from typing import Any

import numpy as np

from tradesim.data.account import Position


@dataclass
class RunMetrics:
    """실행 성과 지표. summary()로 포맷된 리포트 출력 가능."""
    total_trades: int = 0             # 청산 완료 포지션 수
    winning_trades: int = 0           # 수익 거래 수 (손익 >= 0)
    losing_trades: int = 0            # 손실 거래 수
    win_rate: float = 0.0             # 승률 (%)
    wins_sum: float = 0.0             # 수익 거래 손익 합 ($)
    losses_sum: float = 0.0           # 손실 거래 손익 합 ($, 음수)
    net: float = 0.0                  # 순손익 ($)
    best_trade: float = 0.0           # 최고 거래 손익
    worst_trade: float = 0.0          # 최저 거래 손익
    max_consecutive_wins: int = 0     # 최대 연속 수익
    max_consecutive_losses: int = 0   # 최대 연속 손실
    open_positions: int = 0           # 실행 종료 시 열려 있는 포지션 수
    initial_capital: float = 0.0
    ending_cash: float = 0.0          # 미결제 대금 + 가용 자본
    total_return: float = 0.0         # 총 수익률 (%)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환."""
        from dataclasses import asdict
        return asdict(self)

    def summary(self) -> str:
        """성과 요약 문자열."""
        return "\n".join([
            f"W/L/W%: {self.winning_trades}/{self.losing_trades}/{self.win_rate:.2f}% - "
            f"P/L: ${self.wins_sum:.4f}/${self.losses_sum:.4f} - Net: ${self.net:.4f}",
            f"Ending Capital: ${self.ending_cash:.4f} ({self.total_return:+.2f}%)",
        ])


def calculate_metrics(
    positions: list[Position],
    ending_cash: float,
    initial_capital: float,
) -> RunMetrics:
    """성과 지표 계산. engine.py에서 실행 완료 후 호출됨.

    Args:
        positions: Account.positions (시간순)
        ending_cash: 종료 시점 미결제 대금 + 가용 자본
        initial_capital: 초기 자본
    """
    metrics = RunMetrics(initial_capital=initial_capital, ending_cash=ending_cash)
    if initial_capital > 0:
        metrics.total_return = (ending_cash - initial_capital) / initial_capital * 100

    closed = [p for p in positions if not p.open]
    metrics.open_positions = len(positions) - len(closed)
    metrics.total_trades = len(closed)

    if not closed:
        return metrics

    returns = np.array([p.total_return() for p in closed])
    wins = returns[returns >= 0]
    losses = returns[returns < 0]

    metrics.winning_trades = int(wins.size)
    metrics.losing_trades = int(losses.size)
    metrics.win_rate = wins.size / returns.size * 100
    metrics.wins_sum = float(wins.sum())
    metrics.losses_sum = float(losses.sum())
    metrics.net = metrics.wins_sum + metrics.losses_sum
    metrics.best_trade = float(returns.max())
    metrics.worst_trade = float(returns.min())

    # 연속 승패
    consecutive_wins = 0
    consecutive_losses = 0
    for r in returns:
        if r >= 0:
            consecutive_wins += 1
            consecutive_losses = 0
            metrics.max_consecutive_wins = max(metrics.max_consecutive_wins, consecutive_wins)
        else:
            consecutive_losses += 1
            consecutive_wins = 0
            metrics.max_consecutive_losses = max(metrics.max_consecutive_losses, consecutive_losses)

    return metrics
