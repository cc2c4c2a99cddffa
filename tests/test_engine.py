from datetime import date

import pandas as pd
import pytest

from tradesim.backtest.engine import BacktestEngine
from tradesim.backtest.metrics import calculate_metrics
from tradesim.brokers.immediate_broker import ImmediateBroker
from tradesim.brokers.settlement_broker import SettlementBroker
from tradesim.data.account import Position
from tradesim.data.market_data import DataFrameProvider


def _minute_frame(day: str, closes: list[float]) -> pd.DataFrame:
    """One-minute bars from 09:30 with each open at the previous close."""
    timestamps = pd.date_range(start=f"{day} 09:30", periods=len(closes), freq="1min")
    opens = [closes[0]] + closes[:-1]
    return pd.DataFrame({
        "timestamp": timestamps,
        "open": opens,
        "high": [max(o, c) for o, c in zip(opens, closes)],
        "low": [min(o, c) for o, c in zip(opens, closes)],
        "close": closes,
        "volume": [1000] * len(closes),
    })


@pytest.fixture
def candles():
    closes = [10.0, 10.2, 9.8, 9.6, 10.1, 10.4, 10.0, 9.7, 9.5, 9.9, 10.3, 10.6, 10.2, 9.8, 10.1, 10.5]
    provider = DataFrameProvider()
    provider.load_data("ABC", _minute_frame("2020-09-29", closes))
    return provider.history("ABC", date(2020, 9, 29), date(2020, 9, 29))


def test_make_broker_builds_fresh_instances() -> None:
    engine = BacktestEngine(broker="settlement")
    a, b = engine.make_broker(), engine.make_broker()
    assert isinstance(a, SettlementBroker)
    assert a is not b
    assert isinstance(BacktestEngine(broker="immediate").make_broker(), ImmediateBroker)


def test_unknown_broker_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        BacktestEngine(broker="margin")


@pytest.mark.parametrize("broker", ["immediate", "settlement"])
def test_run_is_deterministic(candles, broker: str) -> None:
    engine = BacktestEngine(initial_capital=1000.0, broker=broker)
    first = engine.run("ABC", candles, params={"window": 3})
    second = engine.run("ABC", candles, params={"window": 3})

    assert first.trades() == second.trades()
    assert first.ending_cash == second.ending_cash
    assert first.metrics == second.metrics


def test_run_produces_trades(candles) -> None:
    result = BacktestEngine(initial_capital=1000.0, broker="immediate").run("ABC", candles, params={"window": 3})
    assert result.candle_count == len(candles)
    assert result.metrics.total_trades + result.metrics.open_positions == len(result.positions)
    assert len(result.positions) > 0


def test_run_with_too_few_candles_is_trade_free(candles) -> None:
    result = BacktestEngine(initial_capital=500.0).run("ABC", candles[:2], params={"window": 9})
    assert result.positions == []
    assert result.ending_cash == pytest.approx(500.0)
    assert result.metrics.win_rate == 0.0


def test_run_with_no_candles() -> None:
    result = BacktestEngine(initial_capital=500.0).run("ABC", [])
    assert result.positions == []
    assert result.ending_cash == pytest.approx(500.0)


def test_run_many_uses_independent_accounts(candles) -> None:
    engine = BacktestEngine(initial_capital=1000.0, broker="settlement")
    results = engine.run_many({"ABC": candles, "XYZ": candles}, params={"window": 3})

    assert set(results) == {"ABC", "XYZ"}
    assert [t["bid"] for t in results["ABC"].trades()] == [t["bid"] for t in results["XYZ"].trades()]
    assert results["ABC"].ending_cash == results["XYZ"].ending_cash


def test_calculate_metrics_counts_wins_and_losses(ny) -> None:
    def closed(bid: float, ask: float) -> Position:
        p = Position(ticker="ABC", bid=bid, shares=10, time=ny(2020, 9, 29, 10))
        p.close(ask, ny(2020, 9, 29, 11))
        return p

    positions = [closed(10.0, 11.0), closed(10.0, 10.0), closed(10.0, 9.0), closed(10.0, 8.5), closed(10.0, 12.0)]
    positions.append(Position(ticker="ABC", bid=10.0, shares=1, time=ny(2020, 9, 29, 12)))

    metrics = calculate_metrics(positions, ending_cash=1010.0, initial_capital=1000.0)

    assert metrics.total_trades == 5
    assert metrics.open_positions == 1
    assert metrics.winning_trades == 3
    assert metrics.losing_trades == 2
    assert metrics.win_rate == pytest.approx(60.0)
    assert metrics.wins_sum == pytest.approx(30.0)
    assert metrics.losses_sum == pytest.approx(-25.0)
    assert metrics.net == pytest.approx(5.0)
    assert metrics.best_trade == pytest.approx(20.0)
    assert metrics.worst_trade == pytest.approx(-15.0)
    assert metrics.max_consecutive_wins == 2
    assert metrics.max_consecutive_losses == 2
    assert metrics.total_return == pytest.approx(1.0)
    assert "W/L/W%: 3/2/60.00%" in metrics.summary()


def test_calculate_metrics_without_positions() -> None:
    metrics = calculate_metrics([], ending_cash=1000.0, initial_capital=1000.0)
    assert metrics.total_trades == 0
    assert metrics.win_rate == 0.0
    assert metrics.to_dict()["ending_cash"] == 1000.0


def test_ending_cash_after_settle_date_counts_sale_once(ny, make_candle) -> None:
    candles = [
        make_candle(ny(2020, 9, 21, 10, 0), 10.0, 10.0),
        make_candle(ny(2020, 9, 21, 10, 1), 10.0, 9.0),
        make_candle(ny(2020, 9, 21, 10, 2), 9.0, 11.0),
        make_candle(ny(2020, 9, 21, 10, 3), 11.0, 8.0),
        make_candle(ny(2020, 9, 25, 10, 0), 9.0, 7.0),
    ]

    result = BacktestEngine(initial_capital=1000.0, broker="settlement").run("ABC", candles, params={"window": 2})

    assert [(t["bid"], t["shares"]) for t in result.trades()] == [(11.0, 90)]
    assert result.ending_cash == pytest.approx(729.99)
    assert result.metrics.ending_cash == pytest.approx(729.99)
    assert result.metrics.net == pytest.approx(-270.0)
