from datetime import timedelta

import pytest

from tradesim.brokers.immediate_broker import ImmediateBroker
from tradesim.brokers.settlement_broker import SettlementBroker
from tradesim.core.exceptions import (
    InsufficientCapital,
    MarketClosed,
    NoOpenPosition,
    PositionAlreadyOpen,
    SettlementPending,
    ZeroOrNegativeShares,
)
from tradesim.data.account import Account, Position


def test_max_shares_returns_whole_number_of_purchaseable_shares(ny) -> None:
    acct = Account(SettlementBroker())
    assert acct.max_shares(12.31, ny(2020, 9, 29, 9, 30)) == 81
    assert acct.max_shares(0.0, ny(2020, 9, 29, 9, 30)) == 0


def test_cannot_open_position_without_shares(ny) -> None:
    acct = Account(SettlementBroker())
    assert acct.open_position("ABC", 10.0, 0, ny(2020, 9, 29, 9, 30)) is None
    assert acct.positions == []
    assert isinstance(acct.rejections[-1], ZeroOrNegativeShares)


def test_cannot_open_position_without_enough_capital(ny) -> None:
    acct = Account(SettlementBroker(capital=5.99))
    acct.open_position("ABC", 10.0, 11, ny(2020, 9, 29, 9, 31))
    assert acct.positions == []
    assert isinstance(acct.rejections[-1], InsufficientCapital)


def test_cannot_open_position_outside_of_market_hours(ny) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 10.0, 1, ny(2020, 9, 29, 9, 29, 59))
    assert acct.positions == []
    assert isinstance(acct.rejections[-1], MarketClosed)


def test_only_one_position_can_be_open(ny) -> None:
    acct = Account(ImmediateBroker())
    first = acct.open_position("ABC", 10.0, 1, ny(2020, 9, 29, 9, 30))
    second = acct.open_position("ABC", 10.0, 1, ny(2020, 9, 29, 9, 31))

    assert first is not None
    assert second is None
    assert isinstance(acct.rejections[-1], PositionAlreadyOpen)
    assert [p.open for p in acct.positions] == [True]


def test_open_then_close_moves_position_to_history(ny) -> None:
    acct = Account(ImmediateBroker())
    acct.open_position("ABC", 10.0, 5, ny(2020, 9, 29, 9, 30))
    assert acct.is_position_open()
    assert acct.history == []

    closed = acct.close_position("ABC", 11.0, ny(2020, 9, 29, 9, 31))

    assert not acct.is_position_open()
    assert acct.current is None
    assert acct.history == [closed]
    assert closed.closes[0].price == 11.0
    assert closed.closes[0].shares == 5


def test_at_most_one_open_position_over_many_cycles(ny) -> None:
    acct = Account(ImmediateBroker())
    t = ny(2020, 9, 29, 9, 30)
    for i in range(10):
        acct.open_position("ABC", 10.0, 1, t + timedelta(minutes=2 * i))
        acct.open_position("ABC", 10.0, 1, t + timedelta(minutes=2 * i, seconds=30))
        assert sum(p.open for p in acct.positions) == 1
        acct.close_position("ABC", 10.5, t + timedelta(minutes=2 * i + 1))
        assert sum(p.open for p in acct.positions) == 0
    assert len(acct.history) == 10


def test_close_position_puts_return_into_unsettled_cash_minus_commission(ny) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 10.0, 5, ny(2020, 9, 29, 9, 30))
    acct.close_position("ABC", 11.0, ny(2020, 9, 29, 9, 31))
    assert acct.broker.unsettled_cash() == pytest.approx(54.99)
    assert acct.broker.capital(ny(2020, 9, 29, 9, 30)) == pytest.approx(950.0)
    assert acct.total_cash(ny(2020, 9, 29, 9, 32)) == pytest.approx(1004.99)


def test_close_with_no_open_position_raises(ny) -> None:
    acct = Account(SettlementBroker())
    with pytest.raises(NoOpenPosition):
        acct.close_position("ABC", 11.0, ny(2020, 9, 29, 9, 31))


def test_close_outside_market_hours_keeps_position_open(ny) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 10.0, 5, ny(2020, 9, 29, 15, 0))

    assert acct.close_position("ABC", 11.0, ny(2020, 9, 29, 16, 30)) is None

    assert acct.is_position_open()
    assert acct.broker.unsettled_cash() == 0.0
    assert acct.broker.settle_date is None
    assert isinstance(acct.rejections[-1], MarketClosed)


def test_position_provides_return_value(ny) -> None:
    position = Position(ticker="ABC", bid=5.0, shares=10, time=ny(2020, 9, 29, 9, 31))
    position.close(6.0, ny(2020, 9, 29, 9, 31))
    assert position.total_return() == pytest.approx(10.0)
    assert not position.open


@pytest.mark.parametrize("close_day, days_until_settled", [(25, 3), (24, 4)])
def test_closing_late_in_week_settles_on_monday(ny, close_day: int, days_until_settled: int) -> None:
    acct = Account(SettlementBroker())
    close_time = ny(2020, 9, close_day, 10, 0, 1)

    acct.open_position("ABC", 100.0, 10, ny(2020, 9, close_day, 10, 0, 0))
    acct.close_position("ABC", 100.0, close_time)

    for offset in range(days_until_settled):
        assert acct.broker.capital(close_time + timedelta(days=offset)) == 0.0
    assert acct.broker.capital(close_time + timedelta(days=days_until_settled)) == pytest.approx(999.99)


def test_cannot_reopen_until_sale_settles(ny) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 100.0, 5, ny(2020, 9, 29, 10, 0))
    acct.close_position("ABC", 100.0, ny(2020, 9, 29, 10, 1))

    assert acct.open_position("ABC", 100.0, 1, ny(2020, 9, 30, 10, 0)) is None
    assert isinstance(acct.rejections[-1], SettlementPending)

    assert acct.open_position("ABC", 100.0, 1, ny(2020, 10, 1, 10, 0)) is not None


def test_account_will_close_open_position_within_five_minutes_of_market_close(ny, make_candle) -> None:
    acct = Account(SettlementBroker())
    candle = make_candle(ny(2020, 9, 24, 15, 55, 0), open=0.0, close=101.0)

    acct.open_position("ABC", 100.0, 10, ny(2020, 9, 24, 10, 0, 0))
    acct.close_position_for_day("ABC", candle)

    assert acct.positions[0].open is False
    assert acct.positions[0].closes[0].price == 101.0


def test_close_for_day_ignores_earlier_candles(ny, make_candle) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 100.0, 1, ny(2020, 9, 24, 10, 0, 0))

    assert acct.close_position_for_day("ABC", make_candle(ny(2020, 9, 24, 15, 54, 59), 100.0, 101.0)) is None
    assert acct.is_position_open()


def test_close_for_day_without_position_is_noop(ny, make_candle) -> None:
    acct = Account(SettlementBroker())
    assert acct.close_position_for_day("ABC", make_candle(ny(2020, 9, 24, 15, 58), 100.0, 101.0)) is None
    assert acct.positions == []


def test_total_cash_after_settle_date_counts_proceeds_once(ny) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 100.0, 10, ny(2020, 9, 21, 10, 0))
    acct.close_position("ABC", 100.0, ny(2020, 9, 21, 10, 1))

    assert acct.total_cash(ny(2020, 9, 25, 10)) == pytest.approx(999.99)
    assert acct.broker.unsettled_cash() == 0.0
    assert acct.broker.capital(ny(2020, 9, 25, 10)) == pytest.approx(999.99)
    assert acct.total_cash(ny(2020, 9, 25, 11)) == pytest.approx(999.99)


def test_end_of_day_bar_at_market_close_leaves_position_open_until_next_session(ny, make_candle) -> None:
    acct = Account(SettlementBroker())
    acct.open_position("ABC", 100.0, 10, ny(2020, 9, 24, 10, 0))

    assert acct.close_position_for_day("ABC", make_candle(ny(2020, 9, 24, 16, 0), 100.0, 101.0)) is None
    assert acct.is_position_open()
    assert isinstance(acct.rejections[-1], MarketClosed)
    assert acct.broker.unsettled_cash() == 0.0

    closed = acct.close_position_for_day("ABC", make_candle(ny(2020, 9, 25, 15, 56), 101.0, 102.0))
    assert closed is not None
    assert not acct.is_position_open()
    assert closed.closes[0].time == ny(2020, 9, 25, 15, 56)
    assert acct.broker.unsettled_cash() == pytest.approx(1019.99)
