from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

# Ensure `tradesim` resolves to this checkout when running pytest from the repo root.
_repo_root = Path(__file__).resolve().parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from tradesim.core.data_provider import Candle  # noqa: E402
from tradesim.utils.market_hours import EXCHANGE_TZ  # noqa: E402


@pytest.fixture
def ny() -> Callable[..., datetime]:
    """Build an exchange-local (America/New_York) datetime."""

    def _ny(year: int, month: int, day: int, hour: int = 10, minute: int = 0, second: int = 0) -> datetime:
        return datetime(year, month, day, hour, minute, second, tzinfo=EXCHANGE_TZ)

    return _ny


@pytest.fixture
def make_candle() -> Callable[..., Candle]:
    """Build a candle; high/low default to the open/close envelope."""

    def _make(timestamp: datetime, open: float, close: float, volume: int = 1000) -> Candle:
        return Candle(
            open=open,
            close=close,
            high=max(open, close),
            low=min(open, close),
            volume=volume,
            timestamp=timestamp,
        )

    return _make
