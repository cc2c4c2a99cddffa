"""
거래소(미국 주식시장) 시간 관련 유틸리티.

[ 역할 ]
    정규장 판단, 장 마감 임박 판단, 결제일 계산을 한 곳에서 처리.
    모든 시각은 거래소 현지 시간(America/New_York) 기준.

[ 호출하는 곳 ]
    - brokers/*.py::is_market_open()
    - brokers/settlement_broker.py 결제일 계산
    - data/account.py::close_position_for_day()
    - core/data_provider.py 타임스탬프 변환
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

EXCHANGE_TZ = ZoneInfo("America/New_York")

MARKET_OPEN = time(9, 30, 0)
MARKET_CLOSE = time(16, 0, 0)
END_OF_DAY_CUTOFF = time(15, 55, 0)   # 이 시각 이후 캔들에서 강제 청산

SETTLEMENT_DAYS = 2   # T+2


def to_exchange_time(dt: datetime) -> datetime:
    """거래소 현지 시각으로 변환. naive datetime은 이미 현지 시각으로 간주."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(EXCHANGE_TZ)


def is_weekday(d: date) -> bool:
    """월(0) ~ 금(4)."""
    return d.weekday() < 5


def is_regular_session(dt: datetime) -> bool:
    """정규장 여부: 평일 [09:30:00, 16:00:00)."""
    local = to_exchange_time(dt)
    return is_weekday(local.date()) and MARKET_OPEN <= local.time() < MARKET_CLOSE


def is_end_of_day(dt: datetime) -> bool:
    """장 마감 5분 전(15:55:00) 이후인지."""
    return to_exchange_time(dt).time() >= END_OF_DAY_CUTOFF


def settlement_date(trade_time: datetime, days: int = SETTLEMENT_DAYS) -> date:
    """결제일 계산. 거래일 + days일 후, 주말이면 다음 평일로 밀어낸다."""
    settle = to_exchange_time(trade_time).date() + timedelta(days=days)
    while not is_weekday(settle):
        settle += timedelta(days=1)
    return settle
