"""
이동평균(SMA) 지표 모듈.

[ 역할 ]
    종가를 한 개씩 받아 최근 N개의 단순 이동평균을 계산하는 스트리밍 지표.
    N개가 모이기 전까지는 값이 없다(None).

[ 호출하는 곳 ]
    - strategies/sma_crossover.py에서 매 캔들 종가를 add()

[ 재현성 ]
    value는 add() 시점에 한 번만 계산되어 저장된다.
    조회 횟수와 무관하게 같은 입력 시퀀스 → 같은 출력 시퀀스.
"""

from collections import deque
from typing import Optional, Sequence


def sma(prices: Sequence[float], bars: int) -> Optional[float]:
    """리스트 끝에서부터 bars개 가격의 단순 평균.

    bars가 리스트 길이보다 크면 전체 가격을 사용한다.
    """
    if not prices or bars <= 0:
        return None
    window = prices[-bars:] if bars < len(prices) else prices
    return sum(window) / len(window)


class SimpleMovingAverage:
    """스트리밍 단순 이동평균.

    사용법:
        ma = SimpleMovingAverage(2)
        ma.add(23.1)    # ma.value → None
        ma.add(10.45)   # ma.value → 16.775
        ma.add(4.32)    # ma.value → 7.385 (23.1은 윈도우에서 제거)
    """

    def __init__(self, window: int):
        if window <= 0:
            raise ValueError(f"이동평균 기간은 1 이상이어야 함: {window}")
        self._window = window
        self._prices: deque[float] = deque(maxlen=window)
        self._value: Optional[float] = None

    @property
    def window(self) -> int:
        return self._window

    @property
    def value(self) -> Optional[float]:
        """현재 이동평균. 워밍업 중이면 None."""
        return self._value

    @property
    def is_ready(self) -> bool:
        return self._value is not None

    def add(self, price: float) -> Optional[float]:
        """가격 추가. 윈도우가 가득 차 있으면 가장 오래된 가격을 버린다."""
        self._prices.append(price)
        if len(self._prices) == self._window:
            self._value = sum(self._prices) / self._window
        return self._value

    def reset(self) -> None:
        self._prices.clear()
        self._value = None

    def __len__(self) -> int:
        return len(self._prices)
