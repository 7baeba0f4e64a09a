"""시간 및 nonce 관련 헬퍼."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

TimeSource = Callable[[], float]


def to_milliseconds(seconds: float) -> int:
    """초 단위 POSIX 타임스탬프를 밀리초 정수로 변환한다."""
    return int(seconds * 1000)


def now_millis(time_source: TimeSource = time.time) -> int:
    """현재 시각의 밀리초 타임스탬프."""
    return to_milliseconds(time_source())


class NonceClock:
    """같은 자격 증명으로 보내는 요청에 엄격히 증가하는 nonce 를 발급한다.

    벽시계가 같은 밀리초에 머물거나 뒤로 가더라도 직전 값보다 1 큰 값을
    돌려준다. 여러 스레드가 하나의 인스턴스를 공유해도 된다.
    """

    def __init__(self, time_source: TimeSource = time.time, *, last: Optional[int] = None) -> None:
        self._time_source = time_source
        self._last = last
        self._lock = threading.Lock()

    @property
    def last(self) -> Optional[int]:
        """마지막으로 발급한 nonce."""
        return self._last

    def next_nonce(self) -> int:
        with self._lock:
            candidate = now_millis(self._time_source)
            if self._last is not None and candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate

    __call__ = next_nonce


__all__ = [
    "NonceClock",
    "TimeSource",
    "now_millis",
    "to_milliseconds",
]
