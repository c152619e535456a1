import math
import threading
from typing import Callable, Generic, TypeVar

import numpy as np

T = TypeVar("T")

_UNSET = object()


class Delay(Generic[T]):
    """
    A value computed on first use, at most once, and kept for the lifetime of its owner.
    """

    def __init__(self, compute: Callable[[], T]):
        self._compute = compute
        self._lock = threading.Lock()
        self._value = _UNSET

    @property
    def realized(self) -> bool:
        return self._value is not _UNSET

    def get(self) -> T:
        if self._value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    self._value = self._compute()
        return self._value


def line_normal(a, b) -> np.ndarray:
    """
    The 2D normal of the segment from b to a, i.e. their difference rotated by 90 degrees.
    """
    x, y = a[0] - b[0], a[1] - b[1]
    return np.array([-y, x], dtype=float)


def one_over_norm(vector) -> float:
    return 1 / math.sqrt(sum(item * item for item in vector))


def sign(value) -> int:
    return (value > 0) - (value < 0)
