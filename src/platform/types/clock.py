"""
Clock types

Time sources are injected wherever ages or TTLs are computed so that
tests can drive them by hand.
"""

import time
from typing import Callable


# Seconds as float; only differences between two readings are meaningful
Clock = Callable[[], float]

monotonic_clock: Clock = time.monotonic
wall_clock: Clock = time.time


def epoch_ms(clock: Clock = wall_clock) -> int:
    return int(clock() * 1000)
