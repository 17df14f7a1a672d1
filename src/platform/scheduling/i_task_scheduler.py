"""
Task Scheduler Interface

Timers of a booking session (countdown tick, ledger purge, extension
cooldown, autosave) are scheduled through this port so that every pending
callback belongs to the session and dies with it.
"""

from collections.abc import Awaitable, Callable
from typing import Optional, Protocol


ScheduledCallback = Callable[[], Awaitable[None] | None]


class IScheduledHandle(Protocol):
    @property
    def active(self) -> bool:
        """True until cancelled or (for one-shot tasks) finished"""
        ...

    def cancel(self) -> None:
        """Cancel the task; safe to call more than once"""
        ...


class ITaskScheduler(Protocol):
    def call_later(
        self, delay: float, callback: ScheduledCallback, *, name: Optional[str] = None
    ) -> IScheduledHandle:
        """
        Run callback once after delay seconds

        Args:
            delay: Seconds to wait
            callback: Sync or async callable without arguments
            name: Label used in logs

        Returns:
            Handle that cancels the pending call
        """
        ...

    def call_every(
        self, interval: float, callback: ScheduledCallback, *, name: Optional[str] = None
    ) -> IScheduledHandle:
        """
        Run callback every interval seconds until cancelled

        The first call happens one interval after scheduling.
        """
        ...
