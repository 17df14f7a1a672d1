"""
Booking Countdown Timer

Counts down the seat hold of one booking (15 minutes by default), one tick
per second on the session scheduler.

State machine:
    Running(remaining) --tick--> Running(remaining - 1)
    Running(1)         --tick--> Expired   (on_timer_expired fires once)
    Running(<= 300)    --extend--> Running(remaining + 300), cooldown 60s

Extension:
- only while not expired, remaining <= threshold and not in cooldown
- the remote extension is awaited first; time is added only on success
- the cooldown handle is owned by the session scheduler and is cancelled
  by dispose(), so nothing mutates the timer after it is disposed
"""

from collections.abc import Awaitable, Callable
from typing import Any, Optional

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.scheduling.i_task_scheduler import IScheduledHandle, ITaskScheduler
from src.service.booking_timer.domain.entity.booking_timer_state import BookingTimerState
from src.service.booking_timer.domain.enum import TimerUrgency
from src.service.shared_kernel.app.interface import IUserNotifier


ExpiredCallback = Callable[[], None]
ExtendCallable = Callable[[], Awaitable[Any]]


class BookingCountdownTimer:
    def __init__(
        self,
        *,
        initial_seconds: int = settings.BOOKING_TIMER_SECONDS,
        on_timer_expired: Optional[ExpiredCallback] = None,
        on_extend: Optional[ExtendCallable] = None,
        notifier: Optional[IUserNotifier] = None,
        tick_interval: float = settings.BOOKING_TIMER_TICK_INTERVAL,
        extension_seconds: int = settings.BOOKING_TIMER_EXTENSION_SECONDS,
        extension_threshold: int = settings.BOOKING_TIMER_EXTENSION_THRESHOLD,
        extension_cooldown: float = settings.BOOKING_TIMER_EXTENSION_COOLDOWN,
        hurry_seconds: int = settings.BOOKING_TIMER_HURRY_SECONDS,
        critical_seconds: int = settings.BOOKING_TIMER_CRITICAL_SECONDS,
    ) -> None:
        self.initial_seconds = initial_seconds
        self.on_timer_expired = on_timer_expired
        self.on_extend = on_extend
        self.notifier = notifier
        self.tick_interval = tick_interval
        self.extension_seconds = extension_seconds
        self.extension_threshold = extension_threshold
        self.extension_cooldown = extension_cooldown
        self.hurry_seconds = hurry_seconds
        self.critical_seconds = critical_seconds

        self._remaining = max(initial_seconds, 0)
        self._is_expired = False
        self._can_extend = True
        self._extending = False
        self._expired_fired = False
        self._disposed = False
        self._scheduler: Optional[ITaskScheduler] = None
        self._tick_handle: Optional[IScheduledHandle] = None
        self._cooldown_handle: Optional[IScheduledHandle] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def is_expired(self) -> bool:
        return self._is_expired

    @property
    def can_extend(self) -> bool:
        return self._can_extend

    @property
    def is_running(self) -> bool:
        return self._tick_handle is not None and self._tick_handle.active

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> BookingTimerState:
        return BookingTimerState(
            initial_seconds=self.initial_seconds,
            remaining_seconds=self._remaining,
            is_expired=self._is_expired,
            can_extend=self._can_extend,
        )

    @property
    def can_extend_now(self) -> bool:
        return (
            self.on_extend is not None
            and self._scheduler is not None
            and not self._disposed
            and not self._extending
            and self._can_extend
            and not self._is_expired
            and self._remaining <= self.extension_threshold
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, scheduler: ITaskScheduler) -> None:
        """Begin ticking; calling it again while running does nothing"""
        if self._disposed:
            raise RuntimeError('BookingCountdownTimer is disposed')
        self._scheduler = scheduler
        if self._is_expired or self.is_running:
            return
        if self._remaining <= 0:
            self._expire()
            return

        self._tick_handle = scheduler.call_every(
            self.tick_interval, self.tick, name='booking-timer-tick'
        )
        Logger.base.info(f'⏱️ [TIMER] Started with {self.formatted} remaining')

    def tick(self) -> None:
        if self._disposed or self._is_expired:
            return
        self._remaining -= 1
        if self._remaining <= 0:
            self._remaining = 0
            self._expire()

    def _expire(self) -> None:
        self._is_expired = True
        if self._tick_handle is not None:
            self._tick_handle.cancel()
        if self._expired_fired:
            return
        self._expired_fired = True
        Logger.base.warning('⌛ [TIMER] Booking time expired')
        if self.on_timer_expired is not None:
            self.on_timer_expired()

    async def extend(self) -> bool:
        """
        Add extension_seconds after the remote extension succeeds

        Returns:
            True when time was added
        """
        on_extend, scheduler = self.on_extend, self._scheduler
        if on_extend is None or scheduler is None or not self.can_extend_now:
            Logger.base.info(f'🚫 [TIMER] Extension not allowed at {self.formatted}')
            return False

        self._extending = True
        try:
            result = await on_extend()
        except Exception as e:
            Logger.base.error(f'❌ [TIMER] Failed to extend booking timer: {e}')
            if self.notifier is not None:
                self.notifier.error('Failed to extend booking time')
            return False
        finally:
            self._extending = False

        if result is False:
            if self.notifier is not None:
                self.notifier.error('Failed to extend booking time')
            return False

        if self._disposed or self._is_expired:
            Logger.base.info('🗑️ [TIMER] Extension arrived after the timer ended, ignored')
            return False

        self._remaining += self.extension_seconds
        self._can_extend = False
        self._cooldown_handle = scheduler.call_later(
            self.extension_cooldown, self._end_cooldown, name='booking-timer-cooldown'
        )
        Logger.base.info(f'➕ [TIMER] Extended by {self.extension_seconds}s, now {self.formatted}')
        return True

    def _end_cooldown(self) -> None:
        if self._disposed:
            return
        self._can_extend = True
        self._cooldown_handle = None

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for handle in (self._tick_handle, self._cooldown_handle):
            if handle is not None:
                handle.cancel()
        self._tick_handle = None
        self._cooldown_handle = None

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    @property
    def formatted(self) -> str:
        minutes, seconds = divmod(self._remaining, 60)
        return f'{minutes}:{seconds:02d}'

    @property
    def progress_percentage(self) -> float:
        if self.initial_seconds <= 0:
            return 0.0
        return min(max(self._remaining / self.initial_seconds * 100, 0.0), 100.0)

    @property
    def urgency(self) -> TimerUrgency:
        if self._remaining <= self.critical_seconds:
            return TimerUrgency.CRITICAL
        if self._remaining <= self.hurry_seconds:
            return TimerUrgency.HURRY
        if self._remaining <= self.extension_threshold:
            return TimerUrgency.WARNING
        return TimerUrgency.NORMAL

    @property
    def show_hurry_warning(self) -> bool:
        return not self._is_expired and self._remaining <= self.hurry_seconds
