"""
Unit tests for BookingCountdownTimer

Test Coverage:
1. Ticking and one-shot expiry (900 ticks)
2. Extension eligibility, success, failure and cooldown
3. dispose() stops every callback
4. Presentation helpers
"""

from unittest.mock import AsyncMock, Mock

import anyio
import pytest

from src.platform.exception.exceptions import ApiError
from src.service.booking_timer.domain.booking_countdown_timer import BookingCountdownTimer
from src.service.booking_timer.domain.entity.booking_timer_state import BookingTimerState
from src.service.booking_timer.domain.enum import TimerUrgency
from src.service.shared_kernel.domain.enum import NotificationLevel


pytestmark = pytest.mark.unit


def make_timer(initial_seconds: int = 900, **kwargs) -> BookingCountdownTimer:
    kwargs.setdefault('on_timer_expired', Mock())
    return BookingCountdownTimer(
        initial_seconds=initial_seconds,
        tick_interval=1,
        extension_seconds=300,
        extension_threshold=300,
        extension_cooldown=60,
        hurry_seconds=120,
        critical_seconds=60,
        **kwargs,
    )


class TestTicking:
    @pytest.mark.asyncio
    async def test_each_tick_decrements_by_one(self, fake_scheduler):
        timer = make_timer()
        timer.start(fake_scheduler)

        await fake_scheduler.advance(10)

        assert timer.remaining_seconds == 890
        assert timer.state == BookingTimerState(
            initial_seconds=900, remaining_seconds=890, is_expired=False, can_extend=True
        )

    @pytest.mark.asyncio
    async def test_expires_after_900_ticks_and_fires_once(self, fake_scheduler):
        on_expired = Mock()
        timer = make_timer(on_timer_expired=on_expired)
        timer.start(fake_scheduler)

        await fake_scheduler.advance(899)
        assert timer.remaining_seconds == 1
        on_expired.assert_not_called()

        await fake_scheduler.advance(1)
        assert timer.remaining_seconds == 0
        assert timer.is_expired
        on_expired.assert_called_once_with()

        # Then: further time, ticks and restarts do not re-fire
        await fake_scheduler.advance(100)
        timer.tick()
        timer.start(fake_scheduler)
        assert timer.remaining_seconds == 0
        on_expired.assert_called_once()
        assert fake_scheduler.active_handles() == []

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, fake_scheduler):
        timer = make_timer()
        timer.start(fake_scheduler)
        timer.start(fake_scheduler)

        await fake_scheduler.advance(5)

        assert timer.remaining_seconds == 895
        assert len(fake_scheduler.active_handles('booking-timer-tick')) == 1

    @pytest.mark.parametrize('initial_seconds', [0, -5])
    def test_non_positive_start_expires_immediately(self, fake_scheduler, initial_seconds):
        on_expired = Mock()
        timer = make_timer(initial_seconds, on_timer_expired=on_expired)

        timer.start(fake_scheduler)

        assert timer.is_expired
        assert timer.remaining_seconds == 0
        on_expired.assert_called_once()

    def test_reentrant_expiry_callback_does_not_refire(self, fake_scheduler):
        calls: list[str] = []

        def on_expired() -> None:
            calls.append('expired')
            timer.tick()
            timer.start(fake_scheduler)

        timer = make_timer(1, on_timer_expired=on_expired)
        timer.start(fake_scheduler)
        timer.tick()

        assert calls == ['expired']


class TestExtension:
    @pytest.mark.asyncio
    async def test_not_eligible_above_threshold(self, fake_scheduler):
        on_extend = AsyncMock()
        timer = make_timer(on_extend=on_extend)
        timer.start(fake_scheduler)

        assert timer.can_extend_now is False
        assert await timer.extend() is False
        on_extend.assert_not_awaited()
        assert timer.remaining_seconds == 900

    @pytest.mark.asyncio
    async def test_extension_adds_300_then_cooldown_blocks_second_extend(self, fake_scheduler):
        on_extend = AsyncMock(return_value={'remainingSeconds': 550})
        timer = make_timer(on_extend=on_extend)
        timer.start(fake_scheduler)
        await fake_scheduler.advance(650)
        assert timer.remaining_seconds == 250

        # When: extend inside the window
        assert await timer.extend() is True

        # Then: +300 and cooldown active
        assert timer.remaining_seconds == 550
        assert timer.can_extend is False

        # And: a second extend inside the cooldown changes nothing
        await fake_scheduler.advance(30)
        assert await timer.extend() is False
        assert timer.remaining_seconds == 520
        on_extend.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cooldown_re_enables_extension_after_60_seconds(self, fake_scheduler):
        timer = make_timer(200, on_extend=AsyncMock())
        timer.start(fake_scheduler)
        await timer.extend()

        await fake_scheduler.advance(59)
        assert timer.can_extend is False

        await fake_scheduler.advance(1)
        assert timer.can_extend is True

    @pytest.mark.asyncio
    async def test_remote_failure_leaves_state_unchanged(self, fake_scheduler, notifier):
        timer = make_timer(
            200, on_extend=AsyncMock(side_effect=ApiError('nope', 500)), notifier=notifier
        )
        timer.start(fake_scheduler)

        assert await timer.extend() is False

        assert timer.remaining_seconds == 200
        assert timer.can_extend is True
        assert notifier.messages(NotificationLevel.ERROR) == ['Failed to extend booking time']

    @pytest.mark.asyncio
    async def test_concurrent_extend_is_rejected(self, fake_scheduler):
        release = anyio.Event()
        calls: list[str] = []

        async def slow_extend() -> dict:
            calls.append('extend')
            await release.wait()
            return {}

        timer = make_timer(200, on_extend=slow_extend)
        timer.start(fake_scheduler)
        results: list[bool] = []

        async def extend() -> None:
            results.append(await timer.extend())

        with anyio.fail_after(2):
            async with anyio.create_task_group() as tg:
                tg.start_soon(extend)
                await anyio.sleep(0.01)
                assert await timer.extend() is False
                release.set()

        assert results == [True]
        assert calls == ['extend']
        assert timer.remaining_seconds == 500

    @pytest.mark.asyncio
    async def test_extension_unavailable_without_remote_call(self, fake_scheduler):
        timer = make_timer(200)
        timer.start(fake_scheduler)

        assert timer.can_extend_now is False
        assert await timer.extend() is False

    @pytest.mark.asyncio
    async def test_extend_before_start_is_refused_without_remote_call(self):
        on_extend = AsyncMock()
        timer = make_timer(200, on_extend=on_extend)

        assert await timer.extend() is False
        on_extend.assert_not_awaited()
        assert timer.remaining_seconds == 200


class TestDispose:
    @pytest.mark.asyncio
    async def test_dispose_stops_ticks_and_cooldown(self, fake_scheduler):
        timer = make_timer(200, on_extend=AsyncMock())
        timer.start(fake_scheduler)
        await timer.extend()

        timer.dispose()
        timer.dispose()
        await fake_scheduler.advance(120)

        assert timer.remaining_seconds == 500
        assert timer.can_extend is False
        assert fake_scheduler.active_handles() == []

    def test_start_after_dispose_is_refused(self, fake_scheduler):
        timer = make_timer()
        timer.dispose()

        with pytest.raises(RuntimeError):
            timer.start(fake_scheduler)


class TestPresentation:
    def test_formatted(self):
        assert make_timer(900).formatted == '15:00'
        assert make_timer(65).formatted == '1:05'
        assert make_timer(0).formatted == '0:00'

    @pytest.mark.asyncio
    async def test_progress_is_clamped(self, fake_scheduler):
        timer = make_timer(200, on_extend=AsyncMock())
        assert timer.progress_percentage == 100.0

        timer.start(fake_scheduler)
        await fake_scheduler.advance(100)
        assert timer.progress_percentage == 50.0

        await timer.extend()
        assert timer.progress_percentage == 100.0

    @pytest.mark.parametrize(
        ('remaining', 'urgency', 'hurry'),
        [
            (900, TimerUrgency.NORMAL, False),
            (300, TimerUrgency.WARNING, False),
            (120, TimerUrgency.HURRY, True),
            (60, TimerUrgency.CRITICAL, True),
        ],
    )
    def test_urgency_bands(self, remaining, urgency, hurry):
        timer = make_timer(remaining)

        assert timer.urgency == urgency
        assert timer.show_hurry_warning is hurry
