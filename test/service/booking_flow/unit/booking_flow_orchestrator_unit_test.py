"""
Unit tests for BookingFlowOrchestrator

Test Coverage:
1. Happy path through all five steps
2. Failed awaited calls never advance the step
3. Timer expiry sends the user back to seat selection
4. Timer extension through the API
5. reset_flow() drops in-flight responses
6. Locked seats, not the live selection, are booked
"""

from unittest.mock import AsyncMock

import anyio
import pytest

from src.platform.cache.ttl_cache import TtlCache
from src.platform.exception.exceptions import ApiError
from src.service.booking_flow.app.booking_flow_orchestrator import BookingFlowOrchestrator
from src.service.booking_flow.domain.enum import BookingStep
from src.service.catalog.app.query.event_catalog_use_case import EventCatalogUseCase
from src.service.optimistic_ui.app.optimistic_action_ledger import OptimisticActionLedger
from src.service.seat_selection.app.command.optimistic_seat_selection_use_case import (
    OptimisticSeatSelectionUseCase,
)
from src.service.seat_selection.app.dto import SeatPage
from src.service.seat_selection.app.query.seat_pagination_loader import SeatPaginationLoader
from src.service.seat_selection.domain.aggregate.seat_map_aggregate import SeatMap
from src.service.shared_kernel.domain.enum import NotificationLevel
from test.unit_helpers import make_seat


pytestmark = pytest.mark.unit

EVENT = {'id': 'event-1', 'title': 'Concert'}
SHOW = {'id': 'show-1', 'showStartTime': '2026-11-01T19:00:00'}
SHOW_2 = {'id': 'show-2', 'showStartTime': '2026-11-02T19:00:00'}


class FlowFixture:
    def __init__(self, *, notifier, scheduler, storage) -> None:
        self.api = AsyncMock()
        self.api.list_events.return_value = [EVENT]
        self.api.get_event_details.return_value = {**EVENT, 'shows': [SHOW]}
        self.api.get_show_seats.return_value = SeatPage(
            seats=[make_seat('A1'), make_seat('A2'), make_seat('A3')]
        )
        self.api.select_seat.return_value = True
        self.api.deselect_seat.return_value = True
        self.api.lock_seats.return_value = {'success': True}
        self.api.start_booking_timer.return_value = {'remainingSeconds': 600}
        self.api.extend_booking_timer.return_value = {'remainingSeconds': 480}
        self.api.get_booking_timer.return_value = {'remainingSeconds': 480}
        self.api.create_booking.return_value = {'id': 'booking-1', 'status': 'Confirmed'}

        self.notifier = notifier
        self.scheduler = scheduler
        self.seat_map = SeatMap(user_id='user_1', max_seats=8)
        self.ledger = OptimisticActionLedger(clock=scheduler.clock)
        self.flow = BookingFlowOrchestrator(
            booking_api=self.api,
            event_catalog=EventCatalogUseCase(
                catalog_api=self.api,
                storage=storage,
                data_cache=TtlCache(default_ttl=120, clock=scheduler.clock),
            ),
            seat_loader=SeatPaginationLoader(
                seat_query_repo=self.api, seat_map=self.seat_map, notifier=notifier
            ),
            seat_selection=OptimisticSeatSelectionUseCase(
                seat_map=self.seat_map,
                ledger=self.ledger,
                notifier=notifier,
                seat_command_repo=self.api,
            ),
            notifier=notifier,
            scheduler=scheduler,
        )

    async def advance_to_seat_selection(self) -> None:
        await self.flow.load_events()
        assert await self.flow.select_event(EVENT)
        assert await self.flow.select_show(SHOW)

    async def advance_to_checkout(self) -> None:
        await self.advance_to_seat_selection()
        assert await self.flow.toggle_seat('A1')
        assert await self.flow.toggle_seat('A2')
        assert await self.flow.confirm_seats()


@pytest.fixture
def ctx(notifier, fake_scheduler, storage) -> FlowFixture:
    return FlowFixture(notifier=notifier, scheduler=fake_scheduler, storage=storage)


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_walks_through_every_step(self, ctx):
        flow = ctx.flow
        assert flow.current_step == BookingStep.SELECT_EVENT

        assert await flow.load_events() == [EVENT]

        assert await flow.select_event(EVENT) is True
        assert flow.current_step == BookingStep.SELECT_SHOW
        assert flow.shows == [SHOW]

        assert await flow.select_show(SHOW) is True
        assert flow.current_step == BookingStep.SELECT_SEATS
        assert len(ctx.seat_map.seats) == 3

        assert await flow.toggle_seat('A1') is True
        assert await flow.toggle_seat('A2') is True
        assert flow.selected_seat_ids == ['A1', 'A2']
        assert flow.total_price == 200.0

        assert await flow.confirm_seats() is True
        assert flow.current_step == BookingStep.CHECKOUT
        ctx.api.lock_seats.assert_awaited_once_with(show_id='show-1', seat_ids=['A1', 'A2'])
        ctx.api.start_booking_timer.assert_awaited_once_with(
            show_id='show-1', seat_ids=['A1', 'A2']
        )
        assert flow.timer is not None
        assert flow.timer.remaining_seconds == 600

        booking = await flow.complete_booking({'customerName': 'Jane'})

        assert booking == {'id': 'booking-1', 'status': 'Confirmed'}
        assert flow.current_step == BookingStep.CONFIRMATION
        assert flow.booking == booking
        assert flow.timer is None
        ctx.api.create_booking.assert_awaited_once_with(
            booking_data={'customerName': 'Jane', 'showId': 'show-1', 'seatIds': ['A1', 'A2']}
        )
        assert ctx.scheduler.active_handles('booking-timer-tick') == []

    @pytest.mark.asyncio
    async def test_missing_remaining_seconds_defaults_to_900(self, ctx):
        ctx.api.start_booking_timer.return_value = {}

        await ctx.advance_to_checkout()

        assert ctx.flow.timer.remaining_seconds == 900


class TestFailuresKeepStep:
    @pytest.mark.asyncio
    async def test_confirm_with_empty_selection_is_rejected(self, ctx):
        await ctx.advance_to_seat_selection()

        assert await ctx.flow.confirm_seats() is False
        assert ctx.flow.current_step == BookingStep.SELECT_SEATS
        ctx.api.lock_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lock_rejection_keeps_seat_step(self, ctx):
        await ctx.advance_to_seat_selection()
        await ctx.flow.toggle_seat('A1')
        ctx.api.lock_seats.side_effect = ApiError('Seats no longer available', 409)

        assert await ctx.flow.confirm_seats() is False

        assert ctx.flow.current_step == BookingStep.SELECT_SEATS
        assert ctx.flow.error == 'Seats no longer available'
        assert ctx.flow.is_loading is False
        assert ctx.flow.timer is None
        ctx.api.start_booking_timer.assert_not_awaited()
        assert 'Seats no longer available' in ctx.notifier.messages(NotificationLevel.ERROR)

    @pytest.mark.asyncio
    async def test_booking_failure_keeps_checkout_step(self, ctx):
        await ctx.advance_to_checkout()
        ctx.api.create_booking.side_effect = ApiError('Payment declined', 402)

        assert await ctx.flow.complete_booking({}) is None

        assert ctx.flow.current_step == BookingStep.CHECKOUT
        assert ctx.flow.error == 'Payment declined'
        assert ctx.flow.timer is not None

    @pytest.mark.asyncio
    async def test_show_load_failure_keeps_show_step(self, ctx):
        await ctx.flow.select_event(EVENT)
        ctx.api.get_show_seats.side_effect = ApiError('boom', 500)

        assert await ctx.flow.select_show(SHOW) is False
        assert ctx.flow.current_step == BookingStep.SELECT_SHOW

    @pytest.mark.asyncio
    async def test_failed_show_switch_keeps_current_show_and_selection(self, ctx):
        # Given: show-1 loaded with A1 selected
        await ctx.advance_to_seat_selection()
        assert await ctx.flow.toggle_seat('A1')
        ctx.api.get_show_seats.side_effect = ApiError('boom', 500)

        # When: switching to show-2 fails
        assert await ctx.flow.select_show(SHOW_2) is False

        # Then: the flow still points at show-1 with its seats and selection
        assert ctx.flow.selected_show == SHOW
        assert ctx.flow.current_step == BookingStep.SELECT_SEATS
        assert ctx.flow.seat_loader.show_id == 'show-1'
        assert [s.key for s in ctx.seat_map.seats] == ['A1', 'A2', 'A3']
        assert ctx.flow.selected_seat_ids == ['A1']
        assert ctx.flow.error == 'Failed to load seat information'

    @pytest.mark.asyncio
    async def test_event_details_failure_keeps_event_step(self, ctx):
        ctx.api.get_event_details.side_effect = ApiError('boom', 500)

        assert await ctx.flow.select_event(EVENT) is False
        assert ctx.flow.current_step == BookingStep.SELECT_EVENT
        assert ctx.flow.error is not None

    @pytest.mark.asyncio
    async def test_seat_toggle_outside_seat_step_is_ignored(self, ctx):
        assert await ctx.flow.toggle_seat('A1') is False
        ctx.api.select_seat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flow_allows_eight_seats(self, ctx):
        ctx.api.get_show_seats.return_value = SeatPage(
            seats=[make_seat(f'A{i}') for i in range(1, 11)]
        )
        await ctx.advance_to_seat_selection()

        results = [await ctx.flow.toggle_seat(f'A{i}') for i in range(1, 10)]

        assert results == [True] * 8 + [False]
        assert len(ctx.flow.selected_seat_ids) == 8


class TestTimer:
    @pytest.mark.asyncio
    async def test_expiry_returns_to_seat_selection_with_empty_selection(self, ctx):
        await ctx.advance_to_checkout()

        await ctx.scheduler.advance(600)

        assert ctx.flow.current_step == BookingStep.SELECT_SEATS
        assert ctx.flow.selected_seat_ids == []
        assert ctx.flow.timer is None
        assert ctx.notifier.messages(NotificationLevel.WARNING) == [
            'Your booking session has expired. Please select seats again.'
        ]
        assert ctx.scheduler.active_handles() == []

    @pytest.mark.asyncio
    async def test_extend_timer_calls_api_and_refreshes_timer_info(self, ctx):
        await ctx.advance_to_checkout()
        await ctx.scheduler.advance(400)

        assert await ctx.flow.extend_timer() is True

        assert ctx.flow.timer.remaining_seconds == 500
        ctx.api.extend_booking_timer.assert_awaited_once_with(show_id='show-1')
        assert ctx.flow.booking_timer == {'remainingSeconds': 480}

    @pytest.mark.asyncio
    async def test_extend_timer_without_timer_is_noop(self, ctx):
        assert await ctx.flow.extend_timer() is False

    @pytest.mark.asyncio
    async def test_booking_accepted_after_expiry_is_still_recorded(self, ctx):
        # Given: checkout with create_booking held open
        await ctx.advance_to_checkout()
        release = anyio.Event()

        async def slow_booking(**kwargs):
            await release.wait()
            return {'id': 'booking-1', 'status': 'Confirmed'}

        ctx.api.create_booking.side_effect = slow_booking
        results: list = []

        async def complete() -> None:
            results.append(await ctx.flow.complete_booking({}))

        with anyio.fail_after(2):
            async with anyio.create_task_group() as tg:
                tg.start_soon(complete)
                await anyio.sleep(0.01)

                # When: the hold expires before the server answers
                await ctx.scheduler.advance(600)
                assert ctx.flow.current_step == BookingStep.SELECT_SEATS
                release.set()

        # Then: the server-side booking is not lost
        assert results == [{'id': 'booking-1', 'status': 'Confirmed'}]
        assert ctx.flow.booking == {'id': 'booking-1', 'status': 'Confirmed'}
        assert ctx.flow.current_step == BookingStep.CONFIRMATION
        assert ctx.flow.timer is None
        assert ctx.notifier.messages(NotificationLevel.SUCCESS)[-1] == 'Booking confirmed!'


class TestLockedSeats:
    @pytest.mark.asyncio
    async def test_selection_is_frozen_while_seats_lock_and_locked_seats_are_booked(self, ctx):
        # Given: A1 selected, lock_seats held open
        await ctx.advance_to_seat_selection()
        assert await ctx.flow.toggle_seat('A1')
        release = anyio.Event()

        async def slow_lock(**kwargs):
            await release.wait()
            return {'success': True}

        ctx.api.lock_seats.side_effect = slow_lock
        toggles: list[bool] = []

        async def confirm() -> None:
            assert await ctx.flow.confirm_seats()

        with anyio.fail_after(2):
            async with anyio.create_task_group() as tg:
                tg.start_soon(confirm)
                await anyio.sleep(0.01)

                # When: the user tries to change the selection mid-lock
                toggles.append(await ctx.flow.toggle_seat('A2'))
                toggles.append(await ctx.flow.toggle_seat('A1'))
                release.set()

        # Then
        assert toggles == [False, False]
        assert ctx.flow.locked_seat_ids == ['A1']
        assert ctx.flow.current_step == BookingStep.CHECKOUT

        await ctx.flow.complete_booking({})

        ctx.api.create_booking.assert_awaited_once_with(
            booking_data={'showId': 'show-1', 'seatIds': ['A1']}
        )

    @pytest.mark.asyncio
    async def test_booking_uses_locked_seats_even_if_selection_drifted(self, ctx):
        await ctx.advance_to_checkout()
        # The selection changes after the seats were locked
        ctx.seat_map.deselect('A2')

        await ctx.flow.complete_booking({})

        ctx.api.create_booking.assert_awaited_once_with(
            booking_data={'showId': 'show-1', 'seatIds': ['A1', 'A2']}
        )

    @pytest.mark.asyncio
    async def test_expiry_clears_locked_seats(self, ctx):
        await ctx.advance_to_checkout()

        await ctx.scheduler.advance(600)

        assert ctx.flow.locked_seat_ids == []


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_returns_to_start_and_disposes_timer(self, ctx):
        await ctx.advance_to_checkout()
        timer = ctx.flow.timer

        ctx.flow.reset_flow()

        assert ctx.flow.current_step == BookingStep.SELECT_EVENT
        assert ctx.flow.selected_show is None
        assert timer.is_disposed
        assert ctx.seat_map.seats == []
        assert ctx.scheduler.active_handles() == []

    @pytest.mark.asyncio
    async def test_response_after_leave_is_dropped(self, ctx):
        await ctx.advance_to_seat_selection()
        await ctx.flow.toggle_seat('A1')
        release = anyio.Event()

        async def slow_lock(**kwargs):
            await release.wait()
            return {'success': True}

        ctx.api.lock_seats.side_effect = slow_lock
        results: list[bool] = []

        async def confirm() -> None:
            results.append(await ctx.flow.confirm_seats())

        with anyio.fail_after(2):
            async with anyio.create_task_group() as tg:
                tg.start_soon(confirm)
                await anyio.sleep(0.01)
                assert ctx.flow.is_loading is True

                ctx.flow.leave()
                release.set()

        assert results == [False]
        assert ctx.flow.current_step == BookingStep.SELECT_EVENT
        assert ctx.flow.timer is None
        assert ctx.flow.is_loading is False

    @pytest.mark.asyncio
    async def test_booking_confirmed_after_leave_is_reported(self, ctx):
        await ctx.advance_to_checkout()
        release = anyio.Event()

        async def slow_booking(**kwargs):
            await release.wait()
            return {'id': 'booking-7', 'status': 'Confirmed'}

        ctx.api.create_booking.side_effect = slow_booking
        results: list = []

        async def complete() -> None:
            results.append(await ctx.flow.complete_booking({}))

        with anyio.fail_after(2):
            async with anyio.create_task_group() as tg:
                tg.start_soon(complete)
                await anyio.sleep(0.01)

                ctx.flow.leave()
                release.set()

        assert results == [None]
        assert ctx.flow.booking is None
        assert ctx.flow.current_step == BookingStep.SELECT_EVENT
        assert ctx.notifier.messages(NotificationLevel.INFO) == ['Booking booking-7 was confirmed']
