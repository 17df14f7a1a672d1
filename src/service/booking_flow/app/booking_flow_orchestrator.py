"""
Booking Flow Orchestrator

Drives one customer through the booking steps:

    SELECT_EVENT(0) -> SELECT_SHOW(1) -> SELECT_SEATS(2) -> CHECKOUT(3) -> CONFIRMATION(4)

Rules:
- every forward step is user-triggered and only taken after its awaited
  call succeeded; a failure stores `error`, notifies, and keeps the step
- reset_flow()/leave() bump the flow generation; a response started under
  an older generation is dropped when it arrives
- the seats locked by confirm_seats() are the seats booked by
  complete_booking(); the selection is frozen while either call is in flight
- hold timer expiry sends the user back to SELECT_SEATS with an empty
  selection, unless a booking the server already accepted arrives later
"""

from typing import Any, Callable, Optional

from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.scheduling.i_task_scheduler import ITaskScheduler
from src.service.booking_flow.app.interface import IBookingFlowApi
from src.service.booking_flow.domain.enum import BookingStep
from src.service.booking_timer.domain.booking_countdown_timer import BookingCountdownTimer
from src.service.catalog.app.query.event_catalog_use_case import EventCatalogUseCase
from src.service.seat_selection.app.command.optimistic_seat_selection_use_case import (
    OptimisticSeatSelectionUseCase,
)
from src.service.seat_selection.app.query.seat_pagination_loader import SeatPaginationLoader
from src.service.seat_selection.domain.aggregate.seat_map_aggregate import SeatMap
from src.service.seat_selection.domain.entity.seat_entity import Seat
from src.service.shared_kernel.app.interface import IUserNotifier


TimerFactory = Callable[..., BookingCountdownTimer]


class BookingFlowOrchestrator:
    def __init__(
        self,
        *,
        booking_api: IBookingFlowApi,
        event_catalog: EventCatalogUseCase,
        seat_loader: SeatPaginationLoader,
        seat_selection: OptimisticSeatSelectionUseCase,
        notifier: IUserNotifier,
        scheduler: ITaskScheduler,
        timer_factory: TimerFactory = BookingCountdownTimer,
    ) -> None:
        self.booking_api = booking_api
        self.event_catalog = event_catalog
        self.seat_loader = seat_loader
        self.seat_selection = seat_selection
        self.notifier = notifier
        self.scheduler = scheduler
        self.timer_factory = timer_factory
        self.tracer = trace.get_tracer(__name__)

        self._generation = 0
        self._init_state()

    def _init_state(self) -> None:
        self.current_step = BookingStep.SELECT_EVENT
        self.events: list[dict[str, Any]] = []
        self.selected_event: Optional[dict[str, Any]] = None
        self.shows: list[dict[str, Any]] = []
        self.selected_show: Optional[dict[str, Any]] = None
        self.booking_timer: Optional[dict[str, Any]] = None
        self.locked_seat_ids: list[str] = []
        self.booking: Optional[dict[str, Any]] = None
        self.timer: Optional[BookingCountdownTimer] = None
        self.is_loading = False
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    @property
    def seat_map(self) -> SeatMap:
        return self.seat_selection.seat_map

    @property
    def selected_seats(self) -> list[Seat]:
        return self.seat_map.selected_seats()

    @property
    def selected_seat_ids(self) -> list[str]:
        return list(self.seat_map.selected_keys)

    @property
    def total_price(self) -> float:
        return self.seat_map.total_price()

    @property
    def show_id(self) -> Optional[str]:
        return str(self.selected_show['id']) if self.selected_show else None

    # ------------------------------------------------------------------
    # Steps 0-2
    # ------------------------------------------------------------------

    @Logger.io
    async def load_events(self, *, force_refresh: bool = False) -> list[dict[str, Any]]:
        generation = self._begin()
        try:
            events = await self.event_catalog.list_events(force_refresh=force_refresh)
        except CustomBaseError as e:
            self._fail(generation, f'Failed to load events: {e.message}')
            return []
        finally:
            self._end(generation)

        if generation != self._generation:
            return []
        self.events = events
        return events

    @Logger.io
    async def select_event(self, event: dict[str, Any]) -> bool:
        if self.current_step > BookingStep.SELECT_SEATS:
            return False

        generation = self._begin()
        try:
            with self.tracer.start_as_current_span(
                'booking_flow.select_event', attributes={'booking.event_id': str(event['id'])}
            ):
                details = await self.event_catalog.get_event_details(event_id=str(event['id']))
        except CustomBaseError as e:
            self._fail(generation, f'Failed to load shows: {e.message}')
            return False
        finally:
            self._end(generation)

        if generation != self._generation:
            return False
        self.selected_event = event
        self.shows = list(details.get('shows') or [])
        self.selected_show = None
        self.seat_loader.reset()
        self.current_step = BookingStep.SELECT_SHOW
        Logger.base.info(f'🎫 [BOOKING_FLOW] Event {event["id"]} selected, {len(self.shows)} shows')
        return True

    @Logger.io
    async def select_show(self, show: dict[str, Any]) -> bool:
        if not BookingStep.SELECT_SHOW <= self.current_step <= BookingStep.SELECT_SEATS:
            return False

        generation = self._begin()
        try:
            with self.tracer.start_as_current_span(
                'booking_flow.select_show', attributes={'booking.show_id': str(show['id'])}
            ):
                loaded = await self.seat_loader.load_seats(show_id=str(show['id']))
        finally:
            self._end(generation)

        if generation != self._generation:
            return False
        if not loaded:
            # The loader already told the user
            self.error = 'Failed to load seat information'
            return False

        self.selected_show = show
        self.current_step = BookingStep.SELECT_SEATS
        return True

    async def load_more_seats(self) -> bool:
        if self.current_step != BookingStep.SELECT_SEATS:
            return False
        return await self.seat_loader.load_more_seats()

    async def toggle_seat(self, seat_key: str) -> bool:
        if self.current_step != BookingStep.SELECT_SEATS:
            Logger.base.info(f'🚫 [BOOKING_FLOW] Seat toggle ignored at step {self.current_step}')
            return False
        if self.is_loading:
            Logger.base.info(f'⏳ [BOOKING_FLOW] Seat toggle for {seat_key} ignored while loading')
            return False
        return await self.seat_selection.toggle_seat(seat_key)

    # ------------------------------------------------------------------
    # Steps 2-4
    # ------------------------------------------------------------------

    @Logger.io
    async def confirm_seats(self) -> bool:
        if self.current_step != BookingStep.SELECT_SEATS or self.show_id is None:
            return False
        seat_ids = self.selected_seat_ids
        if not seat_ids:
            self.error = 'Please select at least one seat'
            self.notifier.warning(self.error)
            return False

        show_id = self.show_id
        generation = self._begin()
        try:
            with self.tracer.start_as_current_span(
                'booking_flow.confirm_seats',
                attributes={'booking.show_id': show_id, 'booking.seat_count': len(seat_ids)},
            ):
                await self.booking_api.lock_seats(show_id=show_id, seat_ids=seat_ids)
                timer_info = await self.booking_api.start_booking_timer(
                    show_id=show_id, seat_ids=seat_ids
                )
        except CustomBaseError as e:
            self._fail(generation, e.message)
            return False
        finally:
            self._end(generation)

        if generation != self._generation:
            Logger.base.info(f'🗑️ [BOOKING_FLOW] Dropped late seat lock for show {show_id}')
            return False

        remaining = timer_info.get('remainingSeconds')
        self.locked_seat_ids = seat_ids
        self.booking_timer = timer_info
        self._start_timer(
            show_id=show_id,
            initial_seconds=int(remaining) if remaining is not None else settings.BOOKING_TIMER_SECONDS,
        )
        self.current_step = BookingStep.CHECKOUT
        Logger.base.info(f'🔒 [BOOKING_FLOW] Locked {len(seat_ids)} seat(s) for show {show_id}')
        return True

    @Logger.io
    async def complete_booking(self, booking_data: dict[str, Any]) -> Optional[dict[str, Any]]:
        if self.current_step != BookingStep.CHECKOUT or self.show_id is None:
            return None

        show_id = self.show_id
        seat_ids = list(self.locked_seat_ids)
        generation = self._begin()
        try:
            with self.tracer.start_as_current_span(
                'booking_flow.complete_booking',
                attributes={'booking.show_id': show_id, 'booking.seat_count': len(seat_ids)},
            ):
                booking = await self.booking_api.create_booking(
                    booking_data={**booking_data, 'showId': show_id, 'seatIds': seat_ids}
                )
        except CustomBaseError as e:
            self._fail(generation, e.message)
            return None
        finally:
            self._end(generation)

        booking_id = booking.get('id')
        if generation != self._generation:
            # The server holds the booking even though the user left the flow
            Logger.base.warning(
                f'⚠️ [BOOKING_FLOW] Booking {booking_id} confirmed after leaving the flow'
            )
            self.notifier.info(f'Booking {booking_id} was confirmed')
            return None
        if self.current_step != BookingStep.CHECKOUT:
            Logger.base.warning(
                f'⚠️ [BOOKING_FLOW] Booking {booking_id} confirmed after the hold expired'
            )

        self.booking = booking
        self._dispose_timer()
        self.current_step = BookingStep.CONFIRMATION
        self.notifier.success('Booking confirmed!')
        Logger.base.info(f'✅ [BOOKING_FLOW] Booking {booking_id} created for show {show_id}')
        return booking

    async def extend_timer(self) -> bool:
        if self.timer is None or self.show_id is None:
            return False

        show_id = self.show_id
        generation = self._generation
        extended = await self.timer.extend()
        if not extended or generation != self._generation:
            return extended

        try:
            self.booking_timer = await self.booking_api.get_booking_timer(show_id=show_id)
        except CustomBaseError as e:
            Logger.base.warning(f'⚠️ [BOOKING_FLOW] Timer refresh after extension failed: {e}')
        return True

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def _start_timer(self, *, show_id: str, initial_seconds: int) -> None:
        self._dispose_timer()

        async def extend_remote() -> dict[str, Any]:
            return await self.booking_api.extend_booking_timer(show_id=show_id)

        self.timer = self.timer_factory(
            initial_seconds=initial_seconds,
            on_timer_expired=self._handle_timer_expired,
            on_extend=extend_remote,
            notifier=self.notifier,
        )
        self.timer.start(self.scheduler)

    def _handle_timer_expired(self) -> None:
        Logger.base.warning(f'⌛ [BOOKING_FLOW] Seat hold expired for show {self.show_id}')
        self.seat_map.clear_selection()
        self._dispose_timer()
        self.booking_timer = None
        self.locked_seat_ids = []
        self.current_step = BookingStep.SELECT_SEATS
        self.notifier.warning('Your booking session has expired. Please select seats again.')

    def _dispose_timer(self) -> None:
        if self.timer is not None:
            self.timer.dispose()
            self.timer = None

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset_flow(self) -> None:
        self._generation += 1
        self._dispose_timer()
        self.seat_loader.reset()
        self._init_state()
        Logger.base.info('🔄 [BOOKING_FLOW] Flow reset')

    def leave(self) -> None:
        """Navigation away from the booking page"""
        self.reset_flow()

    # ------------------------------------------------------------------
    # In-flight bookkeeping
    # ------------------------------------------------------------------

    def _begin(self) -> int:
        self.is_loading = True
        self.error = None
        return self._generation

    def _end(self, generation: int) -> None:
        if generation == self._generation:
            self.is_loading = False

    def _fail(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        Logger.base.error(f'❌ [BOOKING_FLOW] {message}')
        self.error = message
        self.notifier.error(message)
