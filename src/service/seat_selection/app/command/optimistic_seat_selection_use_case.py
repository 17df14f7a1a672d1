"""
Optimistic Seat Selection Use Case

Applies a seat toggle to the SeatMap immediately, then confirms it with the
booking API and rolls the seat back when the server refuses.

Flow (select):
1. Reject without mutation: unknown seat, booked/locked by another user,
   already selected, toggle already in flight, selection full
2. Mark Selected locally and open a pending seat_select action
3. Await the remote call
4. Success: action -> success; refusal or error: rollback + action -> error

Deselect is symmetric: a failed remote deselect re-selects the seat.

A result arriving after the seat map was reset (show switch, flow reset,
session closed) is dropped without touching any state.
"""

from collections.abc import Awaitable, Callable

from src.platform.exception.exceptions import (
    ApiError,
    ConflictError,
    CustomBaseError,
    NotFoundError,
    SeatLimitExceededError,
    SeatUnavailableError,
)
from src.platform.logging.loguru_io import Logger
from src.service.optimistic_ui.app.optimistic_action_ledger import OptimisticActionLedger
from src.service.optimistic_ui.domain.enum import ActionStatus, ActionType
from src.service.seat_selection.app.dto import SeatValidationResult
from src.service.seat_selection.app.interface import ISeatCommandRepo
from src.service.seat_selection.domain.aggregate.seat_map_aggregate import SeatMap
from src.service.shared_kernel.app.interface import IUserNotifier


RemoteSeatCall = Callable[[], Awaitable[bool]]


class OptimisticSeatSelectionUseCase:
    def __init__(
        self,
        *,
        seat_map: SeatMap,
        ledger: OptimisticActionLedger,
        notifier: IUserNotifier,
        seat_command_repo: ISeatCommandRepo,
    ) -> None:
        self.seat_map = seat_map
        self.ledger = ledger
        self.notifier = notifier
        self.seat_command_repo = seat_command_repo
        self._in_flight: set[str] = set()

    @property
    def seat_update_loading(self) -> frozenset[str]:
        """Seat keys with a remote toggle in flight"""
        return frozenset(self._in_flight)

    def is_seat_disabled(self, seat_key: str) -> bool:
        return self.seat_map.is_seat_disabled(seat_key, self._in_flight)

    # ------------------------------------------------------------------
    # Optimistic toggles
    # ------------------------------------------------------------------

    async def select_seat_optimistically(
        self, seat_key: str, perform_remote_select: RemoteSeatCall
    ) -> bool:
        if seat_key in self._in_flight:
            Logger.base.info(f'⏳ [SEAT_SELECT] Seat {seat_key} already has a request in flight')
            return False

        try:
            self.seat_map.check_can_select(seat_key)
        except (SeatLimitExceededError, SeatUnavailableError) as e:
            self.notifier.warning(e.message)
            return False
        except (NotFoundError, ConflictError) as e:
            Logger.base.info(f'🚫 [SEAT_SELECT] {e.message}')
            return False

        prior_status = self.seat_map.select(seat_key)
        version = self.seat_map.version
        action_id = self.ledger.add_optimistic_action(
            type=ActionType.SEAT_SELECT, message=f'Selecting seat {seat_key}...'
        )

        confirmed, error = await self._await_remote(seat_key, perform_remote_select)

        # A reset, or a reload that reconciled the seat out of the selection,
        # makes this result stale
        if version != self.seat_map.version or not self.seat_map.is_selected(seat_key):
            self.ledger.remove_optimistic_action(action_id)
            Logger.base.info(f'🗑️ [SEAT_SELECT] Dropped late result for seat {seat_key}')
            return False

        if confirmed:
            self.ledger.update_optimistic_action(
                action_id, status=ActionStatus.SUCCESS, message=f'Seat {seat_key} selected!'
            )
            return True

        self.seat_map.rollback_select(seat_key, prior_status)
        message = (
            f'Error selecting seat {seat_key}' if error else f'Failed to select seat {seat_key}'
        )
        self.ledger.update_optimistic_action(action_id, status=ActionStatus.ERROR, message=message)
        self.notifier.error(message)
        return False

    async def deselect_seat_optimistically(
        self, seat_key: str, perform_remote_deselect: RemoteSeatCall
    ) -> bool:
        if seat_key in self._in_flight:
            Logger.base.info(f'⏳ [SEAT_SELECT] Seat {seat_key} already has a request in flight')
            return False
        if not self.seat_map.is_selected(seat_key):
            Logger.base.info(f'🚫 [SEAT_SELECT] Seat {seat_key} is not selected')
            return False

        self.seat_map.deselect(seat_key)
        version = self.seat_map.version
        action_id = self.ledger.add_optimistic_action(
            type=ActionType.SEAT_DESELECT, message=f'Releasing seat {seat_key}...'
        )

        confirmed, error = await self._await_remote(seat_key, perform_remote_deselect)

        if version != self.seat_map.version:
            self.ledger.remove_optimistic_action(action_id)
            Logger.base.info(f'🗑️ [SEAT_SELECT] Dropped late result for seat {seat_key}')
            return False

        if confirmed:
            self.ledger.update_optimistic_action(
                action_id, status=ActionStatus.SUCCESS, message=f'Seat {seat_key} released'
            )
            return True

        restored = self.seat_map.rollback_deselect(seat_key)
        if not restored:
            Logger.base.warning(f'⚠️ [SEAT_SELECT] Seat {seat_key} could not be re-selected')
        message = (
            f'Error releasing seat {seat_key}' if error else f'Failed to release seat {seat_key}'
        )
        self.ledger.update_optimistic_action(action_id, status=ActionStatus.ERROR, message=message)
        self.notifier.error(message)
        return False

    async def _await_remote(
        self, seat_key: str, remote_call: RemoteSeatCall
    ) -> tuple[bool, bool]:
        """
        Returns:
            (confirmed, raised) for the remote call
        """
        self._in_flight.add(seat_key)
        try:
            return bool(await remote_call()), False
        except Exception as e:
            Logger.base.error(f'❌ [SEAT_SELECT] Remote call for seat {seat_key} failed: {e}')
            return False, True
        finally:
            self._in_flight.discard(seat_key)

    # ------------------------------------------------------------------
    # Real-time API helpers
    # ------------------------------------------------------------------

    @Logger.io
    async def toggle_seat(self, seat_key: str) -> bool:
        user_id = self.seat_map.user_id
        if self.seat_map.is_selected(seat_key):
            return await self.deselect_seat_optimistically(
                seat_key,
                lambda: self.seat_command_repo.deselect_seat(
                    show_seat_id=seat_key, user_id=user_id
                ),
            )
        return await self.select_seat_optimistically(
            seat_key,
            lambda: self.seat_command_repo.select_seat(show_seat_id=seat_key, user_id=user_id),
        )

    @Logger.io
    async def release_all_selections(self, *, show_id: str) -> bool:
        version = self.seat_map.version
        try:
            await self.seat_command_repo.release_user_selection(
                user_id=self.seat_map.user_id, show_id=show_id
            )
        except CustomBaseError as e:
            Logger.base.error(f'❌ [SEAT_SELECT] Failed to release seats for show {show_id}: {e}')
            self.notifier.error('Failed to release selected seats')
            return False

        if version == self.seat_map.version:
            cleared = self.seat_map.clear_selection()
            Logger.base.info(f'🧹 [SEAT_SELECT] Released {len(cleared)} seat(s) for show {show_id}')
        return True

    @Logger.io
    async def validate_for_checkout(self) -> SeatValidationResult:
        selected = self.seat_map.selected_seats()
        if not selected:
            return SeatValidationResult.invalid('No seats selected')

        missing = [seat.seat_id for seat in selected if not seat.show_seat_id]
        if missing:
            return SeatValidationResult.invalid(f'Seats missing show seat id: {", ".join(missing)}')

        try:
            return await self.seat_command_repo.validate_seats(
                user_id=self.seat_map.user_id,
                show_seat_ids=[seat.show_seat_id for seat in selected if seat.show_seat_id],
            )
        except ApiError as e:
            Logger.base.error(f'❌ [SEAT_SELECT] Seat validation failed: {e}')
            return SeatValidationResult.invalid('Failed to validate seats')
