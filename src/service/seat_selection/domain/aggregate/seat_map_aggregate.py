"""
Seat Map Aggregate

Client-side copy of one show's seats plus the current user's optimistic
selection. The server owns Available/Booked/Locked; this aggregate overlays
Selected on top and keeps the overlay consistent with every page of server
truth it receives.

Invariants:
- selected keys are unique and never exceed max_seats
- a seat Booked or Locked by another user is never selected
- a selected seat remembers the server status it had before selection,
  so deselect/rollback restores exactly that status
"""

from collections.abc import Collection, Iterable
from typing import Optional

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import (
    ConflictError,
    NotFoundError,
    SeatLimitExceededError,
    SeatUnavailableError,
)
from src.platform.logging.loguru_io import Logger
from src.service.seat_selection.domain.entity.seat_entity import Seat
from src.service.seat_selection.domain.enum import SeatStatus


class SeatMap:
    def __init__(self, *, user_id: str, max_seats: int) -> None:
        if max_seats < 1:
            raise ValueError('max_seats must be at least 1')
        self.user_id = user_id
        self.max_seats = max_seats
        self._seats: dict[str, Seat] = {}
        self._selected: list[str] = []
        self._prior_status: dict[str, SeatStatus] = {}
        # Bumped on reset; late remote results compare against it before mutating
        self.version = 0

    # ------------------------------------------------------------------
    # Server truth
    # ------------------------------------------------------------------

    @property
    def seats(self) -> list[Seat]:
        return list(self._seats.values())

    def replace_seats(self, seats: Iterable[Seat]) -> list[str]:
        """
        Replace the seat list with a fresh first page

        Returns:
            Keys dropped from the selection because the server now reports
            them Booked or Locked by someone else
        """
        self._seats = {}
        return self._merge(seats)

    def append_seats(self, seats: Iterable[Seat]) -> list[str]:
        """Append a further page; a seat already known is replaced in place"""
        return self._merge(seats)

    def reset(self) -> None:
        """Forget seats and selection (navigation away or show switch)"""
        self._seats = {}
        self._selected = []
        self._prior_status = {}
        self.version += 1

    def _merge(self, seats: Iterable[Seat]) -> list[str]:
        dropped: list[str] = []
        for seat in seats:
            key = seat.key
            if key in self._selected:
                if seat.is_selectable_by(self.user_id):
                    self._prior_status[key] = seat.status
                    seat = seat.with_status(SeatStatus.SELECTED)
                else:
                    self._selected.remove(key)
                    self._prior_status.pop(key, None)
                    dropped.append(key)
            self._seats[key] = seat

        if dropped:
            Logger.base.info(f'🔄 [SEAT_MAP] Selection reconciled, dropped {dropped}')
        return dropped

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, key: str) -> Optional[Seat]:
        return self._seats.get(key)

    def get(self, key: str) -> Seat:
        seat = self._seats.get(key)
        if seat is None:
            raise NotFoundError(f'Seat {key} not found')
        return seat

    @property
    def selected_keys(self) -> tuple[str, ...]:
        return tuple(self._selected)

    def is_selected(self, key: str) -> bool:
        return key in self._selected

    @property
    def is_full(self) -> bool:
        return len(self._selected) >= self.max_seats

    # ------------------------------------------------------------------
    # Selection overlay
    # ------------------------------------------------------------------

    def check_can_select(self, key: str) -> Seat:
        seat = self.get(key)
        if key in self._selected:
            raise ConflictError(f'Seat {key} is already selected')
        if seat.status == SeatStatus.BOOKED:
            raise SeatUnavailableError(f'Seat {key} is already booked')
        if seat.is_locked_by_other(self.user_id):
            raise SeatUnavailableError(f'Seat {key} is held by another customer')
        if self.is_full:
            raise SeatLimitExceededError(f'Maximum {self.max_seats} seats can be selected')
        return seat

    @Logger.io
    def select(self, key: str) -> SeatStatus:
        """
        Mark seat as Selected

        Returns:
            The status displayed before selection (needed for rollback)
        """
        seat = self.check_can_select(key)
        prior_status = seat.status
        self._prior_status[key] = prior_status
        self._selected.append(key)
        self._seats[key] = seat.with_status(SeatStatus.SELECTED)
        return prior_status

    @Logger.io
    def rollback_select(self, key: str, prior_status: SeatStatus) -> bool:
        """
        Undo an optimistic select

        Returns:
            False when a reload already reconciled the seat; its server
            status is left untouched
        """
        if key not in self._selected:
            return False
        self._selected.remove(key)
        self._prior_status.pop(key, None)
        seat = self._seats.get(key)
        if seat is not None:
            self._seats[key] = seat.with_status(prior_status)
        return True

    @Logger.io
    def deselect(self, key: str) -> SeatStatus:
        """
        Drop seat from the selection and restore its pre-selection status

        Returns:
            The restored status
        """
        if key not in self._selected:
            raise ConflictError(f'Seat {key} is not selected')
        self._selected.remove(key)
        restored = self._prior_status.pop(key, SeatStatus.AVAILABLE)
        seat = self._seats.get(key)
        if seat is not None:
            self._seats[key] = seat.with_status(restored)
        return restored

    @Logger.io
    def rollback_deselect(self, key: str) -> bool:
        """
        Put a seat back into the selection after a failed remote deselect

        Returns:
            False if the seat can no longer be selected (server truth changed
            meanwhile, or the selection filled up)
        """
        try:
            self.check_can_select(key)
        except (ConflictError, NotFoundError, SeatUnavailableError, SeatLimitExceededError):
            return False
        self.select(key)
        return True

    def clear_selection(self) -> list[str]:
        cleared = list(self._selected)
        for key in cleared:
            self.deselect(key)
        return cleared

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def selected_seats(self) -> list[Seat]:
        return [self._seats[key] for key in self._selected if key in self._seats]

    def total_price(self) -> float:
        return sum(seat.price for seat in self.selected_seats())

    def display_status(self, key: str) -> SeatStatus:
        return self.get(key).status

    def is_seat_disabled(self, key: str, in_flight: Collection[str] = ()) -> bool:
        seat = self.get(key)
        return (
            seat.status == SeatStatus.BOOKED
            or seat.is_locked_by_other(self.user_id)
            or key in in_flight
        )

    def rows_layout(
        self,
        *,
        max_rows: int = settings.SEAT_LAYOUT_MAX_ROWS,
        max_seats_per_row: int = settings.SEAT_LAYOUT_MAX_SEATS_PER_ROW,
    ) -> list[tuple[str, list[Seat]]]:
        """Seats grouped by row (rows sorted, seats ordered by number), capped for display"""
        rows: dict[str, list[Seat]] = {}
        for seat in self._seats.values():
            rows.setdefault(seat.row, []).append(seat)

        return [
            (row, sorted(rows[row], key=lambda s: s.seat_number_order)[:max_seats_per_row])
            for row in sorted(rows)[:max_rows]
        ]
