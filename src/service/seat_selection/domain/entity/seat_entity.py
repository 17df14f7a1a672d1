from datetime import datetime
import re
from typing import Optional

import attrs

from src.service.seat_selection.domain.enum import SeatStatus


_DIGITS = re.compile(r'\D')


@attrs.frozen
class Seat:
    seat_id: str
    status: SeatStatus = SeatStatus.AVAILABLE
    show_seat_id: Optional[str] = None
    row: str = 'R01'
    section: str = 'Regular'
    seat_number: str = ''
    price: float = 0
    locked_by: Optional[str] = None
    locked_until: Optional[datetime] = None

    @property
    def key(self) -> str:
        """Identity used by the selection overlay: show seat id when known"""
        return self.show_seat_id or self.seat_id

    @property
    def seat_number_order(self) -> int:
        digits = _DIGITS.sub('', self.seat_number)
        return int(digits) if digits else 0

    def is_locked_by_other(self, user_id: str) -> bool:
        return self.status == SeatStatus.LOCKED and self.locked_by != user_id

    def is_selectable_by(self, user_id: str) -> bool:
        if self.status in (SeatStatus.AVAILABLE, SeatStatus.SELECTED):
            return True
        return self.status == SeatStatus.LOCKED and self.locked_by == user_id

    def with_status(self, status: SeatStatus) -> 'Seat':
        return attrs.evolve(self, status=status)
