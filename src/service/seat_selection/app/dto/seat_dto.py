"""
Seat DTOs

Results handed from the booking API adapter to the seat selection use cases.
"""

import attrs

from src.service.seat_selection.domain.entity.seat_entity import Seat


@attrs.define
class SeatPage:
    """One page of a show's seats"""

    seats: list[Seat]
    current_page: int = 1
    total_pages: int = 1


@attrs.define
class SeatValidationResult:
    """Checkout pre-validation verdict for the selected seats"""

    is_valid: bool
    message: str = ''

    @classmethod
    def valid(cls) -> 'SeatValidationResult':
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, message: str) -> 'SeatValidationResult':
        return cls(is_valid=False, message=message)
