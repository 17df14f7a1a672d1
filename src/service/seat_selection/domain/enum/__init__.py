"""Seat Selection Domain Enums"""

from src.service.seat_selection.domain.enum.seat_status import SeatStatus

__all__ = ['SeatStatus']
