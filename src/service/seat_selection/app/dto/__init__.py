"""Seat Selection Application DTOs"""

from src.service.seat_selection.app.dto.seat_dto import SeatPage, SeatValidationResult


__all__ = [
    'SeatPage',
    'SeatValidationResult',
]
