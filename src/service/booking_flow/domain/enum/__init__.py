"""Booking Flow Domain Enums"""

from src.service.booking_flow.domain.enum.booking_step import BookingStep

__all__ = ['BookingStep']
