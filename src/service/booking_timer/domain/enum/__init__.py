"""Booking Timer Domain Enums"""

from src.service.booking_timer.domain.enum.timer_urgency import TimerUrgency

__all__ = ['TimerUrgency']
