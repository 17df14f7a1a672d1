"""
Optimistic Action Enums - Domain Value Objects
"""

from enum import StrEnum


class ActionType(StrEnum):
    SEAT_SELECT = 'seat_select'
    SEAT_DESELECT = 'seat_deselect'
    BOOKING_CREATE = 'booking_create'
    PAYMENT_PROCESS = 'payment_process'


class ActionStatus(StrEnum):
    PENDING = 'pending'
    SUCCESS = 'success'
    ERROR = 'error'
