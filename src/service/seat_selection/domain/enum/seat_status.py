"""
Seat Status Enum - Domain Value Object

Available/Booked/Locked come from the booking API; Selected only ever
exists in the client's optimistic overlay.
"""

from enum import StrEnum


class SeatStatus(StrEnum):
    AVAILABLE = 'Available'
    BOOKED = 'Booked'
    LOCKED = 'Locked'
    SELECTED = 'Selected'
