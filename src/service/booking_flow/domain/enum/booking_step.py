from enum import IntEnum


class BookingStep(IntEnum):
    SELECT_EVENT = 0
    SELECT_SHOW = 1
    SELECT_SEATS = 2
    CHECKOUT = 3
    CONFIRMATION = 4
