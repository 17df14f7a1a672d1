import attrs


@attrs.frozen
class BookingTimerState:
    """Snapshot of a seat hold countdown"""

    initial_seconds: int
    remaining_seconds: int
    is_expired: bool = False
    can_extend: bool = True
