"""
Booking API response schemas

The API speaks camelCase and is not consistent about envelope shapes; these
models accept every shape it is known to return and normalize it.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.service.seat_selection.app.dto import SeatPage, SeatValidationResult
from src.service.seat_selection.domain.entity.seat_entity import Seat
from src.service.seat_selection.domain.enum import SeatStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class SeatSchema(_CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'seatId': 'S-101',
                'showSeatId': 'SS-9001',
                'status': 'Available',
                'seatType': 'Premium',
                'seatPrice': 450,
                'seatRowNumber': 'B',
                'seatNumber': 'B12',
            }
        },
    )

    id: Optional[str] = None
    seat_id: Optional[str] = Field(default=None, alias='seatId')
    show_seat_id: Optional[str] = Field(default=None, alias='showSeatId')
    status: SeatStatus = SeatStatus.AVAILABLE
    locked_by: Optional[str] = Field(default=None, alias='lockedBy')
    locked_until: Optional[datetime] = Field(default=None, alias='lockedUntil')
    section: Optional[str] = None
    seat_type: Optional[str] = Field(default=None, alias='seatType')
    seat_price: Optional[float] = Field(default=None, alias='seatPrice')
    price: Optional[float] = None
    row: Optional[str] = None
    seat_row_number: Optional[str] = Field(default=None, alias='seatRowNumber')
    seat_number: Optional[str] = Field(default=None, alias='seatNumber')

    @field_validator(
        'id', 'seat_id', 'show_seat_id', 'locked_by', 'row', 'seat_row_number', 'seat_number',
        mode='before',
    )
    @classmethod
    def _stringify_ids(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator('status', mode='before')
    @classmethod
    def _normalize_status(cls, value: Any) -> SeatStatus:
        if value is None:
            return SeatStatus.AVAILABLE
        for status in SeatStatus:
            if str(value).lower() == status.value.lower():
                return status
        # Unknown server states are treated as not bookable
        return SeatStatus.BOOKED

    def to_entity(self) -> Seat:
        return Seat(
            seat_id=self.seat_id or self.id or self.show_seat_id or '',
            show_seat_id=self.show_seat_id,
            status=self.status,
            row=self.row or self.seat_row_number or 'R01',
            section=self.seat_type or self.section or 'Regular',
            seat_number=self.seat_number or '',
            price=self.seat_price or self.price or 0,
            locked_by=self.locked_by,
            locked_until=self.locked_until,
        )


class SeatPageSchema(_CamelModel):
    seats: list[SeatSchema] = Field(default_factory=list)
    current_page: Optional[int] = Field(default=None, alias='currentPage')
    total_pages: Optional[int] = Field(default=None, alias='totalPages')

    @classmethod
    def parse_payload(cls, payload: Any) -> 'SeatPageSchema':
        if isinstance(payload, list):
            return cls(seats=payload)
        return cls.model_validate(payload or {})

    def to_dto(self, *, requested_page: int) -> SeatPage:
        return SeatPage(
            seats=[seat.to_entity() for seat in self.seats],
            current_page=self.current_page or requested_page,
            total_pages=self.total_pages or 1,
        )


class SeatValidationSchema(_CamelModel):
    is_valid: bool = Field(default=False, alias='isValid')
    message: str = ''

    @field_validator('message', mode='before')
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return '' if value is None else str(value)

    def to_dto(self) -> SeatValidationResult:
        return SeatValidationResult(is_valid=self.is_valid, message=self.message)


class EventListSchema(_CamelModel):
    """Accepts `{"Events": [...]}`, `{"events": [...]}` or a bare list"""

    events: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def parse_payload(cls, payload: Any) -> 'EventListSchema':
        if isinstance(payload, list):
            return cls(events=payload)
        if isinstance(payload, dict):
            return cls(events=payload.get('Events') or payload.get('events') or [])
        return cls()


def is_truthy_result(payload: Any) -> bool:
    """Select/deselect answers are accepted unless the body says success: false"""
    if isinstance(payload, dict) and payload.get('success') is False:
        return False
    return payload is not False
