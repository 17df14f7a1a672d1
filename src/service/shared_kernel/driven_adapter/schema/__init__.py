"""Booking API Schemas"""

from src.service.shared_kernel.driven_adapter.schema.booking_api_schema import (
    EventListSchema,
    SeatPageSchema,
    SeatSchema,
    SeatValidationSchema,
    is_truthy_result,
)

__all__ = [
    'EventListSchema',
    'SeatPageSchema',
    'SeatSchema',
    'SeatValidationSchema',
    'is_truthy_result',
]
