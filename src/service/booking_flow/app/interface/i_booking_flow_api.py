"""
Booking Flow API Interface

Seat locking, hold timer and booking creation on the remote booking API.
Every method raises ApiError on a non-2xx answer and ApiUnavailableError
when the API cannot be reached.
"""

from abc import ABC, abstractmethod
from typing import Any


class IBookingFlowApi(ABC):
    @abstractmethod
    async def lock_seats(self, *, show_id: str, seat_ids: list[str]) -> dict[str, Any]:
        """Lock the selected seats for checkout"""
        pass

    @abstractmethod
    async def start_booking_timer(self, *, show_id: str, seat_ids: list[str]) -> dict[str, Any]:
        """
        Start the server-side hold timer

        Returns:
            Timer payload; `remainingSeconds` is the authoritative countdown start
        """
        pass

    @abstractmethod
    async def get_booking_timer(self, *, show_id: str) -> dict[str, Any]:
        pass

    @abstractmethod
    async def extend_booking_timer(
        self, *, show_id: str, additional_minutes: int = 5
    ) -> dict[str, Any]:
        pass

    @abstractmethod
    async def create_booking(self, *, booking_data: dict[str, Any]) -> dict[str, Any]:
        """
        Create the booking

        Args:
            booking_data: Customer/payment fields plus showId and seatIds

        Returns:
            Booking payload as stored by the server
        """
        pass

    @abstractmethod
    async def get_booking(self, *, booking_id: str) -> dict[str, Any]:
        pass
