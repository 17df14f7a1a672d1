"""
Seat Query Repo Interface

Read side of the remote seat inventory.
"""

from abc import ABC, abstractmethod

from src.service.seat_selection.app.dto import SeatPage


class ISeatQueryRepo(ABC):
    @abstractmethod
    async def get_show_seats(self, *, show_id: str, page: int, page_size: int) -> SeatPage:
        """
        Fetch one page of seats for a show

        Args:
            show_id: Show identifier
            page: 1-based page number
            page_size: Seats per page

        Returns:
            SeatPage with normalized seats and page counters

        Raises:
            ApiError: Non-2xx response
            ApiUnavailableError: Booking API unreachable
        """
        pass
