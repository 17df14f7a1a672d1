"""
Seat Command Repo Interface

Real-time seat hold operations on the remote seat inventory.
"""

from abc import ABC, abstractmethod

from src.service.seat_selection.app.dto import SeatValidationResult


class ISeatCommandRepo(ABC):
    @abstractmethod
    async def select_seat(self, *, show_seat_id: str, user_id: str) -> bool:
        """
        Ask the server to hold a seat for the user

        Returns:
            False when the server refused (e.g. seat taken meanwhile)
        """
        pass

    @abstractmethod
    async def deselect_seat(self, *, show_seat_id: str, user_id: str) -> bool:
        """Release a single held seat; False when the server refused"""
        pass

    @abstractmethod
    async def release_user_selection(self, *, user_id: str, show_id: str) -> None:
        """Release every seat the user holds for a show"""
        pass

    @abstractmethod
    async def validate_seats(
        self, *, user_id: str, show_seat_ids: list[str]
    ) -> SeatValidationResult:
        """Check that the held seats are still valid for checkout"""
        pass
