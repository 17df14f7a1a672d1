"""
Event Catalog API Interface

Read-only access to published events and their shows.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class IEventCatalogApi(ABC):
    @abstractmethod
    async def list_events(self, *, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """
        List published events

        Args:
            params: Optional query filters (category, search, page...)

        Returns:
            Event payloads as returned by the API
        """
        pass

    @abstractmethod
    async def get_event_details(self, *, event_id: str) -> dict[str, Any]:
        """Event payload including its `shows` list"""
        pass

    @abstractmethod
    async def get_show_details(self, *, show_id: str) -> dict[str, Any]:
        pass
