from datetime import datetime, timezone
from typing import Any, Optional

import attrs


@attrs.define
class OfflineSnapshot:
    """Last known client data, kept for browsing while the API is unreachable"""

    events: list[dict[str, Any]] = attrs.field(factory=list)
    bookings: list[dict[str, Any]] = attrs.field(factory=list)
    user_profile: Optional[dict[str, Any]] = None
    last_sync: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            'events': self.events,
            'bookings': self.bookings,
            'userProfile': self.user_profile,
            'lastSync': self.last_sync.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'OfflineSnapshot':
        last_sync = data.get('lastSync')
        return cls(
            events=list(data.get('events') or []),
            bookings=list(data.get('bookings') or []),
            user_profile=data.get('userProfile'),
            last_sync=datetime.fromisoformat(last_sync)
            if last_sync
            else datetime.now(timezone.utc),
        )
