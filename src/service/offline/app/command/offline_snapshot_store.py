"""
Offline Snapshot Store

Keeps the last known events, bookings and user profile under
`booknow_offline_data` in local storage. save() merges partial updates and
stamps lastSync.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Optional

import attrs
import orjson

from src.platform.logging.loguru_io import Logger
from src.platform.state.local_storage import LocalStorage
from src.service.offline.domain.entity.offline_snapshot import OfflineSnapshot


OFFLINE_DATA_KEY = 'booknow_offline_data'

SyncCallable = Callable[[OfflineSnapshot], Awaitable[Any]]


class OfflineSnapshotStore:
    def __init__(self, *, storage: LocalStorage) -> None:
        self.storage = storage

    def get(self) -> OfflineSnapshot:
        try:
            data = self.storage.get_json(OFFLINE_DATA_KEY)
        except orjson.JSONDecodeError as e:
            Logger.base.warning(f'⚠️ [OFFLINE] Ignoring corrupt offline snapshot: {e}')
            return OfflineSnapshot()
        if not isinstance(data, dict):
            return OfflineSnapshot()
        return OfflineSnapshot.from_dict(data)

    def save(
        self,
        *,
        events: Optional[list[dict[str, Any]]] = None,
        bookings: Optional[list[dict[str, Any]]] = None,
        user_profile: Optional[dict[str, Any]] = None,
    ) -> OfflineSnapshot:
        changes: dict[str, Any] = {'last_sync': datetime.now(timezone.utc)}
        if events is not None:
            changes['events'] = events
        if bookings is not None:
            changes['bookings'] = bookings
        if user_profile is not None:
            changes['user_profile'] = user_profile

        snapshot = attrs.evolve(self.get(), **changes)
        self.storage.set_json(OFFLINE_DATA_KEY, snapshot.to_dict())
        return snapshot

    def clear(self) -> None:
        self.storage.remove_item(OFFLINE_DATA_KEY)

    async def sync_when_online(
        self, *, is_online: bool, sync: Optional[SyncCallable] = None
    ) -> bool:
        """
        Push the snapshot upstream once connectivity is back

        Returns:
            False while offline or when the sync callable fails
        """
        if not is_online:
            return False

        snapshot = self.get()
        Logger.base.info(
            f'🔁 [OFFLINE] Syncing snapshot ({len(snapshot.events)} events, '
            f'{len(snapshot.bookings)} bookings)'
        )
        if sync is None:
            return True
        try:
            await sync(snapshot)
        except Exception as e:
            Logger.base.error(f'❌ [OFFLINE] Sync failed: {e}')
            return False
        return True
