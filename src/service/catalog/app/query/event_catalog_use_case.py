"""
Event Catalog Use Case

Two cache layers in front of the events API:

1. Event list: in memory plus local storage (`events-cache` /
   `events-cache-time`), fresh for EVENTS_CACHE_TTL (5 minutes)
   - concurrent callers share one in-flight request
   - on API failure a stale list is served when one exists
2. Event / show details: TtlCache entries `event:<id>` and `show:<id>`
"""

from typing import Any, Optional

import anyio
import attrs
import orjson

from src.platform.cache.ttl_cache import TtlCache
from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.state.local_storage import LocalStorage
from src.platform.types.clock import Clock, epoch_ms, wall_clock
from src.service.catalog.app.interface import IEventCatalogApi


EVENTS_CACHE_KEY = 'events-cache'
EVENTS_CACHE_TIME_KEY = 'events-cache-time'


@attrs.define
class _PendingFetch:
    done: anyio.Event = attrs.field(factory=anyio.Event)
    result: Optional[list[dict[str, Any]]] = None
    error: Optional[BaseException] = None


class EventCatalogUseCase:
    def __init__(
        self,
        *,
        catalog_api: IEventCatalogApi,
        storage: LocalStorage,
        data_cache: TtlCache,
        clock: Clock = wall_clock,
        events_ttl: float = settings.EVENTS_CACHE_TTL,
    ) -> None:
        self.catalog_api = catalog_api
        self.storage = storage
        self.data_cache = data_cache
        self._clock = clock
        self.events_ttl = events_ttl

        self._events: Optional[list[dict[str, Any]]] = None
        self._events_time: Optional[int] = None
        self._pending: Optional[_PendingFetch] = None

    @Logger.io
    async def list_events(self, *, force_refresh: bool = False) -> list[dict[str, Any]]:
        if not force_refresh:
            cached = self._read_events_cache(fresh_only=True)
            if cached is not None:
                return cached

        if self._pending is not None:
            pending = self._pending
            await pending.done.wait()
            if pending.error is not None:
                raise pending.error
            return pending.result or []

        pending = _PendingFetch()
        self._pending = pending
        try:
            events = await self.catalog_api.list_events()
        except CustomBaseError as e:
            stale = self._read_events_cache(fresh_only=False)
            if stale is None:
                pending.error = e
                raise
            Logger.base.warning(f'⚠️ [CATALOG] Events API failed, serving stale cache: {e}')
            pending.result = stale
            return stale
        else:
            self._write_events_cache(events)
            pending.result = events
            Logger.base.info(f'📋 [CATALOG] Loaded {len(events)} events')
            return events
        finally:
            pending.done.set()
            if self._pending is pending:
                self._pending = None

    def invalidate(self) -> None:
        """Drop the event list from memory and local storage"""
        self._events = None
        self._events_time = None
        self.storage.remove_item(EVENTS_CACHE_KEY)
        self.storage.remove_item(EVENTS_CACHE_TIME_KEY)
        Logger.base.info('🧹 [CATALOG] Events cache invalidated')

    @Logger.io
    async def get_event_details(self, *, event_id: str) -> dict[str, Any]:
        cache_key = f'event:{event_id}'
        cached = self.data_cache.get(cache_key)
        if cached is not None:
            return cached

        event = await self.catalog_api.get_event_details(event_id=event_id)
        self.data_cache.set(cache_key, event)
        return event

    @Logger.io
    async def get_show_details(self, *, show_id: str) -> dict[str, Any]:
        cache_key = f'show:{show_id}'
        cached = self.data_cache.get(cache_key)
        if cached is not None:
            return cached

        show = await self.catalog_api.get_show_details(show_id=show_id)
        self.data_cache.set(cache_key, show)
        return show

    # ------------------------------------------------------------------
    # Event list cache
    # ------------------------------------------------------------------

    def _read_events_cache(self, *, fresh_only: bool) -> Optional[list[dict[str, Any]]]:
        if self._events is None:
            self._load_events_from_storage()
        if self._events is None or self._events_time is None:
            return None
        if fresh_only and epoch_ms(self._clock) - self._events_time >= self.events_ttl * 1000:
            return None
        return self._events

    def _load_events_from_storage(self) -> None:
        raw_time = self.storage.get_item(EVENTS_CACHE_TIME_KEY)
        if raw_time is None:
            return
        try:
            events = self.storage.get_json(EVENTS_CACHE_KEY)
            cached_at = int(raw_time)
        except (orjson.JSONDecodeError, ValueError) as e:
            Logger.base.warning(f'⚠️ [CATALOG] Ignoring corrupt events cache: {e}')
            return
        if isinstance(events, list):
            self._events = events
            self._events_time = cached_at

    def _write_events_cache(self, events: list[dict[str, Any]]) -> None:
        self._events = events
        self._events_time = epoch_ms(self._clock)
        self.storage.set_json(EVENTS_CACHE_KEY, events)
        self.storage.set_item(EVENTS_CACHE_TIME_KEY, str(self._events_time))
