"""
Session-scoped Task Scheduler (anyio)

Every scheduled callback runs inside its own cancel scope, spawned into the
session's task group. Closing the scheduler cancels all of them, so no timer
callback can mutate client state after the session is torn down.

Usage:
    async with TaskScheduler.open() as scheduler:
        handle = scheduler.call_every(1, timer.tick, name='booking-timer')
        ...
        handle.cancel()
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import inspect
from itertools import count
from typing import Optional

import anyio
from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.platform.scheduling.i_task_scheduler import ScheduledCallback


_handle_ids = count(1)


class ScheduledHandle:
    def __init__(self, *, name: str) -> None:
        self.name = name
        self._cancel_scope = anyio.CancelScope()
        self._finished = False

    @property
    def active(self) -> bool:
        return not (self._cancel_scope.cancel_called or self._finished)

    def cancel(self) -> None:
        self._cancel_scope.cancel()

    def __repr__(self) -> str:
        return f'ScheduledHandle(name={self.name!r}, active={self.active})'


class TaskScheduler:
    def __init__(self, task_group: TaskGroup) -> None:
        self._task_group = task_group
        self._handles: set[ScheduledHandle] = set()
        self._closed = False

    @classmethod
    @asynccontextmanager
    async def open(cls) -> AsyncIterator['TaskScheduler']:
        async with anyio.create_task_group() as tg:
            scheduler = cls(tg)
            try:
                yield scheduler
            finally:
                scheduler.close()
                tg.cancel_scope.cancel()

    @property
    def pending_count(self) -> int:
        return sum(1 for handle in self._handles if handle.active)

    def call_later(
        self, delay: float, callback: ScheduledCallback, *, name: Optional[str] = None
    ) -> ScheduledHandle:
        return self._schedule(delay, callback, repeat=False, name=name)

    def call_every(
        self, interval: float, callback: ScheduledCallback, *, name: Optional[str] = None
    ) -> ScheduledHandle:
        if interval <= 0:
            raise ValueError('interval must be positive')
        return self._schedule(interval, callback, repeat=True, name=name)

    def close(self) -> None:
        """Cancel every pending task; later schedule calls are refused"""
        self._closed = True
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()

    def _schedule(
        self, delay: float, callback: ScheduledCallback, *, repeat: bool, name: Optional[str]
    ) -> ScheduledHandle:
        if self._closed:
            raise RuntimeError('TaskScheduler is closed')

        handle = ScheduledHandle(name=name or f'task-{next(_handle_ids)}')
        self._handles.add(handle)
        self._task_group.start_soon(self._run, handle, delay, callback, repeat)
        return handle

    async def _run(
        self, handle: ScheduledHandle, delay: float, callback: ScheduledCallback, repeat: bool
    ) -> None:
        with handle._cancel_scope:
            try:
                while True:
                    await anyio.sleep(delay)
                    await self._invoke(handle, callback)
                    if not repeat:
                        break
            finally:
                handle._finished = True
                self._handles.discard(handle)

    async def _invoke(self, handle: ScheduledHandle, callback: ScheduledCallback) -> None:
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            # A failing callback must not take the session's task group down
            Logger.base.warning(f'⚠️ [SCHEDULER] Task {handle.name} failed: {e}')
