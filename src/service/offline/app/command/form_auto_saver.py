"""
Form Auto Saver

Periodically persists a form draft under `autosave_<formId>` as
`{"data": {...}, "timestamp": "<iso>"}` and optionally forwards it to an
async on_save hook.

Status:
    idle -> saving -> saved (back to idle after 2s)
                   -> error (back to idle after 3s)
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Optional

import orjson

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.scheduling.i_task_scheduler import IScheduledHandle, ITaskScheduler
from src.platform.state.local_storage import LocalStorage
from src.service.offline.domain.enum import AutoSaveStatus


SaveCallable = Callable[[dict[str, Any]], Awaitable[Any]]


class FormAutoSaver:
    def __init__(
        self,
        *,
        form_id: str,
        storage: LocalStorage,
        on_save: Optional[SaveCallable] = None,
        save_interval: float = settings.AUTOSAVE_INTERVAL,
        saved_reset: float = settings.AUTOSAVE_SAVED_RESET,
        error_reset: float = settings.AUTOSAVE_ERROR_RESET,
    ) -> None:
        self.form_id = form_id
        self.storage = storage
        self.on_save = on_save
        self.save_interval = save_interval
        self.saved_reset = saved_reset
        self.error_reset = error_reset

        self.data: dict[str, Any] = {}
        self.last_saved: Optional[datetime] = None
        self.status = AutoSaveStatus.IDLE
        self.is_saving = False

        self._scheduler: Optional[ITaskScheduler] = None
        self._save_handle: Optional[IScheduledHandle] = None
        self._reset_handle: Optional[IScheduledHandle] = None

    @property
    def storage_key(self) -> str:
        return f'autosave_{self.form_id}'

    def load(self) -> dict[str, Any]:
        """Restore a saved draft; a corrupt draft is logged and ignored"""
        raw = self.storage.get_item(self.storage_key)
        if raw is None:
            return self.data
        try:
            saved = orjson.loads(raw)
            self.data = dict(saved['data'])
            self.last_saved = datetime.fromisoformat(saved['timestamp'])
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            Logger.base.warning(f'⚠️ [AUTOSAVE] Failed to load draft {self.storage_key}: {e}')
        return self.data

    def update_field(self, name: str, value: Any) -> None:
        self.data = {**self.data, name: value}

    def start(self, scheduler: ITaskScheduler) -> None:
        self._scheduler = scheduler
        if self._save_handle is None or not self._save_handle.active:
            self._save_handle = scheduler.call_every(
                self.save_interval, self.auto_save, name=f'autosave-{self.form_id}'
            )

    async def auto_save(self) -> bool:
        if not self.data or self.is_saving:
            return False

        snapshot = dict(self.data)
        self.is_saving = True
        self.status = AutoSaveStatus.SAVING
        try:
            self.storage.set_json(
                self.storage_key,
                {'data': snapshot, 'timestamp': datetime.now(timezone.utc).isoformat()},
            )
            if self.on_save is not None:
                await self.on_save(snapshot)
        except Exception as e:
            Logger.base.error(f'❌ [AUTOSAVE] Auto-save of {self.storage_key} failed: {e}')
            self._set_status(AutoSaveStatus.ERROR, reset_after=self.error_reset)
            return False
        finally:
            self.is_saving = False

        self.last_saved = datetime.now(timezone.utc)
        self._set_status(AutoSaveStatus.SAVED, reset_after=self.saved_reset)
        return True

    def _set_status(self, status: AutoSaveStatus, *, reset_after: float) -> None:
        self.status = status
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        if self._scheduler is not None:
            self._reset_handle = self._scheduler.call_later(
                reset_after, self._reset_status, name=f'autosave-status-{self.form_id}'
            )

    def _reset_status(self) -> None:
        self.status = AutoSaveStatus.IDLE
        self._reset_handle = None

    def clear(self) -> None:
        self.storage.remove_item(self.storage_key)
        self.data = {}
        self.last_saved = None
        self.status = AutoSaveStatus.IDLE

    def dispose(self) -> None:
        for handle in (self._save_handle, self._reset_handle):
            if handle is not None:
                handle.cancel()
        self._save_handle = None
        self._reset_handle = None
