"""
Optimistic Action Ledger

Records every user gesture applied optimistically (seat select/deselect,
booking create, payment) together with its eventual outcome, so a UI can
show "Selecting seat A1..." and then a short-lived success or error toast.

Expiry:
- success entries disappear SUCCESS_TTL (3s) after they settled
- error entries disappear ERROR_TTL (5s) after they settled
- pending entries never expire on their own

The ledger filters expired entries on every read, so a late purge tick never
exposes a stale entry. purge_expired() only reclaims memory.
"""

from typing import Optional

import uuid_utils

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.scheduling.i_task_scheduler import IScheduledHandle, ITaskScheduler
from src.platform.types.clock import Clock, monotonic_clock
from src.service.optimistic_ui.domain.entity.optimistic_action_entity import OptimisticAction
from src.service.optimistic_ui.domain.enum import ActionStatus, ActionType


class OptimisticActionLedger:
    def __init__(
        self,
        *,
        clock: Clock = monotonic_clock,
        success_ttl: float = settings.LEDGER_SUCCESS_TTL,
        error_ttl: float = settings.LEDGER_ERROR_TTL,
    ) -> None:
        self._clock = clock
        self.success_ttl = success_ttl
        self.error_ttl = error_ttl
        self._actions: dict[str, OptimisticAction] = {}

    def add_optimistic_action(
        self,
        *,
        type: ActionType,
        message: str,
        status: ActionStatus = ActionStatus.PENDING,
    ) -> str:
        action_id = str(uuid_utils.uuid7())
        self._actions[action_id] = OptimisticAction(
            id=action_id,
            type=type,
            status=status,
            message=message,
            timestamp=self._clock(),
        )
        return action_id

    def update_optimistic_action(
        self,
        action_id: str,
        *,
        status: Optional[ActionStatus] = None,
        message: Optional[str] = None,
    ) -> Optional[OptimisticAction]:
        """
        Move an action to a new status and/or message

        Returns:
            The updated action, or None when the id is unknown (already purged)
        """
        action = self._actions.get(action_id)
        if action is None:
            Logger.base.debug(f'🧹 [LEDGER] Update for unknown action {action_id} ignored')
            return None

        updated = action.transition(now=self._clock(), status=status, message=message)
        self._actions[action_id] = updated
        return updated

    def remove_optimistic_action(self, action_id: str) -> bool:
        return self._actions.pop(action_id, None) is not None

    def get(self, action_id: str) -> Optional[OptimisticAction]:
        action = self._actions.get(action_id)
        if action is None or self._is_expired(action, self._clock()):
            return None
        return action

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [aid for aid, action in self._actions.items() if self._is_expired(action, now)]
        for action_id in expired:
            del self._actions[action_id]
        return len(expired)

    def start_auto_purge(
        self, scheduler: ITaskScheduler, *, interval: float = settings.LEDGER_PURGE_INTERVAL
    ) -> IScheduledHandle:
        return scheduler.call_every(interval, self.purge_expired, name='optimistic-ledger-purge')

    @property
    def actions(self) -> list[OptimisticAction]:
        now = self._clock()
        return [a for a in self._actions.values() if not self._is_expired(a, now)]

    @property
    def visible_actions(self) -> list[OptimisticAction]:
        """Pending actions plus recent errors; successes are not shown as toasts"""
        now = self._clock()
        return [
            a
            for a in self._actions.values()
            if a.status == ActionStatus.PENDING
            or (a.status == ActionStatus.ERROR and a.age(now) < self.error_ttl)
        ]

    def _is_expired(self, action: OptimisticAction, now: float) -> bool:
        if action.status == ActionStatus.SUCCESS:
            return action.age(now) > self.success_ttl
        if action.status == ActionStatus.ERROR:
            return action.age(now) > self.error_ttl
        return False

    def __len__(self) -> int:
        return len(self._actions)
