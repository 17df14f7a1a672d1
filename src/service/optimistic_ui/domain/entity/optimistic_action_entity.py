from typing import Optional

import attrs

from src.service.optimistic_ui.domain.enum import ActionStatus, ActionType


@attrs.frozen
class OptimisticAction:
    """
    One user gesture awaiting (or reporting) its network outcome

    timestamp is the clock reading of the last status transition, so the
    display TTL of a success/error counts from when it settled.
    """

    id: str
    type: ActionType
    status: ActionStatus
    message: str
    timestamp: float

    def age(self, now: float) -> float:
        return now - self.timestamp

    def transition(
        self, *, now: float, status: Optional[ActionStatus] = None, message: Optional[str] = None
    ) -> 'OptimisticAction':
        return attrs.evolve(
            self,
            status=status if status is not None else self.status,
            message=message if message is not None else self.message,
            timestamp=now if status is not None and status != self.status else self.timestamp,
        )
