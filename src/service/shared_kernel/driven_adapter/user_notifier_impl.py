"""
In-memory User Notifier Implementation

Keeps the most recent user-visible messages and fans each one out to
subscribers (a UI layer rendering toasts) over anyio memory streams.

Memory Management:
- History: last `history_size` notifications
- Stream max buffer: 10 notifications per subscriber
- Drop policy: silently drop if a subscriber stream is full (send_nowait raises WouldBlock)
"""

from collections import deque
from datetime import datetime, timezone
from typing import Optional

from anyio import BrokenResourceError, WouldBlock, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
import attrs

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface import IUserNotifier
from src.service.shared_kernel.domain.enum import NotificationLevel


@attrs.frozen
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime = attrs.field(factory=lambda: datetime.now(timezone.utc))


class InMemoryUserNotifier(IUserNotifier):
    def __init__(self, *, history_size: int = 50) -> None:
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._subscribers: list[
            tuple[MemoryObjectSendStream[Notification], MemoryObjectReceiveStream[Notification]]
        ] = []

    def success(self, message: str) -> None:
        self._notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> None:
        self._notify(NotificationLevel.INFO, message)

    def warning(self, message: str) -> None:
        self._notify(NotificationLevel.WARNING, message)

    def error(self, message: str) -> None:
        self._notify(NotificationLevel.ERROR, message)

    def messages(self, level: Optional[NotificationLevel] = None) -> list[str]:
        return [n.message for n in self._history if level is None or n.level == level]

    @property
    def history(self) -> list[Notification]:
        return list(self._history)

    def subscribe(self) -> MemoryObjectReceiveStream[Notification]:
        send_stream, receive_stream = create_memory_object_stream[Notification](
            max_buffer_size=10
        )
        self._subscribers.append((send_stream, receive_stream))
        return receive_stream

    async def unsubscribe(self, stream: MemoryObjectReceiveStream[Notification]) -> None:
        for i, (send_stream, receive_stream) in enumerate(self._subscribers):
            if receive_stream is stream:
                await send_stream.aclose()
                await receive_stream.aclose()
                self._subscribers.pop(i)
                break

    def _notify(self, level: NotificationLevel, message: str) -> None:
        notification = Notification(level=level, message=message)
        self._history.append(notification)

        if level == NotificationLevel.ERROR:
            Logger.base.warning(f'🔔 [NOTIFY] {level}: {message}')
        else:
            Logger.base.info(f'🔔 [NOTIFY] {level}: {message}')

        for send_stream, _ in list(self._subscribers):
            try:
                send_stream.send_nowait(notification)
            except WouldBlock:
                Logger.base.warning(f'⚠️ [NOTIFY] Subscriber stream full, dropping: {message}')
            except BrokenResourceError:
                # Receiver closed without unsubscribing
                self._subscribers = [s for s in self._subscribers if s[0] is not send_stream]
