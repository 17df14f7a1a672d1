"""
Notification Level Enum - Domain Value Object

Severity of a user-visible message (what the UI shows as a toast).
"""

from enum import StrEnum


class NotificationLevel(StrEnum):
    SUCCESS = 'success'
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'
