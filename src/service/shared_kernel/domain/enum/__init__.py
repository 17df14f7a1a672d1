"""Shared Kernel Enums"""

from src.service.shared_kernel.domain.enum.notification_level import NotificationLevel

__all__ = ['NotificationLevel']
