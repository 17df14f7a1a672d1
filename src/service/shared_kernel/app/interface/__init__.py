"""Shared Kernel Interfaces"""

from src.service.shared_kernel.app.interface.i_user_notifier import IUserNotifier

__all__ = ['IUserNotifier']
