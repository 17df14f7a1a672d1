"""Offline Domain Enums"""

from src.service.offline.domain.enum.auto_save_status import AutoSaveStatus

__all__ = ['AutoSaveStatus']
