"""Optimistic UI Domain Enums"""

from src.service.optimistic_ui.domain.enum.optimistic_action_enum import ActionStatus, ActionType

__all__ = ['ActionStatus', 'ActionType']
