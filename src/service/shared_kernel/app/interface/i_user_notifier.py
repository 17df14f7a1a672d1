"""
User Notifier Interface

Port for user-visible messages. Use cases report validation rejections,
failed network calls and timer alerts through it instead of raising.
"""

from abc import ABC, abstractmethod


class IUserNotifier(ABC):
    @abstractmethod
    def success(self, message: str) -> None:
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass
