class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class SeatUnavailableError(CustomBaseError):
    """Seat is booked, or locked by another user"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class SeatLimitExceededError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class ApiError(CustomBaseError):
    """Remote booking API answered with a non-2xx status"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message, status_code)


class ApiUnavailableError(ApiError):
    """Remote booking API could not be reached"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)
