"""Domain errors raised by the services and rendered by the API."""

from enum import Enum


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_OWNER = "NOT_OWNER"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    EVENT_ENDED = "EVENT_ENDED"
    EVENT_FULL = "EVENT_FULL"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    EVENT_ALREADY_OCCURRED = "EVENT_ALREADY_OCCURRED"
    CAPACITY_BELOW_REGISTRATIONS = "CAPACITY_BELOW_REGISTRATIONS"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class DomainError(Exception):
    """Base domain error with code, HTTP status and user-safe message."""

    code: ErrorCode
    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class Unauthenticated(DomainError):
    code = ErrorCode.UNAUTHENTICATED
    status_code = 401
    default_message = "Please sign in to continue."


class Forbidden(DomainError):
    code = ErrorCode.FORBIDDEN
    status_code = 403
    default_message = "You are not allowed to manage this event."


class NotOwner(DomainError):
    code = ErrorCode.NOT_OWNER
    status_code = 403
    default_message = "This registration belongs to another user."


class EventNotFound(DomainError):
    code = ErrorCode.EVENT_NOT_FOUND
    status_code = 404
    default_message = "Event not found."

    def __init__(self, event_id: int) -> None:
        super().__init__()
        self.event_id = event_id


class RegistrationNotFound(DomainError):
    code = ErrorCode.REGISTRATION_NOT_FOUND
    status_code = 404
    default_message = "Registration not found."

    def __init__(self, registration_id: int) -> None:
        super().__init__()
        self.registration_id = registration_id


class UserNotFound(DomainError):
    code = ErrorCode.USER_NOT_FOUND
    status_code = 404
    default_message = "User not found."


class EventEnded(DomainError):
    code = ErrorCode.EVENT_ENDED
    status_code = 409
    default_message = "This event has already taken place."


class EventFull(DomainError):
    code = ErrorCode.EVENT_FULL
    status_code = 409
    default_message = "This event is full."


class AlreadyRegistered(DomainError):
    code = ErrorCode.ALREADY_REGISTERED
    status_code = 409
    default_message = "You are already registered for this event."


class EventAlreadyOccurred(DomainError):
    code = ErrorCode.EVENT_ALREADY_OCCURRED
    status_code = 409
    default_message = "Registrations for past events can't be cancelled."


class CapacityBelowRegistrations(DomainError):
    code = ErrorCode.CAPACITY_BELOW_REGISTRATIONS
    status_code = 409
    default_message = "Capacity can't be lower than the number of registrations."


class EmailTaken(DomainError):
    code = ErrorCode.EMAIL_TAKEN
    status_code = 409
    default_message = "An account with this email already exists."


class StoreUnavailable(DomainError):
    """Transient infrastructure failure; the only retryable error."""

    code = ErrorCode.STORE_UNAVAILABLE
    status_code = 503
    default_message = "The service is temporarily unavailable, please try again."
