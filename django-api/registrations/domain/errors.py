"""Domain error codes for the registrations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    INVALID_INPUT = "INVALID_INPUT"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    RESOURCE_NOT_ACCEPTING_REGISTRATIONS = "RESOURCE_NOT_ACCEPTING_REGISTRATIONS"
    PAST_DEADLINE = "PAST_DEADLINE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    ADMISSION_TIMEOUT = "ADMISSION_TIMEOUT"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ResourceNotFoundError(DomainError):
    """Raised when a resource is not found."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message="Resource not found",
        )
        self.resource_id = resource_id


class RegistrationNotFoundError(DomainError):
    """Raised when a registration is not found."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="Registration not found",
        )
        self.registration_id = registration_id


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message="Invalid ID format",
        )


class InvalidInputError(DomainError):
    """Raised when a value fails a domain rule (email, rating, dates)."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


class DuplicateRegistrationError(DomainError):
    """Raised when the identity already holds an active registration."""

    def __init__(self, existing_registration_id: str | None) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_REGISTRATION,
            message="You have already registered for this resource",
        )
        self.existing_registration_id = existing_registration_id


class CapacityExceededError(DomainError):
    """Raised when every slot of the resource is taken."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message="Resource is fully booked",
        )
        self.resource_id = resource_id


class ResourceNotAcceptingRegistrationsError(DomainError):
    """Raised when the resource is not published or has already started."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.RESOURCE_NOT_ACCEPTING_REGISTRATIONS,
            message=reason,
        )


class PastDeadlineError(DomainError):
    """Raised when the registration deadline has elapsed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PAST_DEADLINE,
            message="Registration deadline has passed",
        )


class InvalidTransitionError(DomainError):
    """Raised when a status change violates the lifecycle graph."""

    def __init__(self, current: str, attempted: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {attempted} from status '{current}'",
        )
        self.current = current
        self.attempted = attempted


class NotEligibleError(DomainError):
    """Raised when a completion precondition is unmet."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.NOT_ELIGIBLE, message=reason)


class AdmissionTimeoutError(DomainError):
    """Raised when the per-resource admission lock could not be taken in time."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(
            code=ErrorCode.ADMISSION_TIMEOUT,
            message="Registration could not be processed, please try again",
        )
        self.resource_id = resource_id
