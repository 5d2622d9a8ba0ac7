"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in registrations/models.py (persistence layer).
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from registrations.domain.value_objects import (
    Capacity,
    Identity,
    Percentage,
    Rating,
    RegistrationId,
    ResourceId,
)

DEFAULT_CERTIFICATE_THRESHOLD = 75


class ResourceKind(Enum):
    """What is being registered for."""

    EVENT = "event"
    WORKSHOP = "workshop"
    CONFERENCE = "conference"
    TRAINING = "training"

    @property
    def number_prefix(self) -> str:
        return _NUMBER_PREFIXES[self]

    @property
    def tracks_attendance(self) -> bool:
        """Workshops and training cohorts record an attendance percentage."""
        return self in (ResourceKind.WORKSHOP, ResourceKind.TRAINING)


_NUMBER_PREFIXES = {
    ResourceKind.EVENT: "REG",
    ResourceKind.WORKSHOP: "WKS",
    ResourceKind.CONFERENCE: "CNF",
    ResourceKind.TRAINING: "TRN",
}


class ResourceStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ResourceStatus.COMPLETED, ResourceStatus.CANCELLED)


class RegistrationStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    ATTENDED = "attended"
    NO_SHOW = "no_show"

    @property
    def is_active(self) -> bool:
        """Active registrations hold a slot and block a second registration."""
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_active


ACTIVE_STATUSES = frozenset({RegistrationStatus.PENDING, RegistrationStatus.CONFIRMED})


class ActorRole(Enum):
    ADMIN = "admin"
    REGISTRANT = "registrant"


class PaymentStatus(Enum):
    """Payment flag recorded by an administrator. No money moves here."""

    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"


@dataclass(frozen=True)
class Resource:
    """Domain representation of a finite-capacity Resource."""

    id: ResourceId
    kind: ResourceKind
    title: str
    starts_at: datetime
    status: ResourceStatus
    created_at: datetime
    updated_at: datetime
    capacity: Capacity | None = None
    registration_deadline: datetime | None = None
    requires_approval: bool = False
    certificate_threshold: Percentage | None = None

    @property
    def is_unlimited(self) -> bool:
        return self.capacity is None


@dataclass(frozen=True)
class Registration:
    """Domain representation of one identity's claim on a Resource."""

    id: RegistrationId
    resource_id: ResourceId
    registration_number: str
    identity: Identity
    status: RegistrationStatus
    created_at: datetime
    updated_at: datetime
    full_name: str = ""
    details: dict = field(default_factory=dict, compare=False)
    attended: bool = False
    attendance_percentage: Percentage | None = None
    rating: Rating | None = None
    feedback: str | None = None
    certificate_requested: bool = False
    certificate_issued: bool = False
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    cancellation_reason: str | None = None
    cancelled_by: ActorRole | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    attendance_marked_at: datetime | None = None
    certificate_issued_at: datetime | None = None
    agreed_at: datetime | None = None


@dataclass(frozen=True)
class Availability:
    """Read-side view of a Resource's remaining capacity."""

    resource_id: ResourceId
    capacity: int | None
    admitted: int

    @property
    def remaining(self) -> int | None:
        if self.capacity is None:
            return None
        return max(self.capacity - self.admitted, 0)


def new_registration_number(kind: ResourceKind, now: datetime) -> str:
    """Human-facing reference such as ``WKS-LX3K9Q2A-7F3Z``."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{kind.number_prefix}-{_base36(millis)}-{suffix}"


_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))
