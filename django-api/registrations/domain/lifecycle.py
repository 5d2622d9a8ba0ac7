"""Lifecycle state machines for resources and registrations.

Every transition is a pure function: it takes the current value and
returns a new one, or raises a domain error. Nothing here touches storage.
"""

from dataclasses import replace
from datetime import datetime
from enum import Enum

from registrations.domain.errors import (
    InvalidTransitionError,
    NotEligibleError,
    PastDeadlineError,
    ResourceNotAcceptingRegistrationsError,
)
from registrations.domain.models import (
    ActorRole,
    PaymentStatus,
    Registration,
    RegistrationStatus,
    Resource,
    ResourceStatus,
)
from registrations.domain.value_objects import Percentage, Rating


class ResourceEvent(Enum):
    """Administrative actions that move a resource through its lifecycle."""

    PUBLISH = "publish"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


RESOURCE_TRANSITIONS: dict[ResourceEvent, tuple[frozenset[ResourceStatus], ResourceStatus]] = {
    ResourceEvent.PUBLISH: (frozenset({ResourceStatus.DRAFT}), ResourceStatus.PUBLISHED),
    ResourceEvent.START: (frozenset({ResourceStatus.PUBLISHED}), ResourceStatus.ONGOING),
    ResourceEvent.COMPLETE: (frozenset({ResourceStatus.ONGOING}), ResourceStatus.COMPLETED),
    ResourceEvent.CANCEL: (
        frozenset({ResourceStatus.DRAFT, ResourceStatus.PUBLISHED, ResourceStatus.ONGOING}),
        ResourceStatus.CANCELLED,
    ),
}


def transition_resource(resource: Resource, event: ResourceEvent, now: datetime) -> Resource:
    sources, target = RESOURCE_TRANSITIONS[event]
    if resource.status not in sources:
        raise InvalidTransitionError(resource.status.value, event.value)
    return replace(resource, status=target, updated_at=now)


def ensure_accepting_registrations(resource: Resource, now: datetime) -> None:
    """Raise unless the resource admits new registrations at ``now``."""
    if resource.status is not ResourceStatus.PUBLISHED:
        raise ResourceNotAcceptingRegistrationsError(
            f"Cannot register for a {resource.status.value} resource"
        )
    if now >= resource.starts_at:
        raise ResourceNotAcceptingRegistrationsError("Cannot register for a past resource")
    if resource.registration_deadline is not None and now >= resource.registration_deadline:
        raise PastDeadlineError()


def confirm(registration: Registration, now: datetime) -> Registration:
    if registration.status is not RegistrationStatus.PENDING:
        raise InvalidTransitionError(registration.status.value, "confirm")
    return replace(
        registration,
        status=RegistrationStatus.CONFIRMED,
        confirmed_at=now,
        updated_at=now,
    )


def cancel(
    registration: Registration,
    cancelled_by: ActorRole,
    now: datetime,
    reason: str | None = None,
) -> Registration:
    if not registration.status.is_active:
        raise InvalidTransitionError(registration.status.value, "cancel")
    return replace(
        registration,
        status=RegistrationStatus.CANCELLED,
        cancelled_at=now,
        cancelled_by=cancelled_by,
        cancellation_reason=reason,
        updated_at=now,
    )


def mark_attendance(
    registration: Registration,
    resource: Resource,
    attended: bool,
    now: datetime,
    attendance_percentage: Percentage | None = None,
) -> Registration:
    action = "mark attendance" if attended else "mark no-show"
    if registration.status is not RegistrationStatus.CONFIRMED:
        raise InvalidTransitionError(registration.status.value, action)
    closable = resource.status in (ResourceStatus.ONGOING, ResourceStatus.COMPLETED)
    if now < resource.starts_at and not closable:
        raise InvalidTransitionError(
            registration.status.value, f"{action} before the resource starts"
        )
    return replace(
        registration,
        status=RegistrationStatus.ATTENDED if attended else RegistrationStatus.NO_SHOW,
        attended=attended,
        attendance_percentage=attendance_percentage if attended else Percentage(0),
        attendance_marked_at=now,
        updated_at=now,
    )


def submit_feedback(
    registration: Registration,
    rating: Rating,
    feedback: str | None,
    now: datetime,
) -> Registration:
    if registration.status is not RegistrationStatus.ATTENDED:
        raise NotEligibleError("Only attended participants can submit feedback")
    return replace(registration, rating=rating, feedback=feedback, updated_at=now)


def record_payment(
    registration: Registration,
    payment_status: PaymentStatus,
    now: datetime,
) -> Registration:
    return replace(registration, payment_status=payment_status, updated_at=now)
