from registrations.domain.models import (
    ACTIVE_STATUSES,
    ActorRole,
    Availability,
    PaymentStatus,
    Registration,
    RegistrationStatus,
    Resource,
    ResourceKind,
    ResourceStatus,
)
from registrations.domain.value_objects import (
    Capacity,
    Identity,
    Percentage,
    Rating,
    RegistrationId,
    ResourceId,
)

__all__ = [
    "ACTIVE_STATUSES",
    "ActorRole",
    "Availability",
    "PaymentStatus",
    "Registration",
    "RegistrationStatus",
    "Resource",
    "ResourceKind",
    "ResourceStatus",
    "Capacity",
    "Identity",
    "Percentage",
    "Rating",
    "RegistrationId",
    "ResourceId",
]
