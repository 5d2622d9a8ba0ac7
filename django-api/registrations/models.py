"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models
from django.utils import timezone

from registrations.domain.models import (
    ActorRole,
    PaymentStatus,
    RegistrationStatus,
    ResourceKind,
    ResourceStatus,
)


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").title()) for member in enum_cls]


ACTIVE_STATUS_VALUES = [RegistrationStatus.PENDING.value, RegistrationStatus.CONFIRMED.value]


class Resource(models.Model):
    """Persistence model for registrable resources."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=20, choices=_choices(ResourceKind))
    title = models.CharField(max_length=255)
    starts_at = models.DateTimeField()
    registration_deadline = models.DateTimeField(blank=True, null=True)
    capacity = models.PositiveIntegerField(blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=_choices(ResourceStatus),
        default=ResourceStatus.DRAFT.value,
    )
    requires_approval = models.BooleanField(default=False)
    certificate_threshold = models.PositiveSmallIntegerField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["starts_at"]
        indexes = [
            models.Index(fields=["status", "starts_at"], name="resource_status_starts_idx"),
        ]

    def __str__(self) -> str:
        return self.title


class Registration(models.Model):
    """Persistence model for registrations."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    resource = models.ForeignKey(
        Resource, on_delete=models.CASCADE, related_name="registrations"
    )
    registration_number = models.CharField(max_length=50, unique=True)
    identity = models.EmailField(max_length=255)
    full_name = models.CharField(max_length=200, blank=True, default="")
    details = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=_choices(RegistrationStatus))
    attended = models.BooleanField(default=False)
    attendance_percentage = models.PositiveSmallIntegerField(blank=True, null=True)
    rating = models.PositiveSmallIntegerField(blank=True, null=True)
    feedback = models.TextField(blank=True, null=True)
    certificate_requested = models.BooleanField(default=False)
    certificate_issued = models.BooleanField(default=False)
    payment_status = models.CharField(
        max_length=20,
        choices=_choices(PaymentStatus),
        default=PaymentStatus.UNPAID.value,
    )
    cancellation_reason = models.CharField(max_length=255, blank=True, null=True)
    cancelled_by = models.CharField(
        max_length=20, choices=_choices(ActorRole), blank=True, null=True
    )
    confirmed_at = models.DateTimeField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    attendance_marked_at = models.DateTimeField(blank=True, null=True)
    certificate_issued_at = models.DateTimeField(blank=True, null=True)
    agreed_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["resource", "status"], name="registration_resource_st_idx"),
            models.Index(fields=["identity"], name="registration_identity_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["resource", "identity"],
                condition=models.Q(status__in=ACTIVE_STATUS_VALUES),
                name="uniq_active_registration_per_identity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.registration_number} - {self.identity}"
