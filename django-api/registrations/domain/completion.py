"""Completion gate: certificate eligibility from attendance facts."""

from dataclasses import replace
from datetime import datetime

from registrations.domain.errors import NotEligibleError
from registrations.domain.models import Registration, RegistrationStatus, Resource


def ensure_certificate_eligible(registration: Registration, resource: Resource) -> None:
    """Raise NotEligibleError unless a certificate may be issued.

    Resources without a ``certificate_threshold`` (simple events) only
    require attendance. Workshops and training also require that the
    participant asked for a certificate when registering, and a threshold
    requires the recorded percentage to reach it.
    """
    if resource.kind.tracks_attendance and not registration.certificate_requested:
        raise NotEligibleError("Participant did not request a certificate")
    if registration.status is not RegistrationStatus.ATTENDED:
        raise NotEligibleError(
            "Certificate can only be issued to participants who attended"
        )
    threshold = resource.certificate_threshold
    if threshold is None:
        return
    percentage = registration.attendance_percentage
    if percentage is None or percentage.value < threshold.value:
        raise NotEligibleError(
            f"Participant must have at least {threshold.value}% attendance "
            "to receive a certificate"
        )


def issue_certificate(
    registration: Registration, resource: Resource, now: datetime
) -> Registration:
    """Return the registration with the certificate marked as issued.

    Re-issuing is a no-op: the same value is returned unchanged.
    """
    if registration.certificate_issued:
        return registration
    ensure_certificate_eligible(registration, resource)
    return replace(
        registration,
        certificate_issued=True,
        certificate_issued_at=now,
        updated_at=now,
    )
