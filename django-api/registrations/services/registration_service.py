"""Registration service - admission and lifecycle of registrations.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from registrations import signals
from registrations.domain import (
    ActorRole,
    Availability,
    PaymentStatus,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Resource,
)
from registrations.domain import completion, lifecycle
from registrations.domain.errors import (
    DomainError,
    InvalidInputError,
    RegistrationNotFoundError,
    ResourceNotFoundError,
)
from registrations.domain.models import new_registration_number
from registrations.services.admission import CapacityAllocator, UniquenessGuard
from registrations.services.inputs import (
    parse_enum,
    parse_identity,
    parse_percentage,
    parse_rating,
    parse_registration_id,
    parse_resource_id,
)
from registrations.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)

DEFAULT_ADMISSION_TIMEOUT = 5.0


def utcnow() -> datetime:
    return datetime.now(UTC)


class RegistrationService:
    """Service for submitting registrations and driving their lifecycle."""

    def __init__(
        self,
        store: RegistrationStore,
        clock: Callable[[], datetime] = utcnow,
        admission_timeout: float = DEFAULT_ADMISSION_TIMEOUT,
    ) -> None:
        self._store = store
        self._clock = clock
        self._admission_timeout = admission_timeout
        self._guard = UniquenessGuard(store)
        self._allocator = CapacityAllocator(store)

    def submit_registration(
        self,
        resource_id: str,
        email: str,
        full_name: str = "",
        details: dict | None = None,
        certificate_requested: bool = False,
        agreed_to_terms: bool = False,
    ) -> Registration:
        """Admit a new registration against a resource.

        The window check, uniqueness guard, capacity allocator and insert run
        as one unit under the resource lock. The registration starts
        ``confirmed``, or ``pending`` when the resource requires approval.
        Agreement to the terms is stamped with the admission time.

        Raises:
            InvalidIdError: If resource_id is not a valid UUID.
            InvalidInputError: If email is not a valid address.
            ResourceNotFoundError: If the resource does not exist.
            ResourceNotAcceptingRegistrationsError: If the resource is not
                published or has already started.
            PastDeadlineError: If the registration deadline has passed.
            DuplicateRegistrationError: If the identity is already registered.
            CapacityExceededError: If the resource is full.
            AdmissionTimeoutError: If the resource lock is not acquired in time.
        """
        rid = parse_resource_id(resource_id)
        identity = parse_identity(email)
        try:
            with self._store.lock_resource(rid, self._admission_timeout) as resource:
                if resource is None:
                    raise ResourceNotFoundError(str(rid))
                now = self._clock()
                lifecycle.ensure_accepting_registrations(resource, now)
                self._guard.check_unique(rid, identity)
                self._allocator.try_admit(resource)
                registration = Registration(
                    id=RegistrationId(value=uuid.uuid4()),
                    resource_id=rid,
                    registration_number=new_registration_number(resource.kind, now),
                    identity=identity,
                    status=RegistrationStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                    full_name=(full_name or "").strip(),
                    details=dict(details or {}),
                    certificate_requested=bool(certificate_requested),
                    agreed_at=now if agreed_to_terms else None,
                )
                if not resource.requires_approval:
                    registration = lifecycle.confirm(registration, now)
                registration = self._store.add_registration(registration)
        except DomainError as exc:
            logger.info("Registration for resource %s rejected: %s", rid, exc.code.value)
            raise

        logger.info(
            "Registration %s admitted to resource %s as %s",
            registration.id,
            rid,
            registration.status.value,
        )
        signals.dispatch(signals.registration_admitted, type(self), registration=registration)
        return registration

    def confirm_registration(self, registration_id: str) -> Registration:
        """Approve a pending registration.

        Raises:
            InvalidIdError, RegistrationNotFoundError, InvalidTransitionError
        """
        reg_id = parse_registration_id(registration_id)
        with self._store.lock_registration(reg_id, self._admission_timeout) as registration:
            if registration is None:
                raise RegistrationNotFoundError(str(reg_id))
            updated = self._store.save_registration(lifecycle.confirm(registration, self._clock()))
        logger.info("Registration %s confirmed", reg_id)
        signals.dispatch(signals.registration_confirmed, type(self), registration=updated)
        return updated

    def cancel_registration(
        self,
        registration_id: str,
        role: str | ActorRole = ActorRole.ADMIN,
        email: str | None = None,
        reason: str | None = None,
    ) -> Registration:
        """Cancel a pending or confirmed registration, freeing its slot.

        A registrant may only cancel their own registration; someone else's
        is reported as not found.

        Raises:
            InvalidIdError, InvalidInputError, RegistrationNotFoundError,
            InvalidTransitionError, AdmissionTimeoutError
        """
        reg_id = parse_registration_id(registration_id)
        cancelled_by = parse_enum(ActorRole, role)
        identity = None
        if cancelled_by is ActorRole.REGISTRANT:
            if not email:
                raise InvalidInputError("Email is required to cancel your own registration")
            identity = parse_identity(email)
        with self._store.lock_registration(reg_id, self._admission_timeout) as registration:
            if registration is None:
                raise RegistrationNotFoundError(str(reg_id))
            if identity is not None and registration.identity != identity:
                raise RegistrationNotFoundError(str(reg_id))
            cancelled = lifecycle.cancel(registration, cancelled_by, self._clock(), reason)
            updated = self._store.save_registration(cancelled)
        logger.info("Registration %s cancelled by %s", reg_id, cancelled_by.value)
        signals.dispatch(signals.registration_cancelled, type(self), registration=updated)
        return updated

    def mark_attendance(
        self,
        registration_id: str,
        attended: bool,
        attendance_percentage: int | None = None,
    ) -> Registration:
        """Record attendance (``attended``) or a no-show for a confirmed registration.

        Raises:
            InvalidIdError, RegistrationNotFoundError, InvalidInputError,
            InvalidTransitionError
        """
        reg_id = parse_registration_id(registration_id)
        percentage = parse_percentage(attendance_percentage)
        with self._store.lock_registration(reg_id, self._admission_timeout) as registration:
            if registration is None:
                raise RegistrationNotFoundError(str(reg_id))
            resource = self._require_resource(registration)
            marked = lifecycle.mark_attendance(
                registration, resource, bool(attended), self._clock(), percentage
            )
            updated = self._store.save_registration(marked)
        logger.info("Registration %s marked %s", reg_id, updated.status.value)
        signals.dispatch(signals.attendance_marked, type(self), registration=updated)
        return updated

    def submit_feedback(
        self,
        registration_id: str,
        rating: int,
        feedback: str | None = None,
    ) -> Registration:
        """Store a rating and optional comment; resubmitting overwrites.

        Raises:
            InvalidIdError, RegistrationNotFoundError, InvalidInputError,
            NotEligibleError
        """
        reg_id = parse_registration_id(registration_id)
        value = parse_rating(rating)
        with self._store.lock_registration(reg_id, self._admission_timeout) as registration:
            if registration is None:
                raise RegistrationNotFoundError(str(reg_id))
            updated = self._store.save_registration(
                lifecycle.submit_feedback(registration, value, feedback, self._clock())
            )
        return updated

    def issue_certificate(self, registration_id: str) -> Registration:
        """Pass the completion gate and mark the certificate as issued.

        Idempotent: a registration whose certificate was already issued is
        returned unchanged and no signal is sent again.

        Raises:
            InvalidIdError, RegistrationNotFoundError, NotEligibleError
        """
        reg_id = parse_registration_id(registration_id)
        with self._store.lock_registration(reg_id, self._admission_timeout) as registration:
            if registration is None:
                raise RegistrationNotFoundError(str(reg_id))
            if registration.certificate_issued:
                return registration
            resource = self._require_resource(registration)
            issued = completion.issue_certificate(registration, resource, self._clock())
            updated = self._store.save_registration(issued)
        logger.info("Certificate issued for registration %s", reg_id)
        signals.dispatch(signals.certificate_issued, type(self), registration=updated)
        return updated

    def record_payment(
        self, registration_id: str, payment_status: str | PaymentStatus
    ) -> Registration:
        """Set the administrator-recorded payment flag.

        Raises:
            InvalidIdError, InvalidInputError, RegistrationNotFoundError
        """
        reg_id = parse_registration_id(registration_id)
        value = parse_enum(PaymentStatus, payment_status)
        with self._store.lock_registration(reg_id, self._admission_timeout) as registration:
            if registration is None:
                raise RegistrationNotFoundError(str(reg_id))
            updated = self._store.save_registration(
                lifecycle.record_payment(registration, value, self._clock())
            )
        logger.info("Registration %s payment recorded as %s", reg_id, value.value)
        return updated

    def get_registration(self, registration_id: str) -> Registration:
        """Raises:
        InvalidIdError, RegistrationNotFoundError
        """
        reg_id = parse_registration_id(registration_id)
        registration = self._store.get_registration(reg_id)
        if registration is None:
            raise RegistrationNotFoundError(str(reg_id))
        return registration

    def get_by_number(self, registration_number: str) -> Registration:
        registration = self._store.get_registration_by_number(registration_number.strip().upper())
        if registration is None:
            raise RegistrationNotFoundError(registration_number)
        return registration

    def list_registrations(
        self,
        resource_id: str | None = None,
        status: str | None = None,
        email: str | None = None,
        payment_status: str | None = None,
    ) -> list[Registration]:
        return self._store.list_registrations(
            resource_id=parse_resource_id(resource_id) if resource_id else None,
            status=parse_enum(RegistrationStatus, status) if status else None,
            identity=parse_identity(email) if email else None,
            payment_status=parse_enum(PaymentStatus, payment_status) if payment_status else None,
        )

    def delete_registration(self, registration_id: str) -> None:
        """Administrative hard delete, outside the lifecycle."""
        reg_id = parse_registration_id(registration_id)
        if not self._store.delete_registration(reg_id):
            raise RegistrationNotFoundError(str(reg_id))
        logger.info("Registration %s deleted", reg_id)

    def availability(self, resource_id: str) -> Availability:
        rid = parse_resource_id(resource_id)
        resource = self._store.get_resource(rid)
        if resource is None:
            raise ResourceNotFoundError(str(rid))
        return Availability(
            resource_id=rid,
            capacity=resource.capacity.value if resource.capacity else None,
            admitted=self._allocator.admitted_count(resource),
        )

    def _require_resource(self, registration: Registration) -> Resource:
        resource = self._store.get_resource(registration.resource_id)
        if resource is None:
            raise ResourceNotFoundError(str(registration.resource_id))
        return resource
