"""Django ORM implementation of the RegistrationStore."""

import logging
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from django.db import IntegrityError, OperationalError, connection, transaction

from registrations import models
from registrations.domain import (
    ActorRole,
    Capacity,
    Identity,
    PaymentStatus,
    Percentage,
    Rating,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Resource,
    ResourceId,
    ResourceKind,
    ResourceStatus,
)
from registrations.domain.errors import AdmissionTimeoutError, DuplicateRegistrationError
from registrations.stores.interfaces import RegistrationStore
from registrations.stores.locks import KeyedLocks

logger = logging.getLogger(__name__)

# Units of work are also serialized within the process. SQLite has no row
# locks and locks whole tables, so there every unit shares one key.
_process_locks = KeyedLocks()
_SQLITE_KEY = "sqlite"


def _lock_key(resource_id: ResourceId) -> Hashable:
    return _SQLITE_KEY if connection.vendor == "sqlite" else resource_id


def _to_resource(row: models.Resource) -> Resource:
    return Resource(
        id=ResourceId(value=row.id),
        kind=ResourceKind(row.kind),
        title=row.title,
        starts_at=row.starts_at,
        status=ResourceStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        capacity=Capacity(row.capacity) if row.capacity is not None else None,
        registration_deadline=row.registration_deadline,
        requires_approval=row.requires_approval,
        certificate_threshold=(
            Percentage(row.certificate_threshold) if row.certificate_threshold is not None else None
        ),
    )


def _resource_fields(resource: Resource) -> dict:
    return {
        "kind": resource.kind.value,
        "title": resource.title,
        "starts_at": resource.starts_at,
        "registration_deadline": resource.registration_deadline,
        "capacity": resource.capacity.value if resource.capacity else None,
        "status": resource.status.value,
        "requires_approval": resource.requires_approval,
        "certificate_threshold": (
            resource.certificate_threshold.value if resource.certificate_threshold else None
        ),
        "created_at": resource.created_at,
        "updated_at": resource.updated_at,
    }


def _to_registration(row: models.Registration) -> Registration:
    return Registration(
        id=RegistrationId(value=row.id),
        resource_id=ResourceId(value=row.resource_id),
        registration_number=row.registration_number,
        identity=Identity.from_email(row.identity),
        status=RegistrationStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        full_name=row.full_name,
        details=row.details or {},
        attended=row.attended,
        attendance_percentage=(
            Percentage(row.attendance_percentage) if row.attendance_percentage is not None else None
        ),
        rating=Rating(row.rating) if row.rating is not None else None,
        feedback=row.feedback,
        certificate_requested=row.certificate_requested,
        certificate_issued=row.certificate_issued,
        payment_status=PaymentStatus(row.payment_status),
        cancellation_reason=row.cancellation_reason,
        cancelled_by=ActorRole(row.cancelled_by) if row.cancelled_by else None,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
        attendance_marked_at=row.attendance_marked_at,
        certificate_issued_at=row.certificate_issued_at,
        agreed_at=row.agreed_at,
    )


def _registration_fields(registration: Registration) -> dict:
    return {
        "resource_id": registration.resource_id.value,
        "registration_number": registration.registration_number,
        "identity": registration.identity.value,
        "full_name": registration.full_name,
        "details": registration.details,
        "status": registration.status.value,
        "attended": registration.attended,
        "attendance_percentage": (
            registration.attendance_percentage.value
            if registration.attendance_percentage is not None
            else None
        ),
        "rating": registration.rating.value if registration.rating else None,
        "feedback": registration.feedback,
        "certificate_requested": registration.certificate_requested,
        "certificate_issued": registration.certificate_issued,
        "payment_status": registration.payment_status.value,
        "cancellation_reason": registration.cancellation_reason,
        "cancelled_by": registration.cancelled_by.value if registration.cancelled_by else None,
        "confirmed_at": registration.confirmed_at,
        "cancelled_at": registration.cancelled_at,
        "attendance_marked_at": registration.attendance_marked_at,
        "certificate_issued_at": registration.certificate_issued_at,
        "agreed_at": registration.agreed_at,
        "created_at": registration.created_at,
        "updated_at": registration.updated_at,
    }


class DjangoRegistrationStore(RegistrationStore):
    """PostgreSQL-backed registration store using Django ORM."""

    def add_resource(self, resource: Resource) -> Resource:
        row = models.Resource.objects.create(id=resource.id.value, **_resource_fields(resource))
        return _to_resource(row)

    def get_resource(self, resource_id: ResourceId) -> Resource | None:
        row = models.Resource.objects.filter(pk=resource_id.value).first()
        return _to_resource(row) if row else None

    def list_resources(self, status: ResourceStatus | None = None) -> list[Resource]:
        queryset = models.Resource.objects.order_by("starts_at")
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [_to_resource(row) for row in queryset]

    def save_resource(self, resource: Resource) -> Resource:
        models.Resource.objects.filter(pk=resource.id.value).update(**_resource_fields(resource))
        return resource

    def delete_resource(self, resource_id: ResourceId) -> bool:
        deleted, _ = models.Resource.objects.filter(pk=resource_id.value).delete()
        return deleted > 0

    @contextmanager
    def _unit_of_work(self, key: Hashable, timeout: float, subject: str) -> Iterator[None]:
        """Process lock plus one transaction with a bounded row-lock wait.

        Raises:
            AdmissionTimeoutError: If either lock is not acquired within timeout.
        """
        if not _process_locks.acquire(key, timeout):
            raise AdmissionTimeoutError(subject)
        try:
            with transaction.atomic():
                try:
                    self._bound_lock_wait(timeout)
                    yield
                except OperationalError as exc:
                    logger.warning("Lock for %s not acquired: %s", subject, exc)
                    raise AdmissionTimeoutError(subject) from exc
        finally:
            _process_locks.release(key)

    @contextmanager
    def lock_resource(self, resource_id: ResourceId, timeout: float) -> Iterator[Resource | None]:
        with self._unit_of_work(_lock_key(resource_id), timeout, str(resource_id)):
            row = models.Resource.objects.select_for_update().filter(pk=resource_id.value).first()
            yield _to_resource(row) if row else None

    @staticmethod
    def _bound_lock_wait(timeout: float) -> None:
        if connection.vendor != "postgresql":
            return
        with connection.cursor() as cursor:
            cursor.execute(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'")

    def add_registration(self, registration: Registration) -> Registration:
        try:
            with transaction.atomic():
                row = models.Registration.objects.create(
                    id=registration.id.value, **_registration_fields(registration)
                )
        except IntegrityError as exc:
            existing = self.find_active_registration(
                registration.resource_id, registration.identity
            )
            if existing is None:
                raise
            raise DuplicateRegistrationError(str(existing.id)) from exc
        return _to_registration(row)

    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        row = models.Registration.objects.filter(pk=registration_id.value).first()
        return _to_registration(row) if row else None

    def get_registration_by_number(self, registration_number: str) -> Registration | None:
        row = models.Registration.objects.filter(registration_number=registration_number).first()
        return _to_registration(row) if row else None

    def find_active_registration(
        self, resource_id: ResourceId, identity: Identity
    ) -> Registration | None:
        row = models.Registration.objects.filter(
            resource_id=resource_id.value,
            identity=identity.value,
            status__in=models.ACTIVE_STATUS_VALUES,
        ).first()
        return _to_registration(row) if row else None

    def count_active_registrations(self, resource_id: ResourceId) -> int:
        return models.Registration.objects.filter(
            resource_id=resource_id.value,
            status__in=models.ACTIVE_STATUS_VALUES,
        ).count()

    def list_registrations(
        self,
        resource_id: ResourceId | None = None,
        status: RegistrationStatus | None = None,
        identity: Identity | None = None,
        payment_status: PaymentStatus | None = None,
    ) -> list[Registration]:
        queryset = models.Registration.objects.order_by("-created_at")
        if resource_id is not None:
            queryset = queryset.filter(resource_id=resource_id.value)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        if identity is not None:
            queryset = queryset.filter(identity=identity.value)
        if payment_status is not None:
            queryset = queryset.filter(payment_status=payment_status.value)
        return [_to_registration(row) for row in queryset]

    def save_registration(self, registration: Registration) -> Registration:
        models.Registration.objects.filter(pk=registration.id.value).update(
            **_registration_fields(registration)
        )
        return registration

    def delete_registration(self, registration_id: RegistrationId) -> bool:
        deleted, _ = models.Registration.objects.filter(pk=registration_id.value).delete()
        return deleted > 0

    @contextmanager
    def lock_registration(
        self, registration_id: RegistrationId, timeout: float
    ) -> Iterator[Registration | None]:
        if connection.vendor == "sqlite":
            key = _SQLITE_KEY
        else:
            resource_pk = (
                models.Registration.objects.filter(pk=registration_id.value)
                .values_list("resource_id", flat=True)
                .first()
            )
            if resource_pk is None:
                yield None
                return
            key = ResourceId(value=resource_pk)
        with self._unit_of_work(key, timeout, str(registration_id)):
            row = (
                models.Registration.objects.select_for_update()
                .filter(pk=registration_id.value)
                .first()
            )
            yield _to_registration(row) if row else None
