"""In-process, thread-safe implementation of the RegistrationStore."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from registrations.domain import (
    Identity,
    PaymentStatus,
    Registration,
    RegistrationId,
    RegistrationStatus,
    Resource,
    ResourceId,
    ResourceStatus,
)
from registrations.domain.errors import AdmissionTimeoutError, DuplicateRegistrationError
from registrations.stores.interfaces import RegistrationStore
from registrations.stores.locks import KeyedLocks


class InMemoryRegistrationStore(RegistrationStore):
    """Dictionary-backed store guarded by locks.

    A single re-entrant lock protects the dictionaries themselves. Admissions
    and registration transitions are serialized per resource.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._resources: dict[ResourceId, Resource] = {}
        self._registrations: dict[RegistrationId, Registration] = {}
        self._resource_locks = KeyedLocks()

    def add_resource(self, resource: Resource) -> Resource:
        with self._lock:
            self._resources[resource.id] = resource
        return resource

    def get_resource(self, resource_id: ResourceId) -> Resource | None:
        with self._lock:
            return self._resources.get(resource_id)

    def list_resources(self, status: ResourceStatus | None = None) -> list[Resource]:
        with self._lock:
            resources = [
                r for r in self._resources.values() if status is None or r.status is status
            ]
        return sorted(resources, key=lambda r: r.starts_at)

    def save_resource(self, resource: Resource) -> Resource:
        with self._lock:
            self._resources[resource.id] = resource
        return resource

    def delete_resource(self, resource_id: ResourceId) -> bool:
        with self._lock:
            if self._resources.pop(resource_id, None) is None:
                return False
            for registration_id in [
                r.id for r in self._registrations.values() if r.resource_id == resource_id
            ]:
                del self._registrations[registration_id]
        return True

    @contextmanager
    def _holding(self, resource_id: ResourceId, timeout: float) -> Iterator[None]:
        if not self._resource_locks.acquire(resource_id, timeout):
            raise AdmissionTimeoutError(str(resource_id))
        try:
            yield
        finally:
            self._resource_locks.release(resource_id)

    @contextmanager
    def lock_resource(self, resource_id: ResourceId, timeout: float) -> Iterator[Resource | None]:
        with self._holding(resource_id, timeout):
            with self._lock:
                snapshot = self._resources.get(resource_id)
                existing = {
                    r.id for r in self._registrations.values() if r.resource_id == resource_id
                }
            try:
                yield self.get_resource(resource_id)
            except BaseException:
                self._rollback(resource_id, snapshot, existing)
                raise

    def _rollback(
        self,
        resource_id: ResourceId,
        snapshot: Resource | None,
        existing: set[RegistrationId],
    ) -> None:
        with self._lock:
            if snapshot is not None:
                self._resources[resource_id] = snapshot
            for registration_id in [
                r.id
                for r in self._registrations.values()
                if r.resource_id == resource_id and r.id not in existing
            ]:
                del self._registrations[registration_id]

    def add_registration(self, registration: Registration) -> Registration:
        with self._lock:
            if registration.status.is_active:
                clash = self.find_active_registration(
                    registration.resource_id, registration.identity
                )
                if clash is not None:
                    raise DuplicateRegistrationError(str(clash.id))
            self._registrations[registration.id] = registration
        return registration

    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        with self._lock:
            return self._registrations.get(registration_id)

    def get_registration_by_number(self, registration_number: str) -> Registration | None:
        with self._lock:
            for registration in self._registrations.values():
                if registration.registration_number == registration_number:
                    return registration
        return None

    def find_active_registration(
        self, resource_id: ResourceId, identity: Identity
    ) -> Registration | None:
        with self._lock:
            for registration in self._registrations.values():
                if (
                    registration.resource_id == resource_id
                    and registration.identity == identity
                    and registration.status.is_active
                ):
                    return registration
        return None

    def count_active_registrations(self, resource_id: ResourceId) -> int:
        with self._lock:
            return sum(
                1
                for r in self._registrations.values()
                if r.resource_id == resource_id and r.status.is_active
            )

    def list_registrations(
        self,
        resource_id: ResourceId | None = None,
        status: RegistrationStatus | None = None,
        identity: Identity | None = None,
        payment_status: PaymentStatus | None = None,
    ) -> list[Registration]:
        with self._lock:
            registrations = [
                r
                for r in self._registrations.values()
                if (resource_id is None or r.resource_id == resource_id)
                and (status is None or r.status is status)
                and (identity is None or r.identity == identity)
                and (payment_status is None or r.payment_status is payment_status)
            ]
        return sorted(registrations, key=lambda r: r.created_at, reverse=True)

    def save_registration(self, registration: Registration) -> Registration:
        with self._lock:
            self._registrations[registration.id] = registration
        return registration

    def delete_registration(self, registration_id: RegistrationId) -> bool:
        with self._lock:
            return self._registrations.pop(registration_id, None) is not None

    @contextmanager
    def lock_registration(
        self, registration_id: RegistrationId, timeout: float
    ) -> Iterator[Registration | None]:
        registration = self.get_registration(registration_id)
        if registration is None:
            yield None
            return
        with self._holding(registration.resource_id, timeout):
            yield self.get_registration(registration_id)
