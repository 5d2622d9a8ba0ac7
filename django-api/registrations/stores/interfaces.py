"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

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


class RegistrationStore(ABC):
    """Interface for resource and registration persistence operations."""

    # Resources

    @abstractmethod
    def add_resource(self, resource: Resource) -> Resource:
        """Persist a new resource."""
        ...

    @abstractmethod
    def get_resource(self, resource_id: ResourceId) -> Resource | None:
        """Return a resource by ID, or None if not found."""
        ...

    @abstractmethod
    def list_resources(self, status: ResourceStatus | None = None) -> list[Resource]:
        """Return resources ordered by starts_at ascending."""
        ...

    @abstractmethod
    def save_resource(self, resource: Resource) -> Resource:
        """Overwrite an existing resource with the given value."""
        ...

    @abstractmethod
    def delete_resource(self, resource_id: ResourceId) -> bool:
        """Delete a resource and, by cascade, its registrations."""
        ...

    @abstractmethod
    def lock_resource(
        self, resource_id: ResourceId, timeout: float
    ) -> AbstractContextManager[Resource | None]:
        """Hold an exclusive per-resource lock for the duration of the block.

        Yields the current resource (or None when it does not exist). Writes
        made inside the block are committed together when it exits cleanly
        and discarded otherwise.

        Raises:
            AdmissionTimeoutError: If the lock is not acquired within timeout.
        """
        ...

    # Registrations

    @abstractmethod
    def add_registration(self, registration: Registration) -> Registration:
        """Persist a new registration.

        Raises:
            DuplicateRegistrationError: If an active registration already
                exists for the same (resource, identity) pair.
        """
        ...

    @abstractmethod
    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        """Return a registration by ID, or None if not found."""
        ...

    @abstractmethod
    def get_registration_by_number(self, registration_number: str) -> Registration | None:
        """Return a registration by its human-facing number, or None."""
        ...

    @abstractmethod
    def find_active_registration(
        self, resource_id: ResourceId, identity: Identity
    ) -> Registration | None:
        """Return the pending or confirmed registration for the pair, if any."""
        ...

    @abstractmethod
    def count_active_registrations(self, resource_id: ResourceId) -> int:
        """Count pending and confirmed registrations for a resource."""
        ...

    @abstractmethod
    def list_registrations(
        self,
        resource_id: ResourceId | None = None,
        status: RegistrationStatus | None = None,
        identity: Identity | None = None,
        payment_status: PaymentStatus | None = None,
    ) -> list[Registration]:
        """Return registrations ordered by created_at descending."""
        ...

    @abstractmethod
    def save_registration(self, registration: Registration) -> Registration:
        """Overwrite an existing registration with the given value."""
        ...

    @abstractmethod
    def delete_registration(self, registration_id: RegistrationId) -> bool:
        """Hard delete a registration."""
        ...

    @abstractmethod
    def lock_registration(
        self, registration_id: RegistrationId, timeout: float
    ) -> AbstractContextManager[Registration | None]:
        """Serialize a registration transition with admissions to its resource.

        Takes the same per-resource lock as ``lock_resource`` and yields the
        current registration (or None when it does not exist).

        Raises:
            AdmissionTimeoutError: If the lock is not acquired within timeout.
        """
        ...
