"""Admission components: uniqueness guard and capacity allocator.

Both read the ledger and must run inside ``RegistrationStore.lock_resource``
together with the insert that follows them.
"""

from registrations.domain import Identity, Resource, ResourceId
from registrations.domain.errors import CapacityExceededError, DuplicateRegistrationError
from registrations.stores.interfaces import RegistrationStore


class UniquenessGuard:
    """At most one pending or confirmed registration per (resource, identity)."""

    def __init__(self, store: RegistrationStore) -> None:
        self._store = store

    def check_unique(self, resource_id: ResourceId, identity: Identity) -> None:
        """Raises:
        DuplicateRegistrationError: If the identity already holds an active
            registration; carries the existing registration's id.
        """
        existing = self._store.find_active_registration(resource_id, identity)
        if existing is not None:
            raise DuplicateRegistrationError(str(existing.id))


class CapacityAllocator:
    """Admits while pending plus confirmed registrations stay below capacity."""

    def __init__(self, store: RegistrationStore) -> None:
        self._store = store

    def admitted_count(self, resource: Resource) -> int:
        return self._store.count_active_registrations(resource.id)

    def try_admit(self, resource: Resource) -> None:
        """Raises:
        CapacityExceededError: If every slot is taken.
        """
        if resource.capacity is None:
            return
        if self.admitted_count(resource) >= resource.capacity.value:
            raise CapacityExceededError(str(resource.id))
