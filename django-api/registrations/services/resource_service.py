"""Resource service - administrative lifecycle of registrable resources."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from registrations import signals
from registrations.domain import Resource, ResourceId, ResourceKind, ResourceStatus
from registrations.domain import lifecycle
from registrations.domain.errors import (
    InvalidInputError,
    InvalidTransitionError,
    ResourceNotFoundError,
)
from registrations.domain.lifecycle import ResourceEvent
from registrations.domain.models import DEFAULT_CERTIFICATE_THRESHOLD
from registrations.services.inputs import (
    parse_capacity,
    parse_enum,
    parse_percentage,
    parse_resource_id,
)
from registrations.services.registration_service import DEFAULT_ADMISSION_TIMEOUT, utcnow
from registrations.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)

_UNSET = object()

EDITABLE_FIELDS = frozenset(
    {
        "title",
        "capacity",
        "registration_deadline",
        "starts_at",
        "requires_approval",
        "certificate_threshold",
    }
)


class ResourceService:
    """Service for creating resources and moving them through their lifecycle."""

    def __init__(
        self,
        store: RegistrationStore,
        clock: Callable[[], datetime] = utcnow,
        admission_timeout: float = DEFAULT_ADMISSION_TIMEOUT,
        default_certificate_threshold: int = DEFAULT_CERTIFICATE_THRESHOLD,
    ) -> None:
        self._store = store
        self._clock = clock
        self._admission_timeout = admission_timeout
        self._default_certificate_threshold = default_certificate_threshold

    def create_resource(
        self,
        kind: str | ResourceKind,
        title: str,
        starts_at: datetime,
        capacity: int | None = None,
        registration_deadline: datetime | None = None,
        requires_approval: bool = False,
        certificate_threshold: int | None | object = _UNSET,
    ) -> Resource:
        """Create a resource in ``draft``.

        Workshops and training cohorts default to the configured certificate
        attendance threshold; events and conferences default to none.

        Raises:
            InvalidInputError: If the dates, capacity, or threshold are invalid.
        """
        resource_kind = parse_enum(ResourceKind, kind)
        if certificate_threshold is _UNSET:
            certificate_threshold = (
                self._default_certificate_threshold if resource_kind.tracks_attendance else None
            )
        title = (title or "").strip()
        if not title:
            raise InvalidInputError("Title is required")
        now = self._clock()
        _validate_schedule(starts_at, registration_deadline, now)
        resource = Resource(
            id=ResourceId(value=uuid.uuid4()),
            kind=resource_kind,
            title=title,
            starts_at=starts_at,
            status=ResourceStatus.DRAFT,
            created_at=now,
            updated_at=now,
            capacity=parse_capacity(capacity),
            registration_deadline=registration_deadline,
            requires_approval=bool(requires_approval),
            certificate_threshold=parse_percentage(certificate_threshold),
        )
        resource = self._store.add_resource(resource)
        logger.info("Resource %s created (%s)", resource.id, resource.kind.value)
        return resource

    def update_resource(self, resource_id: str, **changes) -> Resource:
        """Apply whitelisted administrative edits to a non-terminal resource.

        Lowering capacity never evicts admitted registrations.

        Raises:
            InvalidIdError, ResourceNotFoundError, InvalidInputError,
            InvalidTransitionError
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        rid = parse_resource_id(resource_id)
        with self._store.lock_resource(rid, self._admission_timeout) as resource:
            if resource is None:
                raise ResourceNotFoundError(str(rid))
            if resource.status.is_terminal:
                raise InvalidTransitionError(resource.status.value, "edit")
            now = self._clock()
            values = dict(changes)
            if "title" in values:
                values["title"] = (values["title"] or "").strip()
                if not values["title"]:
                    raise InvalidInputError("Title is required")
            if "capacity" in values:
                values["capacity"] = parse_capacity(values["capacity"])
            if "certificate_threshold" in values:
                values["certificate_threshold"] = parse_percentage(values["certificate_threshold"])
            if "requires_approval" in values:
                values["requires_approval"] = bool(values["requires_approval"])
            updated = replace(resource, updated_at=now, **values)
            if "starts_at" in values or "registration_deadline" in values:
                _validate_schedule(
                    updated.starts_at,
                    updated.registration_deadline,
                    now,
                    new_deadline="registration_deadline" in values,
                )
            self._store.save_resource(updated)
        logger.info("Resource %s updated: %s", rid, ", ".join(sorted(changes)))
        return updated

    def transition_resource(self, resource_id: str, event: str | ResourceEvent) -> Resource:
        """Apply an administrative lifecycle event.

        Existing registrations are left untouched.

        Raises:
            InvalidIdError, InvalidInputError, ResourceNotFoundError,
            InvalidTransitionError
        """
        rid = parse_resource_id(resource_id)
        resource_event = parse_enum(ResourceEvent, event)
        with self._store.lock_resource(rid, self._admission_timeout) as resource:
            if resource is None:
                raise ResourceNotFoundError(str(rid))
            updated = lifecycle.transition_resource(resource, resource_event, self._clock())
            self._store.save_resource(updated)
        logger.info(
            "Resource %s %s -> %s", rid, resource.status.value, updated.status.value
        )
        signals.dispatch(
            signals.resource_transitioned, type(self), resource=updated, event=resource_event
        )
        return updated

    def get_resource(self, resource_id: str) -> Resource:
        """Raises:
        InvalidIdError, ResourceNotFoundError
        """
        rid = parse_resource_id(resource_id)
        resource = self._store.get_resource(rid)
        if resource is None:
            raise ResourceNotFoundError(str(rid))
        return resource

    def list_resources(self, status: str | None = None) -> list[Resource]:
        return self._store.list_resources(parse_enum(ResourceStatus, status) if status else None)

    def delete_resource(self, resource_id: str) -> None:
        """Delete a resource together with its registrations."""
        rid = parse_resource_id(resource_id)
        if not self._store.delete_resource(rid):
            raise ResourceNotFoundError(str(rid))
        logger.info("Resource %s deleted", rid)


def _validate_schedule(
    starts_at: datetime,
    registration_deadline: datetime | None,
    now: datetime,
    new_deadline: bool = True,
) -> None:
    if starts_at is None:
        raise InvalidInputError("Start time is required")
    if starts_at.tzinfo is None or (
        registration_deadline is not None and registration_deadline.tzinfo is None
    ):
        raise InvalidInputError("Timestamps must be timezone-aware")
    if starts_at <= now:
        raise InvalidInputError("Start time cannot be in the past")
    if new_deadline and registration_deadline is not None and registration_deadline <= now:
        raise InvalidInputError("Registration deadline cannot be in the past")
    if registration_deadline is not None and registration_deadline >= starts_at:
        raise InvalidInputError("Registration deadline must be before the start time")
