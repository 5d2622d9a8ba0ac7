"""Parse raw service arguments into domain values, mapping failures to domain errors."""

from enum import Enum
from typing import TypeVar

from registrations.domain import (
    Capacity,
    Identity,
    Percentage,
    Rating,
    RegistrationId,
    ResourceId,
)
from registrations.domain.errors import InvalidIdError, InvalidInputError

E = TypeVar("E", bound=Enum)


def parse_resource_id(value: str | ResourceId) -> ResourceId:
    if isinstance(value, ResourceId):
        return value
    try:
        return ResourceId.from_string(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdError() from exc


def parse_registration_id(value: str | RegistrationId) -> RegistrationId:
    if isinstance(value, RegistrationId):
        return value
    try:
        return RegistrationId.from_string(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdError() from exc


def parse_identity(email: str) -> Identity:
    try:
        return Identity.from_email(email)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc


def parse_enum(enum_cls: type[E], value: str | E) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown {enum_cls.__name__} '{value}'") from exc


def parse_capacity(value: int | None) -> Capacity | None:
    if value is None:
        return None
    try:
        return Capacity(int(value))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("Capacity must be a positive integer") from exc


def parse_rating(value: int) -> Rating:
    try:
        return Rating(int(value))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("Rating must be between 1 and 5") from exc


def parse_percentage(value: int | None) -> Percentage | None:
    if value is None:
        return None
    try:
        return Percentage(int(value))
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("Percentage must be between 0 and 100") from exc
