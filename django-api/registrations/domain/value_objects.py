"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from typing import Self
from uuid import UUID

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class ResourceId:
    """Unique identifier for a Resource (event, workshop, cohort)."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class RegistrationId:
    """Unique identifier for a Registration."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Identity:
    """Normalized email address; the scope of the uniqueness key."""

    value: str

    def __post_init__(self) -> None:
        if not _EMAIL_RE.match(self.value):
            raise ValueError("Identity must be a valid email address")
        if self.value != self.value.strip().lower():
            raise ValueError("Identity must be normalized")

    @classmethod
    def from_email(cls, email: str) -> Self:
        return cls(value=(email or "").strip().lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Capacity:
    """Positive integer bounding admitted registrations."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Capacity must be a positive integer")


@dataclass(frozen=True)
class Rating:
    """Feedback rating, 1 to 5 stars."""

    value: int

    def __post_init__(self) -> None:
        if not 1 <= self.value <= 5:
            raise ValueError("Rating must be between 1 and 5")


@dataclass(frozen=True)
class Percentage:
    """Integer percentage in the closed range 0..100."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 100:
            raise ValueError("Percentage must be between 0 and 100")
