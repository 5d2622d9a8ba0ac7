"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from rest_framework.test import APIClient

from registrations.services import RegistrationService, ResourceService
from registrations.stores import InMemoryRegistrationStore

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock the tests move by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def store() -> InMemoryRegistrationStore:
    return InMemoryRegistrationStore()


@pytest.fixture
def resource_service(store, clock) -> ResourceService:
    return ResourceService(store, clock=clock, admission_timeout=1.0)


@pytest.fixture
def registration_service(store, clock) -> RegistrationService:
    return RegistrationService(store, clock=clock, admission_timeout=1.0)


@pytest.fixture
def published_resource(resource_service, clock):
    """Factory for resources already moved to ``published``."""

    def make(**overrides):
        params = {
            "kind": "event",
            "title": "Community Meetup",
            "starts_at": clock.now + timedelta(days=7),
        }
        params.update(overrides)
        resource = resource_service.create_resource(**params)
        return resource_service.transition_resource(str(resource.id), "publish")

    return make
