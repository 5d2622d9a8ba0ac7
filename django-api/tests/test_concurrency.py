"""Concurrency tests for admission.

Submissions race through a thread pool against the in-memory store, which
sleeps inside the capacity count so an unserialized check-then-insert would
over-admit, and against the ORM store with one connection per worker.
Run with: pytest tests/test_concurrency.py -v
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from functools import partial

import pytest
from django.db import connection

from registrations import models
from registrations.domain import RegistrationStatus
from registrations.domain.errors import (
    CapacityExceededError,
    DomainError,
    DuplicateRegistrationError,
    InvalidTransitionError,
)
from registrations.services import RegistrationService, ResourceService
from registrations.stores import InMemoryRegistrationStore
from registrations.stores.django_store import DjangoRegistrationStore


class SlowCountStore(InMemoryRegistrationStore):
    """Widens the gap between counting and inserting."""

    def count_active_registrations(self, resource_id):
        count = super().count_active_registrations(resource_id)
        time.sleep(0.01)
        return count


@pytest.fixture
def slow_store():
    return SlowCountStore()


@pytest.fixture
def services(slow_store, clock):
    return (
        ResourceService(slow_store, clock=clock, admission_timeout=10.0),
        RegistrationService(slow_store, clock=clock, admission_timeout=10.0),
    )


def race(submit, args_list):
    """Run ``submit`` for every args tuple at once; return (results, errors)."""
    barrier = threading.Barrier(len(args_list))

    def attempt(args):
        barrier.wait()
        try:
            return submit(*args), None
        except (CapacityExceededError, DuplicateRegistrationError) as exc:
            return None, exc

    with ThreadPoolExecutor(max_workers=len(args_list)) as pool:
        outcomes = list(pool.map(attempt, args_list))
    results = [r for r, _ in outcomes if r is not None]
    errors = [e for _, e in outcomes if e is not None]
    return results, errors


class TestConcurrentAdmission:
    """Tests for admission under concurrent submissions."""

    def test_capacity_never_exceeded(self, services, slow_store, clock):
        """Distinct identities racing for C slots admit exactly C."""
        resource_service, registration_service = services
        resource = resource_service.create_resource(
            kind="event",
            title="Leadership Summit",
            starts_at=clock.now + timedelta(days=7),
            capacity=3,
        )
        resource_service.transition_resource(str(resource.id), "publish")

        args = [(str(resource.id), f"user{i}@x.com") for i in range(12)]
        admitted, errors = race(registration_service.submit_registration, args)

        assert len(admitted) == 3
        assert len(errors) == 9
        assert all(isinstance(e, CapacityExceededError) for e in errors)
        assert slow_store.count_active_registrations(resource.id) == 3

    def test_same_identity_admitted_once(self, services, slow_store, clock):
        """One identity submitted many times at once is admitted exactly once."""
        resource_service, registration_service = services
        resource = resource_service.create_resource(
            kind="workshop",
            title="Digital Skills",
            starts_at=clock.now + timedelta(days=7),
            capacity=50,
        )
        resource_service.transition_resource(str(resource.id), "publish")

        args = [(str(resource.id), "alice@x.com")] * 8
        admitted, errors = race(registration_service.submit_registration, args)

        assert len(admitted) == 1
        assert len(errors) == 7
        assert all(isinstance(e, DuplicateRegistrationError) for e in errors)
        assert {e.existing_registration_id for e in errors} == {str(admitted[0].id)}

    def test_separate_resources_do_not_block_each_other(self, services, slow_store, clock):
        """Admission on one resource is independent of another."""
        resource_service, registration_service = services
        resources = []
        for title in ("Morning Cohort", "Evening Cohort"):
            resource = resource_service.create_resource(
                kind="training", title=title, starts_at=clock.now + timedelta(days=7), capacity=2
            )
            resources.append(resource_service.transition_resource(str(resource.id), "publish"))

        args = [(str(r.id), f"user{i}@x.com") for r in resources for i in range(4)]
        admitted, errors = race(registration_service.submit_registration, args)

        assert len(admitted) == 4
        assert len(errors) == 4
        for resource in resources:
            assert slow_store.count_active_registrations(resource.id) == 2


def race_on_database(calls):
    """Run zero-argument ``calls`` at once, each worker on its own connection."""
    barrier = threading.Barrier(len(calls))

    def attempt(call):
        barrier.wait()
        try:
            return call(), None
        except DomainError as exc:
            return None, exc
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        outcomes = list(pool.map(attempt, calls))
    results = [r for r, _ in outcomes if r is not None]
    errors = [e for _, e in outcomes if e is not None]
    return results, errors


@pytest.fixture
def db_services(clock):
    store = DjangoRegistrationStore()
    return (
        ResourceService(store, clock=clock, admission_timeout=10.0),
        RegistrationService(store, clock=clock, admission_timeout=10.0),
    )


def active_rows(resource):
    return models.Registration.objects.filter(
        resource_id=resource.id.value, status__in=models.ACTIVE_STATUS_VALUES
    )


@pytest.mark.django_db(transaction=True)
class TestConcurrentAdmissionOnDatabase:
    """Races through the ORM store with committed transactions."""

    def test_capacity_holds_while_a_slot_is_freed(self, db_services, clock):
        """Submissions racing a cancellation never push admissions past capacity."""
        resource_service, registration_service = db_services
        resource = resource_service.create_resource(
            kind="event",
            title="Leadership Summit",
            starts_at=clock.now + timedelta(days=7),
            capacity=3,
        )
        resource_service.transition_resource(str(resource.id), "publish")
        alice = registration_service.submit_registration(str(resource.id), "alice@x.com")

        calls = [
            partial(registration_service.submit_registration, str(resource.id), f"user{i}@x.com")
            for i in range(8)
        ]
        calls.append(partial(registration_service.cancel_registration, str(alice.id)))
        results, errors = race_on_database(calls)

        cancelled = [r for r in results if r.id == alice.id]
        admitted = [r for r in results if r.id != alice.id]
        assert len(cancelled) == 1
        assert cancelled[0].status is RegistrationStatus.CANCELLED
        assert len(admitted) in (2, 3)
        assert len(errors) == 8 - len(admitted)
        assert all(isinstance(e, CapacityExceededError) for e in errors)
        assert active_rows(resource).count() == len(admitted)

    def test_same_identity_admitted_once(self, db_services, clock):
        resource_service, registration_service = db_services
        resource = resource_service.create_resource(
            kind="workshop",
            title="Digital Skills",
            starts_at=clock.now + timedelta(days=7),
            capacity=50,
        )
        resource_service.transition_resource(str(resource.id), "publish")

        calls = [
            partial(registration_service.submit_registration, str(resource.id), "alice@x.com")
        ] * 6
        results, errors = race_on_database(calls)

        assert len(results) == 1
        assert len(errors) == 5
        assert all(isinstance(e, DuplicateRegistrationError) for e in errors)
        assert active_rows(resource).count() == 1

    def test_concurrent_cancellations_apply_once(self, db_services, clock):
        """Only one of several simultaneous cancellations takes effect."""
        resource_service, registration_service = db_services
        resource = resource_service.create_resource(
            kind="training",
            title="Data Cohort",
            starts_at=clock.now + timedelta(days=7),
            capacity=2,
        )
        resource_service.transition_resource(str(resource.id), "publish")
        alice = registration_service.submit_registration(str(resource.id), "alice@x.com")

        calls = [partial(registration_service.cancel_registration, str(alice.id))] * 4
        results, errors = race_on_database(calls)

        assert len(results) == 1
        assert len(errors) == 3
        assert all(isinstance(e, InvalidTransitionError) for e in errors)
        assert active_rows(resource).count() == 0
