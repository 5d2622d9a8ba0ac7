"""Unit tests for KeyedLocks.

Run with: pytest tests/test_locks.py -v
"""

import threading

from registrations.stores.locks import KeyedLocks


class TestKeyedLocks:
    """Tests for per-key locking and eviction."""

    def test_entry_evicted_after_release(self):
        locks = KeyedLocks()
        assert locks.acquire("a", timeout=1.0)
        assert len(locks) == 1
        locks.release("a")
        assert len(locks) == 0

    def test_timeout_returns_false_and_evicts_waiter(self):
        """A waiter that gives up leaves only the holder's entry behind."""
        locks = KeyedLocks()
        held = threading.Event()
        release = threading.Event()

        def hold():
            locks.acquire("a", timeout=1.0)
            held.set()
            release.wait(timeout=5)
            locks.release("a")

        holder = threading.Thread(target=hold)
        holder.start()
        try:
            assert held.wait(timeout=5)
            assert locks.acquire("a", timeout=0.05) is False
            assert len(locks) == 1
        finally:
            release.set()
            holder.join()
        assert len(locks) == 0

    def test_distinct_keys_do_not_block(self):
        locks = KeyedLocks()
        assert locks.acquire("a", timeout=1.0)
        assert locks.acquire("b", timeout=0.05)
        locks.release("a")
        locks.release("b")
        assert len(locks) == 0

    def test_store_does_not_accumulate_locks(
        self, published_resource, registration_service, store
    ):
        """Many resources served one after another leave no lock entries."""
        for i in range(20):
            resource = published_resource(title=f"Session {i}")
            registration = registration_service.submit_registration(
                str(resource.id), f"user{i}@x.com"
            )
            registration_service.cancel_registration(str(registration.id))
        assert len(store._resource_locks) == 0
