"""
Test the registration workflow against the in-memory store.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from eventhub.core.errors import (
    AlreadyRegistered,
    CapacityBelowRegistrations,
    EventAlreadyOccurred,
    EventEnded,
    EventFull,
    EventNotFound,
    NotOwner,
    RegistrationNotFound,
    StoreUnavailable,
    Unauthenticated,
)
from eventhub.core.locks import LocalEventLocker
from eventhub.domain.models import EventRecord, Identity, RegistrationForm, TimeFilter
from eventhub.services.registrations import RegistrationService
from eventhub.stores.memory_store import InMemoryRegistrationStore

_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
FORM = RegistrationForm(full_name="Jane Doe", phone_number="+15551234567")
ALICE = Identity(id=1)
BOB = Identity(id=2)
ORGANIZER = Identity(id=99, is_organizer=True)


def make_event(event_id: int = 1, *, capacity: int = 10, days_ahead: float = 7, category=None) -> EventRecord:
    return EventRecord(
        id=event_id,
        title=f"Event {event_id}",
        capacity=capacity,
        booked_count=0,
        scheduled_at=_NOW + timedelta(days=days_ahead),
        organizer_id=ORGANIZER.id,
        category=category,
    )


@pytest.fixture
def store():
    return InMemoryRegistrationStore()


@pytest.fixture
def service(store):
    return RegistrationService(store, LocalEventLocker(), clock=lambda: _NOW)


class FlakyInsertStore(InMemoryRegistrationStore):
    """Fails the registration insert a set number of times."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.insert_calls = 0

    def insert_registration(self, **kwargs):
        self.insert_calls += 1
        if self.insert_calls <= self.failures:
            raise StoreUnavailable()
        return super().insert_registration(**kwargs)


class TestRegister:
    def test_register_success(self, store, service):
        store.add_event(make_event(capacity=10))

        registration = service.register(1, ALICE, FORM)

        assert registration.event_id == 1
        assert registration.user_id == ALICE.id
        assert registration.status == "pending"
        assert registration.created_at == _NOW
        assert registration.full_name == "Jane Doe"
        assert store.get_event(1).booked_count == 1

    def test_unauthenticated_fails_before_touching_store(self, store, service):
        store.add_event(make_event())

        with pytest.raises(Unauthenticated):
            service.register(1, None, FORM)

        assert store.count_registrations(1) == 0

    def test_unknown_event(self, service):
        with pytest.raises(EventNotFound):
            service.register(404, ALICE, FORM)

    def test_past_event_rejected_without_creating_a_row(self, store, service):
        store.add_event(make_event(days_ahead=-1))

        with pytest.raises(EventEnded):
            service.register(1, ALICE, FORM)

        assert store.count_registrations(1) == 0
        assert store.get_event(1).booked_count == 0

    def test_full_event(self, store, service):
        store.add_event(make_event(capacity=1))
        service.register(1, ALICE, FORM)

        with pytest.raises(EventFull):
            service.register(1, BOB, FORM)

        assert store.count_registrations(1) == 1
        assert store.get_event(1).booked_count == 1

    def test_duplicate_registration_rejected_and_seat_returned(self, store, service):
        store.add_event(make_event(capacity=5))
        service.register(1, ALICE, FORM)

        with pytest.raises(AlreadyRegistered):
            service.register(1, ALICE, FORM)

        assert store.count_registrations(1) == 1
        assert store.get_event(1).booked_count == 1

    def test_unlimited_capacity(self, store, service):
        store.add_event(make_event(capacity=0))

        for user_id in range(1, 26):
            service.register(1, Identity(id=user_id), FORM)

        event = store.get_event(1)
        assert event.booked_count == 25
        assert event.remaining_capacity is None

    def test_failed_insert_rolls_back_capacity_charge(self):
        store = FlakyInsertStore(failures=10)
        store.add_event(make_event(capacity=1))
        service = RegistrationService(store, LocalEventLocker(), clock=lambda: _NOW)

        with pytest.raises(StoreUnavailable):
            service.register(1, ALICE, FORM)

        # Three attempts, each rolled back
        assert store.insert_calls == 3
        assert store.get_event(1).booked_count == 0
        assert store.count_registrations(1) == 0

    def test_transient_failure_is_retried(self):
        store = FlakyInsertStore(failures=1)
        store.add_event(make_event(capacity=1))
        service = RegistrationService(store, LocalEventLocker(), clock=lambda: _NOW)

        registration = service.register(1, ALICE, FORM)

        assert registration.user_id == ALICE.id
        assert store.insert_calls == 2
        assert store.get_event(1).booked_count == 1

    def test_concurrent_registrations_for_last_seat(self, store, service):
        store.add_event(make_event(capacity=1))
        results, errors = [], []

        def attempt(user_id: int):
            try:
                results.append(service.register(1, Identity(id=user_id), FORM))
            except EventFull as e:
                errors.append(e)

        with ThreadPoolExecutor(max_workers=10) as executor:
            for f in [executor.submit(attempt, i) for i in range(1, 11)]:
                f.result()

        assert len(results) == 1
        assert len(errors) == 9
        assert store.count_registrations(1) == 1

    def test_different_events_are_independent(self, store, service):
        store.add_event(make_event(1, capacity=1))
        store.add_event(make_event(2, capacity=1))

        service.register(1, ALICE, FORM)
        service.register(2, ALICE, FORM)

        assert store.get_event(1).booked_count == 1
        assert store.get_event(2).booked_count == 1


class TestCancel:
    def test_register_cancel_register(self, store, service):
        store.add_event(make_event(capacity=1))
        first = service.register(1, ALICE, FORM)

        service.cancel(first.id, ALICE)
        assert store.get_event(1).booked_count == 0

        second = service.register(1, ALICE, FORM)
        assert second.id != first.id
        assert store.count_registrations(1) == 1
        assert store.get_event(1).booked_count == 1

    def test_cancel_by_another_user(self, store, service):
        store.add_event(make_event())
        registration = service.register(1, ALICE, FORM)

        with pytest.raises(NotOwner):
            service.cancel(registration.id, BOB)

        assert store.get_registration(registration.id) is not None
        assert store.get_event(1).booked_count == 1

    def test_cancel_unauthenticated(self, store, service):
        store.add_event(make_event())
        registration = service.register(1, ALICE, FORM)

        with pytest.raises(Unauthenticated):
            service.cancel(registration.id, None)

    def test_cancel_unknown_registration(self, service):
        with pytest.raises(RegistrationNotFound):
            service.cancel(12345, ALICE)

    def test_cancel_after_event_started(self, store):
        store.add_event(make_event(days_ahead=1))
        service = RegistrationService(store, LocalEventLocker(), clock=lambda: _NOW)
        registration = service.register(1, ALICE, FORM)

        later = RegistrationService(store, LocalEventLocker(), clock=lambda: _NOW + timedelta(days=2))
        with pytest.raises(EventAlreadyOccurred):
            later.cancel(registration.id, ALICE)

        assert store.count_registrations(1) == 1

    def test_churn_keeps_counter_within_bounds(self, store, service):
        store.add_event(make_event(capacity=2))

        for _ in range(20):
            a = service.register(1, ALICE, FORM)
            b = service.register(1, BOB, FORM)
            event = store.get_event(1)
            assert 0 <= event.remaining_capacity <= event.capacity
            service.cancel(a.id, ALICE)
            service.cancel(b.id, BOB)
            event = store.get_event(1)
            assert event.remaining_capacity == event.capacity

    def test_release_never_drops_below_zero(self, store):
        store.add_event(make_event(capacity=2))

        assert store.release_capacity(1) is False
        assert store.get_event(1).booked_count == 0


class TestListing:
    def test_list_for_event(self, store, service):
        store.add_event(make_event())
        service.register(1, ALICE, FORM)
        service.register(1, BOB, FORM)

        registrations = service.list_for_event(1)

        assert [r.user_id for r in registrations] == [ALICE.id, BOB.id]

    def test_list_for_unknown_event(self, service):
        with pytest.raises(EventNotFound):
            service.list_for_event(404)

    def test_list_for_user_filters(self, store, service):
        store.add_event(make_event(1, days_ahead=3))
        store.add_event(make_event(2, days_ahead=1))
        store.add_event(make_event(3, days_ahead=10))
        for event_id in (1, 2, 3):
            service.register(event_id, ALICE, FORM)
        service.register(3, BOB, FORM)

        # Event 2 has happened by now
        later = RegistrationService(store, LocalEventLocker(), clock=lambda: _NOW + timedelta(days=2))

        upcoming = later.list_for_user(ALICE.id, TimeFilter.UPCOMING)
        past = later.list_for_user(ALICE.id, TimeFilter.PAST)
        everything = later.list_for_user(ALICE.id, TimeFilter.ALL)

        assert [r.event_id for r in upcoming] == [1, 3]
        assert [r.event_id for r in past] == [2]
        assert [r.event_id for r in everything] == [2, 1, 3]
        assert all(r.event is not None for r in everything)


class TestReconcile:
    def test_reconcile_repairs_drift(self, store, service):
        store.add_event(make_event(capacity=10))
        service.register(1, ALICE, FORM)
        store.set_booked_count(1, 7)

        assert service.reconcile(1) == 1
        assert store.get_event(1).booked_count == 1

    def test_reconcile_unknown_event(self, service):
        with pytest.raises(EventNotFound):
            service.reconcile(404)

    def test_reconcile_refuses_live_count_above_capacity(self, store, service):
        store.add_event(make_event(capacity=2))
        service.register(1, ALICE, FORM)
        service.register(1, BOB, FORM)
        store.add_event(replace(store.get_event(1), capacity=1, booked_count=0))

        with pytest.raises(CapacityBelowRegistrations):
            service.reconcile(1)

        assert store.get_event(1).booked_count == 0


class TestConcurrentReads:
    def test_listing_while_registrations_land(self, store, service):
        store.add_event(make_event(capacity=0))
        stop = threading.Event()
        errors = []

        def read():
            while not stop.is_set():
                try:
                    service.list_for_event(1)
                    service.list_for_user(7, TimeFilter.ALL)
                    store.count_registrations(1)
                except Exception as exc:
                    errors.append(exc)
                    return

        reader = threading.Thread(target=read)
        reader.start()
        try:
            for user_id in range(1, 2001):
                service.register(1, Identity(id=user_id), FORM)
        finally:
            stop.set()
            reader.join()

        assert errors == []
        assert len(service.list_for_event(1)) == 2000
