"""Dict-backed RegistrationStore for tests and embedded use."""

import copy
import itertools
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime

from eventhub.core.errors import AlreadyRegistered
from eventhub.domain.models import (
    EventRecord,
    RegistrationForm,
    RegistrationRecord,
    RegistrationStatus,
    TimeFilter,
    as_utc,
)
from eventhub.stores.interfaces import RegistrationStore


class InMemoryRegistrationStore(RegistrationStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._events: dict[int, EventRecord] = {}
        self._registrations: dict[int, RegistrationRecord] = {}
        self._ids = itertools.count(1)

    def add_event(self, event: EventRecord) -> EventRecord:
        with self._lock:
            self._events[event.id] = event
        return event

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            events = copy.copy(self._events)
            registrations = copy.copy(self._registrations)
            try:
                yield
            except BaseException:
                self._events = events
                self._registrations = registrations
                raise

    def get_event(self, event_id: int) -> EventRecord | None:
        with self._lock:
            return self._events.get(event_id)

    def try_charge_capacity(self, event_id: int) -> bool:
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                return False
            if not event.is_unlimited and event.booked_count >= event.capacity:
                return False
            self._events[event_id] = replace(event, booked_count=event.booked_count + 1)
            return True

    def release_capacity(self, event_id: int) -> bool:
        with self._lock:
            event = self._events.get(event_id)
            if event is None or event.booked_count <= 0:
                return False
            self._events[event_id] = replace(event, booked_count=event.booked_count - 1)
            return True

    def count_registrations(self, event_id: int) -> int:
        with self._lock:
            return sum(1 for r in list(self._registrations.values()) if r.event_id == event_id)

    def set_booked_count(self, event_id: int, booked_count: int) -> None:
        with self._lock:
            event = self._events.get(event_id)
            if event is not None:
                self._events[event_id] = replace(event, booked_count=booked_count)

    def find_registration(self, event_id: int, user_id: int) -> RegistrationRecord | None:
        with self._lock:
            for registration in list(self._registrations.values()):
                if registration.event_id == event_id and registration.user_id == user_id:
                    return registration
        return None

    def get_registration(self, registration_id: int) -> RegistrationRecord | None:
        with self._lock:
            registration = self._registrations.get(registration_id)
            if registration is None:
                return None
            return replace(registration, event=self._events.get(registration.event_id))

    def insert_registration(
        self, *, event_id: int, user_id: int, form: RegistrationForm, created_at: datetime
    ) -> RegistrationRecord:
        with self._lock:
            if self.find_registration(event_id, user_id) is not None:
                raise AlreadyRegistered()
            registration = RegistrationRecord(
                id=next(self._ids),
                event_id=event_id,
                user_id=user_id,
                status=RegistrationStatus.PENDING.value,
                created_at=created_at,
                full_name=form.full_name,
                phone_number=form.phone_number,
                custom_answer=form.custom_answer,
            )
            self._registrations[registration.id] = registration
            return registration

    def delete_registration(self, registration_id: int) -> bool:
        with self._lock:
            return self._registrations.pop(registration_id, None) is not None

    def list_registrations_for_event(self, event_id: int) -> list[RegistrationRecord]:
        with self._lock:
            rows = [r for r in list(self._registrations.values()) if r.event_id == event_id]
        return sorted(rows, key=lambda r: (r.created_at, r.id))

    def list_registrations_for_user(
        self, user_id: int, time_filter: TimeFilter, now: datetime
    ) -> list[RegistrationRecord]:
        with self._lock:
            registrations = list(self._registrations.values())
            events = dict(self._events)
        rows = []
        for registration in registrations:
            if registration.user_id != user_id:
                continue
            event = events[registration.event_id]
            scheduled_at = as_utc(event.scheduled_at)
            if time_filter == TimeFilter.UPCOMING and scheduled_at < now:
                continue
            if time_filter == TimeFilter.PAST and scheduled_at >= now:
                continue
            rows.append(replace(registration, event=event))
        return sorted(rows, key=lambda r: (as_utc(r.event.scheduled_at), r.id))  # type: ignore[union-attr]
