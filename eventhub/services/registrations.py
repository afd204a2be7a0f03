"""
Capacity-bounded registration workflow.

Occupancy lives in the event's booked_count counter. A registration takes
one seat with a conditional update (only succeeds while a seat is left) and
inserts its row in the same store transaction; a cancellation deletes the
row and gives the seat back in one transaction. Both run while holding the
per-event lock, so for one event the check and the write are serialized.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from eventhub.core.errors import (
    AlreadyRegistered,
    CapacityBelowRegistrations,
    EventAlreadyOccurred,
    EventEnded,
    EventFull,
    EventNotFound,
    NotOwner,
    RegistrationNotFound,
    Unauthenticated,
)
from eventhub.core.retry import retry_store_unavailable
from eventhub.domain.models import (
    Identity,
    RegistrationForm,
    RegistrationRecord,
    TimeFilter,
    utcnow,
)
from eventhub.stores.interfaces import RegistrationStore

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(
        self,
        store: RegistrationStore,
        locker,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._locker = locker
        self._clock = clock

    @retry_store_unavailable
    def register(
        self, event_id: int, identity: Identity | None, form: RegistrationForm
    ) -> RegistrationRecord:
        """
        Register ``identity`` for an event.

        Raises:
            Unauthenticated, EventNotFound, EventEnded, EventFull,
            AlreadyRegistered, StoreUnavailable.
        """
        if identity is None:
            raise Unauthenticated()

        with self._locker.hold(event_id), self._store.atomic():
            event = self._store.get_event(event_id)
            if event is None:
                raise EventNotFound(event_id)

            now = self._clock()
            if event.has_started(now):
                raise EventEnded()

            if not self._store.try_charge_capacity(event_id):
                raise EventFull()

            # Raising here rolls back the seat taken above
            if self._store.find_registration(event_id, identity.id) is not None:
                raise AlreadyRegistered()

            registration = self._store.insert_registration(
                event_id=event_id, user_id=identity.id, form=form, created_at=now
            )

        logger.info(
            "Registered user %s for event %s (registration %s)", identity.id, event_id, registration.id
        )
        return registration

    @retry_store_unavailable
    def cancel(self, registration_id: int, identity: Identity | None) -> None:
        """
        Cancel the caller's own registration before the event starts.

        Raises:
            Unauthenticated, RegistrationNotFound, NotOwner,
            EventAlreadyOccurred, StoreUnavailable.
        """
        if identity is None:
            raise Unauthenticated()

        registration = self._store.get_registration(registration_id)
        if registration is None:
            raise RegistrationNotFound(registration_id)
        if registration.user_id != identity.id:
            raise NotOwner()

        with self._locker.hold(registration.event_id), self._store.atomic():
            event = self._store.get_event(registration.event_id)
            if event is None:
                raise EventNotFound(registration.event_id)
            if event.has_started(self._clock()):
                raise EventAlreadyOccurred()

            # A concurrent cancel of the same row already released its seat
            if not self._store.delete_registration(registration_id):
                raise RegistrationNotFound(registration_id)
            if not self._store.release_capacity(registration.event_id):
                logger.warning(
                    "Event %s had no booked seat to release for registration %s",
                    registration.event_id,
                    registration_id,
                )

        logger.info("Cancelled registration %s for event %s", registration_id, registration.event_id)

    @retry_store_unavailable
    def list_for_event(self, event_id: int) -> list[RegistrationRecord]:
        if self._store.get_event(event_id) is None:
            raise EventNotFound(event_id)
        return self._store.list_registrations_for_event(event_id)

    @retry_store_unavailable
    def list_for_user(
        self, user_id: int, time_filter: TimeFilter = TimeFilter.UPCOMING
    ) -> list[RegistrationRecord]:
        return self._store.list_registrations_for_user(user_id, TimeFilter(time_filter), self._clock())

    @retry_store_unavailable
    def reconcile(self, event_id: int) -> int:
        """Reset the event's booked_count to its live registration count."""
        with self._locker.hold(event_id), self._store.atomic():
            event = self._store.get_event(event_id)
            if event is None:
                raise EventNotFound(event_id)

            live = self._store.count_registrations(event_id)
            if not event.is_unlimited and live > event.capacity:
                logger.error(
                    "Event %s has %s live registrations but capacity %s; leaving booked_count at %s",
                    event_id,
                    live,
                    event.capacity,
                    event.booked_count,
                )
                raise CapacityBelowRegistrations(
                    f"Event {event_id} has {live} registrations, more than its capacity of {event.capacity}."
                )
            if live != event.booked_count:
                logger.warning(
                    "Event %s booked_count drifted: counter=%s live=%s",
                    event_id,
                    event.booked_count,
                    live,
                )
                self._store.set_booked_count(event_id, live)
        return live
