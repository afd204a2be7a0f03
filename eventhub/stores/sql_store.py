from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from eventhub.core.errors import AlreadyRegistered, CapacityBelowRegistrations, StoreUnavailable
from eventhub.domain.models import (
    EventRecord,
    RegistrationForm,
    RegistrationRecord,
    RegistrationStatus,
    TimeFilter,
)
from eventhub.models.events import Event
from eventhub.models.registrations import Registration
from eventhub.stores.interfaces import RegistrationStore

DUPLICATE_REGISTRATION_CONSTRAINT = "uq_registrations_event_user"


def event_record(event: Event) -> EventRecord:
    return EventRecord(
        id=event.id,
        title=event.title,
        capacity=event.capacity,
        booked_count=event.booked_count,
        scheduled_at=event.scheduled_at,
        organizer_id=event.organizer_id,
        category=event.category,
    )


def registration_record(registration: Registration, event: Event | None = None) -> RegistrationRecord:
    return RegistrationRecord(
        id=registration.id,
        event_id=registration.event_id,
        user_id=registration.user_id,
        status=registration.status,
        created_at=registration.created_at,
        full_name=registration.full_name,
        phone_number=registration.phone_number,
        custom_answer=registration.custom_answer,
        event=event_record(event) if event is not None else None,
    )


def is_duplicate_registration(exc: IntegrityError) -> bool:
    """True when the insert hit the one-registration-per-user-per-event constraint."""
    constraint_name = getattr(getattr(exc.orig, "diag", None), "constraint_name", None)
    if constraint_name is not None:
        return constraint_name == DUPLICATE_REGISTRATION_CONSTRAINT
    # SQLite names the columns rather than the constraint
    message = str(exc.orig)
    return (
        DUPLICATE_REGISTRATION_CONSTRAINT in message
        or "registrations.event_id, registrations.user_id" in message
    )


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Connection-level failures become StoreUnavailable; everything else propagates."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailable() from exc


class SqlRegistrationStore(RegistrationStore):
    """RegistrationStore on a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with translate_store_errors():
            if self._db.in_transaction():
                # Close out the read transaction autobegun by earlier lookups
                self._db.commit()
            with self._db.begin():
                yield

    def get_event(self, event_id: int) -> EventRecord | None:
        with translate_store_errors():
            event = self._db.get(Event, event_id, populate_existing=True)
        return event_record(event) if event is not None else None

    def try_charge_capacity(self, event_id: int) -> bool:
        # Check capacity and increment booked_count atomically
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(or_(Event.capacity == 0, Event.booked_count < Event.capacity))
            .values(booked_count=Event.booked_count + 1)
            .execution_options(synchronize_session=False)
        )
        with translate_store_errors():
            res = self._db.execute(stmt)
        return res.rowcount == 1  # type: ignore[attr-defined]

    def release_capacity(self, event_id: int) -> bool:
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(Event.booked_count > 0)
            .values(booked_count=Event.booked_count - 1)
            .execution_options(synchronize_session=False)
        )
        with translate_store_errors():
            res = self._db.execute(stmt)
        return res.rowcount == 1  # type: ignore[attr-defined]

    def count_registrations(self, event_id: int) -> int:
        with translate_store_errors():
            count = self._db.scalar(
                select(func.count(Registration.id)).where(Registration.event_id == event_id)
            )
        return int(count or 0)

    def set_booked_count(self, event_id: int, booked_count: int) -> None:
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .values(booked_count=booked_count)
            .execution_options(synchronize_session=False)
        )
        try:
            with translate_store_errors():
                self._db.execute(stmt)
        except IntegrityError as exc:
            raise CapacityBelowRegistrations(
                f"Event {event_id} has {booked_count} registrations, more than its capacity."
            ) from exc

    def find_registration(self, event_id: int, user_id: int) -> RegistrationRecord | None:
        with translate_store_errors():
            registration = self._db.scalar(
                select(Registration).where(
                    Registration.event_id == event_id,
                    Registration.user_id == user_id,
                )
            )
        return registration_record(registration) if registration is not None else None

    def get_registration(self, registration_id: int) -> RegistrationRecord | None:
        with translate_store_errors():
            registration = self._db.get(Registration, registration_id)
            if registration is None:
                return None
            return registration_record(registration, registration.event)

    def insert_registration(
        self, *, event_id: int, user_id: int, form: RegistrationForm, created_at: datetime
    ) -> RegistrationRecord:
        registration = Registration(
            event_id=event_id,
            user_id=user_id,
            status=RegistrationStatus.PENDING.value,
            full_name=form.full_name,
            phone_number=form.phone_number,
            custom_answer=form.custom_answer,
            created_at=created_at,
        )
        self._db.add(registration)
        try:
            with translate_store_errors():
                self._db.flush()  # gets registration.id
        except IntegrityError as exc:
            if is_duplicate_registration(exc):
                raise AlreadyRegistered() from exc
            raise
        return registration_record(registration)

    def delete_registration(self, registration_id: int) -> bool:
        with translate_store_errors():
            res = self._db.execute(delete(Registration).where(Registration.id == registration_id))
        return res.rowcount == 1  # type: ignore[attr-defined]

    def list_registrations_for_event(self, event_id: int) -> list[RegistrationRecord]:
        stmt = (
            select(Registration)
            .where(Registration.event_id == event_id)
            .order_by(Registration.created_at, Registration.id)
        )
        with translate_store_errors():
            return [registration_record(r) for r in self._db.scalars(stmt)]

    def list_registrations_for_user(
        self, user_id: int, time_filter: TimeFilter, now: datetime
    ) -> list[RegistrationRecord]:
        stmt = (
            select(Registration, Event)
            .join(Event, Registration.event_id == Event.id)
            .where(Registration.user_id == user_id)
        )
        if time_filter == TimeFilter.UPCOMING:
            stmt = stmt.where(Event.scheduled_at >= now)
        elif time_filter == TimeFilter.PAST:
            stmt = stmt.where(Event.scheduled_at < now)
        stmt = stmt.order_by(Event.scheduled_at, Registration.id)

        with translate_store_errors():
            return [registration_record(r, e) for r, e in self._db.execute(stmt)]
