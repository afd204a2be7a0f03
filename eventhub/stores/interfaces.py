"""Store interface (repository pattern) used by the registration workflow.

Stores must be swappable and return domain records. Every write that has to
commit together runs inside ``atomic()``; leaving the block with an
exception discards all of it.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from eventhub.domain.models import EventRecord, RegistrationForm, RegistrationRecord, TimeFilter


class RegistrationStore(ABC):
    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Scope in which all writes commit together or not at all."""
        ...

    @abstractmethod
    def get_event(self, event_id: int) -> EventRecord | None: ...

    @abstractmethod
    def try_charge_capacity(self, event_id: int) -> bool:
        """Take one seat if the event is unlimited or has one left; False when full."""
        ...

    @abstractmethod
    def release_capacity(self, event_id: int) -> bool:
        """Give one seat back, never dropping the booked count below zero."""
        ...

    @abstractmethod
    def count_registrations(self, event_id: int) -> int: ...

    @abstractmethod
    def set_booked_count(self, event_id: int, booked_count: int) -> None: ...

    @abstractmethod
    def find_registration(self, event_id: int, user_id: int) -> RegistrationRecord | None: ...

    @abstractmethod
    def get_registration(self, registration_id: int) -> RegistrationRecord | None: ...

    @abstractmethod
    def insert_registration(
        self, *, event_id: int, user_id: int, form: RegistrationForm, created_at: datetime
    ) -> RegistrationRecord:
        """Insert a pending registration.

        Raises:
            AlreadyRegistered: If the (event, user) pair already has a row.
        """
        ...

    @abstractmethod
    def delete_registration(self, registration_id: int) -> bool: ...

    @abstractmethod
    def list_registrations_for_event(self, event_id: int) -> list[RegistrationRecord]:
        """Registrations for an event, oldest first."""
        ...

    @abstractmethod
    def list_registrations_for_user(
        self, user_id: int, time_filter: TimeFilter, now: datetime
    ) -> list[RegistrationRecord]:
        """Registrations of a user with their events attached, by event date."""
        ...
