"""Plain records passed between stores, services and the API."""

from eventhub.domain.models import (
    EventRecord,
    Identity,
    RegistrationForm,
    RegistrationRecord,
    RegistrationStatus,
    TimeFilter,
)

__all__ = [
    "EventRecord",
    "Identity",
    "RegistrationForm",
    "RegistrationRecord",
    "RegistrationStatus",
    "TimeFilter",
]
