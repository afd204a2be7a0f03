from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from eventhub.core.errors import Unauthenticated
from eventhub.core.locks import make_locker
from eventhub.database.db import get_db
from eventhub.domain.models import Identity
from eventhub.services.accounts import current_identity
from eventhub.services.registrations import RegistrationService
from eventhub.stores.sql_store import SqlRegistrationStore


def get_identity(
    x_user_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Identity | None:
    """Caller identity asserted by the authentication gateway, if any."""
    return current_identity(db, x_user_id)


def require_identity(identity: Identity | None = Depends(get_identity)) -> Identity:
    if identity is None:
        raise Unauthenticated()
    return identity


@lru_cache
def get_locker():
    return make_locker()


def get_registration_service(
    db: Session = Depends(get_db),
    locker=Depends(get_locker),
) -> RegistrationService:
    return RegistrationService(SqlRegistrationStore(db), locker)
