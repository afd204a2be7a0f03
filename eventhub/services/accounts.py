"""Account Directory: users and the identity behind a request."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.core.errors import EmailTaken, UserNotFound
from eventhub.domain.models import Identity
from eventhub.models.users import User

logger = logging.getLogger(__name__)


def create_user(db: Session, *, email: str, full_name: str | None = None, is_organizer: bool = False) -> User:
    email = email.strip().lower()
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise EmailTaken()

    user = User(email=email, full_name=full_name, is_organizer=is_organizer)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise EmailTaken() from exc
    db.refresh(user)
    logger.info("Created user %s (organizer=%s)", user.id, user.is_organizer)
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound()
    return user


def current_identity(db: Session, user_id: int | None) -> Identity | None:
    """Resolve a caller to an identity; unknown or missing ids resolve to None."""
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if user is None:
        return None
    return Identity(id=user.id, is_organizer=user.is_organizer)
