from sqlalchemy import select
from sqlalchemy.orm import Session

from eventhub.core.errors import Unauthenticated
from eventhub.domain.models import Identity
from eventhub.models.events import Event
from eventhub.models.favorites import Favorite
from eventhub.services.events import get_event


def toggle_favorite(db: Session, identity: Identity | None, event_id: int) -> bool:
    """Flip the favorite flag; returns True when the event is now a favorite."""
    if identity is None:
        raise Unauthenticated("Please sign in to save favorites.")
    get_event(db, event_id)

    existing = db.scalar(
        select(Favorite).where(Favorite.event_id == event_id, Favorite.user_id == identity.id)
    )
    if existing is not None:
        db.delete(existing)
        db.commit()
        return False

    db.add(Favorite(event_id=event_id, user_id=identity.id))
    db.commit()
    return True


def list_favorites(db: Session, identity: Identity | None) -> list[Event]:
    if identity is None:
        raise Unauthenticated()
    stmt = (
        select(Event)
        .join(Favorite, Favorite.event_id == Event.id)
        .where(Favorite.user_id == identity.id)
        .order_by(Event.scheduled_at, Event.id)
    )
    return list(db.scalars(stmt))
