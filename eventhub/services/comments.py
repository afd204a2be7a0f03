from sqlalchemy import select
from sqlalchemy.orm import Session

from eventhub.core.errors import Unauthenticated
from eventhub.domain.models import Identity
from eventhub.models.comments import Comment
from eventhub.services.events import get_event


def add_comment(db: Session, identity: Identity | None, event_id: int, content: str) -> Comment:
    if identity is None:
        raise Unauthenticated("Please sign in to comment.")
    get_event(db, event_id)

    comment = Comment(event_id=event_id, user_id=identity.id, content=content.strip())
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def list_comments(db: Session, event_id: int) -> list[Comment]:
    """Comments for an event, newest first."""
    get_event(db, event_id)
    stmt = (
        select(Comment)
        .where(Comment.event_id == event_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return list(db.scalars(stmt))
