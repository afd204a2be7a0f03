from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhub.database.db import get_db
from eventhub.domain.models import Identity
from eventhub.routes.deps import get_identity
from eventhub.schemas.comments import CommentCreate, CommentOut
from eventhub.services.comments import add_comment, list_comments

router = APIRouter(prefix="/events/{event_id}/comments", tags=["comments"])


@router.get("", response_model=list[CommentOut])
def event_comments(event_id: int, db: Session = Depends(get_db)):
    return list_comments(db, event_id)


@router.post("", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def post_comment(
    event_id: int,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    identity: Identity | None = Depends(get_identity),
):
    return add_comment(db, identity, event_id, payload.content)
