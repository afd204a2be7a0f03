from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventhub.database.db import get_db
from eventhub.domain.models import Identity
from eventhub.routes.deps import get_identity
from eventhub.schemas.events import EventOut
from eventhub.schemas.favorites import FavoriteToggleOut
from eventhub.services.favorites import list_favorites, toggle_favorite

router = APIRouter(tags=["favorites"])


@router.post("/events/{event_id}/favorite", response_model=FavoriteToggleOut)
def favorite(
    event_id: int,
    db: Session = Depends(get_db),
    identity: Identity | None = Depends(get_identity),
):
    is_favorite = toggle_favorite(db, identity, event_id)
    return {"event_id": event_id, "is_favorite": is_favorite}


@router.get("/favorites/me", response_model=list[EventOut])
def my_favorites(
    db: Session = Depends(get_db),
    identity: Identity | None = Depends(get_identity),
):
    return list_favorites(db, identity)
