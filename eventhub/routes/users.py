from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhub.database.db import get_db
from eventhub.domain.models import Identity
from eventhub.routes.deps import require_identity
from eventhub.schemas.users import UserCreate, UserOut
from eventhub.services.accounts import create_user, get_user

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def sign_up(payload: UserCreate, db: Session = Depends(get_db)):
    return create_user(
        db, email=payload.email, full_name=payload.full_name, is_organizer=payload.is_organizer
    )


@router.get("/me", response_model=UserOut)
def me(identity: Identity = Depends(require_identity), db: Session = Depends(get_db)):
    return get_user(db, identity.id)
