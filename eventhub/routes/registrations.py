from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from eventhub.core.errors import Forbidden
from eventhub.core.policy import can_manage
from eventhub.database.db import get_db
from eventhub.domain.models import Identity, TimeFilter
from eventhub.routes.deps import get_identity, get_registration_service, require_identity
from eventhub.schemas.events import EventOut
from eventhub.schemas.registrations import RegistrationOut, RegistrationRequest, UserRegistrationOut
from eventhub.services import events as catalog
from eventhub.services.registrations import RegistrationService
from eventhub.stores.sql_store import event_record

router = APIRouter(tags=["registrations"])


@router.post(
    "/events/{event_id}/register",
    response_model=RegistrationOut,
    status_code=status.HTTP_201_CREATED,
)
def register(
    event_id: int,
    payload: RegistrationRequest,
    identity: Identity | None = Depends(get_identity),
    service: RegistrationService = Depends(get_registration_service),
):
    registration = service.register(event_id, identity, payload.to_form())
    return RegistrationOut.model_validate(registration)


@router.get("/events/{event_id}/registrations", response_model=list[RegistrationOut])
def event_registrations(
    event_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
    service: RegistrationService = Depends(get_registration_service),
):
    """Attendee list, visible to the event's organizer only."""
    event = catalog.get_event(db, event_id)
    if not can_manage(identity, event_record(event)):
        raise Forbidden()
    return [RegistrationOut.model_validate(r) for r in service.list_for_event(event_id)]


@router.get("/registrations/me", response_model=list[UserRegistrationOut])
def my_registrations(
    time_filter: TimeFilter = Query(default=TimeFilter.UPCOMING, alias="filter"),
    identity: Identity = Depends(require_identity),
    service: RegistrationService = Depends(get_registration_service),
):
    # asdict() on the records would drop remaining_capacity
    return [UserRegistrationOut.model_validate(r) for r in service.list_for_user(identity.id, time_filter)]


@router.get("/registrations/recommended", response_model=list[EventOut])
def recommended(
    limit: int = Query(default=3, ge=1, le=20),
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
):
    return catalog.recommended_events(db, identity.id, limit)


@router.delete("/registrations/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel(
    registration_id: int,
    identity: Identity | None = Depends(get_identity),
    service: RegistrationService = Depends(get_registration_service),
):
    service.cancel(registration_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
