import logging

from eventhub.core.celery_config import celery_app
from eventhub.core.errors import CapacityBelowRegistrations, EventNotFound
from eventhub.core.locks import make_locker
from eventhub.database.db import SessionLocal
from eventhub.services.registrations import RegistrationService
from eventhub.stores.sql_store import SqlRegistrationStore

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def reconcile_event_capacity_task(self, event_id: int):
    """Recount an event's registrations and repair its booked_count if it drifted."""
    db = SessionLocal()
    try:
        service = RegistrationService(SqlRegistrationStore(db), make_locker())
        return service.reconcile(event_id)
    except EventNotFound:
        logger.info("Skipping reconciliation for deleted event %s", event_id)
        return None
    except CapacityBelowRegistrations:
        logger.error("Event %s is over capacity; booked_count left unchanged", event_id)
        return None
    finally:
        db.close()
