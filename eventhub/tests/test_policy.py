from datetime import datetime, timezone

from eventhub.core.policy import can_create_events, can_manage
from eventhub.domain.models import EventRecord, Identity

EVENT = EventRecord(
    id=1,
    title="Meetup",
    capacity=10,
    booked_count=0,
    scheduled_at=datetime(2026, 6, 1, tzinfo=timezone.utc),
    organizer_id=5,
)


def test_owner_organizer_can_manage():
    assert can_manage(Identity(id=5, is_organizer=True), EVENT)


def test_other_organizer_cannot_manage():
    assert not can_manage(Identity(id=6, is_organizer=True), EVENT)


def test_creator_who_lost_organizer_flag_cannot_manage():
    assert not can_manage(Identity(id=5, is_organizer=False), EVENT)


def test_anonymous_cannot_manage_or_create():
    assert not can_manage(None, EVENT)
    assert not can_create_events(None)
    assert not can_create_events(Identity(id=1))
    assert can_create_events(Identity(id=1, is_organizer=True))
