"""Authorization rules for organizer-only actions."""

from eventhub.domain.models import EventRecord, Identity


def can_create_events(identity: Identity | None) -> bool:
    return identity is not None and identity.is_organizer


def can_manage(identity: Identity | None, event: EventRecord) -> bool:
    """An event is managed by the organizer who created it, and nobody else."""
    return can_create_events(identity) and identity.id == event.organizer_id  # type: ignore[union-attr]
