"""Event creation helpers."""

from __future__ import annotations

from warlords.domain.enums import EventType
from warlords.domain.models import (
    BattleEventData,
    DomesticEventData,
    GameEvent,
    GeneralEventData,
)
from warlords.domain.state import StateDraft

_EVENT_TYPES: dict[str, EventType] = {
    "battle": EventType.BATTLE,
    "domestic": EventType.DOMESTIC,
    "general": EventType.GENERAL,
}


def record_event(
    draft: StateDraft,
    data: BattleEventData | DomesticEventData | GeneralEventData,
) -> GameEvent:
    """Create an event stamped with the draft's current date and append it."""

    event = GameEvent(
        id=draft.next_event_id(),
        type=_EVENT_TYPES[data.kind],
        timestamp=draft.current_date,
        data=data,
    )
    return draft.record(event)
