"""Narrative Service Protocol Interface.

The kernel never writes prose itself.  After a turn resolves, each new
event is handed to a narrative service together with a context that
resolves ids to display names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from warlords.domain.models import CityID, FactionID, GameEvent, GeneralID
from warlords.domain.state import StateView


@dataclass(frozen=True, slots=True)
class NarrativeContext:
    """Name lookups for the ids referenced by events."""

    state: StateView

    def general_name(self, general_id: GeneralID) -> str:
        general = self.state.generals.get(general_id)
        return general.name if general is not None else str(general_id)

    def city_name(self, city_id: CityID) -> str:
        city = self.state.cities.get(city_id)
        return city.name if city is not None else str(city_id)

    def faction_name(self, faction_id: FactionID) -> str:
        faction = self.state.factions.get(faction_id)
        return faction.name if faction is not None else str(faction_id)


class NarrativeService(Protocol):
    """Protocol defining the interface for event narration.

    Implementations typically call a language model or fill templates.  They
    may raise or hang; the caller bounds the call with a timeout and keeps
    the event without narrative on any failure.
    """

    async def generate_narrative(self, event: GameEvent, context: NarrativeContext) -> str:
        """Return narrative text for a single event.

        Args:
            event: The event to narrate
            context: Name lookups for the ids referenced by the event

        Returns:
            Narrative text
        """
        ...
