"""Dataclasses describing every Warlords game entity.

The rules layer operates purely on these in-memory types.  They are plain
records (numbers, strings, nested records, lists and maps) so a persistence
adapter can serialise them losslessly with a pydantic ``TypeAdapter``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, NewType

from pydantic import Field

from .enums import (
    BattleOutcome,
    CityScale,
    DiplomacyStatus,
    DomesticAction,
    EventType,
    GamePhase,
    GeneralEventKind,
)

# --- Strongly typed identifiers -------------------------------------------------

FactionID = NewType("FactionID", str)
CityID = NewType("CityID", str)
GeneralID = NewType("GeneralID", str)
EventID = NewType("EventID", str)


# --- Core dataclasses -----------------------------------------------------------


@dataclass(slots=True)
class GeneralAttributes:
    """The five general attributes, each within 0-100."""

    lead: int
    war: int
    intel: int
    pol: int
    cha: int


@dataclass(slots=True)
class General:
    """Named officer serving a faction."""

    id: GeneralID
    name: str
    faction: FactionID
    attributes: GeneralAttributes
    age: int
    current_city: CityID | None
    troops: int = 0
    is_alive: bool = True


@dataclass(slots=True)
class CityResources:
    """Mutable stock and development levels of a city."""

    population: int
    gold: int
    grain: int
    commerce: int
    agriculture: int
    defense: int
    loyalty: int


@dataclass(slots=True)
class Position:
    """Map coordinates used by renderers."""

    x: float
    y: float


@dataclass(slots=True)
class City:
    """City node on the strategic map."""

    id: CityID
    name: str
    faction: FactionID
    position: Position
    scale: CityScale
    resources: CityResources
    connected_cities: list[CityID] = field(default_factory=list)
    stationed_generals: list[GeneralID] = field(default_factory=list)
    governor: GeneralID | None = None


@dataclass(slots=True)
class Faction:
    """Warlord faction with its holdings and diplomatic stances."""

    id: FactionID
    name: str
    leader_id: GeneralID
    color: str
    cities: list[CityID] = field(default_factory=list)
    generals: list[GeneralID] = field(default_factory=list)
    diplomacy: dict[FactionID, DiplomacyStatus] = field(default_factory=dict)

    def stance_toward(self, other: FactionID) -> DiplomacyStatus:
        """Return this faction's own view of ``other`` (neutral when unset)."""

        return self.diplomacy.get(other, DiplomacyStatus.NEUTRAL)

    def is_hostile_to(self, other: FactionID) -> bool:
        return self.stance_toward(other) == DiplomacyStatus.HOSTILE


@dataclass(frozen=True, slots=True)
class GameDate:
    """In-game calendar date with month in 1-12."""

    year: int
    month: int


# --- Events ---------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Casualties:
    """Troops lost by each side of a battle."""

    attacker: int
    defender: int


@dataclass(frozen=True, slots=True)
class DuelRecord:
    """Outcome of a duel or instant kill fought during a battle."""

    winner: GeneralID
    loser: GeneralID
    instant_kill: bool = False


@dataclass(frozen=True, slots=True)
class BattleEventData:
    attacker_faction: FactionID
    defender_faction: FactionID
    attacker_general: GeneralID
    defender_general: GeneralID | None
    from_city: CityID
    target_city: CityID
    result: BattleOutcome
    casualties: Casualties
    duel: DuelRecord | None = None
    city_captured: bool = False
    kind: Literal["battle"] = "battle"


@dataclass(frozen=True, slots=True)
class DomesticEventData:
    faction: FactionID
    city: CityID
    action: DomesticAction
    executor: GeneralID
    value: int
    kind: Literal["domestic"] = "domestic"


@dataclass(frozen=True, slots=True)
class GeneralEventData:
    general: GeneralID
    event: GeneralEventKind
    details: str = ""
    kind: Literal["general"] = "general"


EventData = Annotated[
    BattleEventData | DomesticEventData | GeneralEventData,
    Field(discriminator="kind"),
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    """Immutable log entry; ``narrative`` is filled in by the narrator."""

    id: EventID
    type: EventType
    timestamp: GameDate
    data: EventData
    narrative: str | None = None


# --- Aggregate ------------------------------------------------------------------


@dataclass(slots=True)
class GameState:
    """Aggregate root holding every entity of a running game."""

    current_date: GameDate
    current_faction: FactionID
    factions: dict[FactionID, Faction] = field(default_factory=dict)
    cities: dict[CityID, City] = field(default_factory=dict)
    generals: dict[GeneralID, General] = field(default_factory=dict)
    action_points: int = 3
    phase: GamePhase = GamePhase.PLAYER
    selected_city: CityID | None = None
    event_log: list[GameEvent] = field(default_factory=list)
    game_id: str = "default"
