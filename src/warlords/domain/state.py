"""Read helpers and the copy-on-write working copy of a game state.

Rule functions read through the :class:`StateView` protocol so they work
both on a committed :class:`~warlords.domain.models.GameState` and on a
:class:`StateDraft` being mutated during turn-end processing.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Protocol

from warlords.domain.battle import general_strength
from warlords.domain.models import (
    City,
    CityID,
    EventID,
    Faction,
    FactionID,
    GameDate,
    GameEvent,
    GameState,
    General,
    GeneralID,
)
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig


class InvalidReferenceError(LookupError):
    """Raised when the state graph references an id that does not exist."""


class StateView(Protocol):
    """Read-only access shared by ``GameState`` and ``StateDraft``."""

    @property
    def factions(self) -> Mapping[FactionID, Faction]: ...

    @property
    def cities(self) -> Mapping[CityID, City]: ...

    @property
    def generals(self) -> Mapping[GeneralID, General]: ...


def get_faction(state: StateView, faction_id: FactionID) -> Faction:
    faction = state.factions.get(faction_id)
    if faction is None:
        raise InvalidReferenceError(f"faction {faction_id!r} not found")
    return faction


def get_city(state: StateView, city_id: CityID) -> City:
    city = state.cities.get(city_id)
    if city is None:
        raise InvalidReferenceError(f"city {city_id!r} not found")
    return city


def get_general(state: StateView, general_id: GeneralID) -> General:
    general = state.generals.get(general_id)
    if general is None:
        raise InvalidReferenceError(f"general {general_id!r} not found")
    return general


def stationed_generals(state: StateView, city_id: CityID) -> list[General]:
    """Living generals stationed in a city, in station order."""

    city = get_city(state, city_id)
    generals = [get_general(state, general_id) for general_id in city.stationed_generals]
    return [general for general in generals if general.is_alive]


def city_troops(state: StateView, city_id: CityID) -> int:
    """Total troops of the living generals stationed in a city."""

    return sum(general.troops for general in stationed_generals(state, city_id))


def strongest_general(
    state: StateView, city_id: CityID, *, rules: RulesConfig = DEFAULT_RULES
) -> General | None:
    """Living general with troops and the best war/lead blend; first wins ties."""

    best: General | None = None
    best_score = float("-inf")
    for general in stationed_generals(state, city_id):
        if general.troops <= 0:
            continue
        score = general_strength(
            general.attributes.war, general.attributes.lead, rules=rules
        )
        if score > best_score:
            best, best_score = general, score
    return best


def best_politics_general(state: StateView, city_id: CityID) -> General | None:
    """Living general with the highest politics; first wins ties."""

    best: General | None = None
    for general in stationed_generals(state, city_id):
        if best is None or general.attributes.pol > best.attributes.pol:
            best = general
    return best


def governor_pol(state: StateView, city: City) -> int | None:
    """Politics of the city's living governor, or ``None`` when ungoverned."""

    if city.governor is None:
        return None
    governor = get_general(state, city.governor)
    return governor.attributes.pol if governor.is_alive else None


class StateDraft:
    """Private working copy of a game state for one turn-end sequence.

    The entity maps are copied shallowly; an entity is deep-copied the first
    time it is requested through one of the ``edit_*`` methods, so untouched
    entities stay shared with the base state.  The base state is never
    mutated.  Entities returned from the read accessors must not be mutated.
    """

    def __init__(self, base: GameState) -> None:
        self._base = base
        self._factions: dict[FactionID, Faction] = dict(base.factions)
        self._cities: dict[CityID, City] = dict(base.cities)
        self._generals: dict[GeneralID, General] = dict(base.generals)
        self._copied: set[tuple[str, str]] = set()
        self.current_date: GameDate = base.current_date
        self.events: list[GameEvent] = []

    @property
    def base(self) -> GameState:
        return self._base

    @property
    def factions(self) -> Mapping[FactionID, Faction]:
        return self._factions

    @property
    def cities(self) -> Mapping[CityID, City]:
        return self._cities

    @property
    def generals(self) -> Mapping[GeneralID, General]:
        return self._generals

    @property
    def current_faction(self) -> FactionID:
        return self._base.current_faction

    def edit_faction(self, faction_id: FactionID) -> Faction:
        return self._edit("faction", self._factions, faction_id)

    def edit_city(self, city_id: CityID) -> City:
        return self._edit("city", self._cities, city_id)

    def edit_general(self, general_id: GeneralID) -> General:
        return self._edit("general", self._generals, general_id)

    def _edit(self, kind: str, table: dict[Any, Any], key: str) -> Any:
        entity = table.get(key)
        if entity is None:
            raise InvalidReferenceError(f"{kind} {key!r} not found")
        marker = (kind, key)
        if marker not in self._copied:
            entity = copy.deepcopy(entity)
            table[key] = entity
            self._copied.add(marker)
        return entity

    @property
    def touched(self) -> int:
        """Number of entities copied so far."""

        return len(self._copied)

    def next_event_id(self) -> EventID:
        sequence = len(self._base.event_log) + len(self.events) + 1
        return EventID(f"evt-{sequence:05d}")

    def record(self, event: GameEvent) -> GameEvent:
        """Append an event to the turn's event list."""

        self.events.append(event)
        return event

    def commit(self, **overrides: Any) -> GameState:
        """Return a new ``GameState`` carrying every change of the draft."""

        return replace(
            self._base,
            current_date=self.current_date,
            factions=dict(self._factions),
            cities=dict(self._cities),
            generals=dict(self._generals),
            event_log=[*self._base.event_log, *self.events],
            **overrides,
        )
