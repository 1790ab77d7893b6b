"""Scenario data and consistency validators.

The bundled scenario opens in January 190 AD with the coalition against
Dong Zhuo: four factions, six cities and nineteen generals.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from warlords.domain.enums import CityScale, DiplomacyStatus, GamePhase
from warlords.domain.models import (
    City,
    CityID,
    CityResources,
    Faction,
    FactionID,
    GameDate,
    GameState,
    General,
    GeneralAttributes,
    GeneralID,
    Position,
)
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import StateView

ATTRIBUTE_MIN = 0
ATTRIBUTE_MAX = 100

H = DiplomacyStatus.HOSTILE
N = DiplomacyStatus.NEUTRAL


@dataclass(slots=True)
class ScenarioData:
    """Starting position of a game."""

    name: str
    start_date: GameDate
    default_player: FactionID
    factions: dict[FactionID, Faction] = field(default_factory=dict)
    cities: dict[CityID, City] = field(default_factory=dict)
    generals: dict[GeneralID, General] = field(default_factory=dict)


@dataclass(slots=True)
class ValidationReport:
    valid: bool
    errors: list[str] = field(default_factory=list)


# (id, name, color, cities, generals, diplomacy)
_FACTIONS_190 = (
    (
        "dongzhuo",
        "Dong Zhuo",
        "#1a1a1a",
        ["luoyang", "changan"],
        ["dongzhuo", "lvbu", "liru", "huaxiong", "lijue", "guosi"],
        {"caocao": H, "yuanshao": H, "liubei": H},
    ),
    (
        "caocao",
        "Cao Cao",
        "#2563eb",
        ["chenliu"],
        ["caocao", "xiahoudun", "xiahouyuan", "caoren", "caohong"],
        {"dongzhuo": H, "yuanshao": N, "liubei": N},
    ),
    (
        "yuanshao",
        "Yuan Shao",
        "#eab308",
        ["nanpi", "ye"],
        ["yuanshao", "yanliang", "wenchou", "jushou", "tianfeng"],
        {"dongzhuo": H, "caocao": N, "liubei": N},
    ),
    (
        "liubei",
        "Liu Bei",
        "#16a34a",
        ["pingyuan"],
        ["liubei", "guanyu", "zhangfei"],
        {"dongzhuo": H, "caocao": N, "yuanshao": N},
    ),
)

# (id, name, faction, (x, y), scale,
#  (population, gold, grain, commerce, agriculture, defense, loyalty),
#  connected, stationed, governor)
_CITIES_190 = (
    (
        "luoyang", "Luoyang", "dongzhuo", (400, 300), CityScale.LARGE,
        (300_000, 50_000, 100_000, 500, 400, 80, 60),
        ["changan", "chenliu", "ye"], ["dongzhuo", "lvbu", "liru"], "dongzhuo",
    ),
    (
        "changan", "Chang'an", "dongzhuo", (200, 350), CityScale.LARGE,
        (250_000, 40_000, 80_000, 450, 500, 70, 55),
        ["luoyang"], ["huaxiong", "lijue", "guosi"], "huaxiong",
    ),
    (
        "chenliu", "Chenliu", "caocao", (500, 350), CityScale.MEDIUM,
        (100_000, 15_000, 30_000, 200, 250, 40, 75),
        ["luoyang", "pingyuan"],
        ["caocao", "xiahoudun", "xiahouyuan", "caoren", "caohong"], "caocao",
    ),
    (
        "nanpi", "Nanpi", "yuanshao", (550, 200), CityScale.MEDIUM,
        (120_000, 20_000, 40_000, 300, 350, 50, 70),
        ["ye", "pingyuan"], ["yanliang", "wenchou"], "yanliang",
    ),
    (
        "ye", "Ye", "yuanshao", (480, 220), CityScale.LARGE,
        (180_000, 30_000, 60_000, 400, 450, 60, 72),
        ["nanpi", "luoyang"], ["yuanshao", "jushou", "tianfeng"], "yuanshao",
    ),
    (
        "pingyuan", "Pingyuan", "liubei", (600, 280), CityScale.SMALL,
        (50_000, 5_000, 10_000, 100, 150, 30, 85),
        ["nanpi", "chenliu"], ["liubei", "guanyu", "zhangfei"], "liubei",
    ),
)

# (id, name, faction, city, (lead, war, intel, pol, cha), age, troops)
_GENERALS_190 = (
    ("dongzhuo", "Dong Zhuo", "dongzhuo", "luoyang", (70, 75, 55, 30, 20), 52, 30_000),
    ("lvbu", "Lü Bu", "dongzhuo", "luoyang", (90, 100, 25, 15, 40), 29, 20_000),
    ("liru", "Li Ru", "dongzhuo", "luoyang", (45, 30, 92, 85, 35), 38, 5_000),
    ("huaxiong", "Hua Xiong", "dongzhuo", "changan", (75, 90, 35, 20, 30), 35, 15_000),
    ("lijue", "Li Jue", "dongzhuo", "changan", (65, 78, 40, 25, 25), 32, 12_000),
    ("guosi", "Guo Si", "dongzhuo", "changan", (62, 76, 38, 22, 23), 30, 10_000),
    ("caocao", "Cao Cao", "caocao", "chenliu", (96, 72, 91, 94, 96), 35, 8_000),
    ("xiahoudun", "Xiahou Dun", "caocao", "chenliu", (80, 85, 50, 45, 70), 33, 5_000),
    ("xiahouyuan", "Xiahou Yuan", "caocao", "chenliu", (85, 88, 55, 40, 65), 31, 5_000),
    ("caoren", "Cao Ren", "caocao", "chenliu", (92, 80, 60, 55, 75), 22, 4_000),
    ("caohong", "Cao Hong", "caocao", "chenliu", (75, 78, 45, 42, 60), 21, 3_000),
    ("yuanshao", "Yuan Shao", "yuanshao", "ye", (75, 55, 65, 70, 85), 36, 15_000),
    ("yanliang", "Yan Liang", "yuanshao", "nanpi", (70, 95, 30, 25, 45), 32, 8_000),
    ("wenchou", "Wen Chou", "yuanshao", "nanpi", (68, 93, 28, 22, 42), 31, 7_000),
    ("jushou", "Ju Shou", "yuanshao", "ye", (72, 45, 90, 88, 75), 40, 3_000),
    ("tianfeng", "Tian Feng", "yuanshao", "ye", (65, 40, 92, 90, 70), 42, 2_000),
    ("liubei", "Liu Bei", "liubei", "pingyuan", (78, 65, 70, 75, 99), 29, 3_000),
    ("guanyu", "Guan Yu", "liubei", "pingyuan", (88, 97, 70, 60, 90), 28, 2_000),
    ("zhangfei", "Zhang Fei", "liubei", "pingyuan", (75, 98, 35, 20, 55), 23, 1_500),
)


def load_scenario_190() -> ScenarioData:
    """Build a fresh copy of the 190 AD scenario."""

    scenario = ScenarioData(
        name="190 AD: Coalition against Dong Zhuo",
        start_date=GameDate(year=190, month=1),
        default_player=FactionID("caocao"),
    )

    for faction_id, name, color, cities, generals, diplomacy in _FACTIONS_190:
        scenario.factions[FactionID(faction_id)] = Faction(
            id=FactionID(faction_id),
            name=name,
            leader_id=GeneralID(faction_id),
            color=color,
            cities=[CityID(city_id) for city_id in cities],
            generals=[GeneralID(general_id) for general_id in generals],
            diplomacy={FactionID(other): status for other, status in diplomacy.items()},
        )

    for (
        city_id,
        name,
        owner,
        (x, y),
        scale,
        (population, gold, grain, commerce, agriculture, defense, loyalty),
        connected,
        stationed,
        governor,
    ) in _CITIES_190:
        scenario.cities[CityID(city_id)] = City(
            id=CityID(city_id),
            name=name,
            faction=FactionID(owner),
            position=Position(x=x, y=y),
            scale=scale,
            resources=CityResources(
                population=population,
                gold=gold,
                grain=grain,
                commerce=commerce,
                agriculture=agriculture,
                defense=defense,
                loyalty=loyalty,
            ),
            connected_cities=[CityID(other) for other in connected],
            stationed_generals=[GeneralID(general_id) for general_id in stationed],
            governor=GeneralID(governor),
        )

    for general_id, name, owner, city_id, (lead, war, intel, pol, cha), age, troops in (
        _GENERALS_190
    ):
        scenario.generals[GeneralID(general_id)] = General(
            id=GeneralID(general_id),
            name=name,
            faction=FactionID(owner),
            attributes=GeneralAttributes(lead=lead, war=war, intel=intel, pol=pol, cha=cha),
            age=age,
            current_city=CityID(city_id),
            troops=troops,
        )

    return scenario


def build_game_state(
    scenario: ScenarioData,
    player_faction: FactionID | None = None,
    *,
    game_id: str = "default",
    rules: RulesConfig = DEFAULT_RULES,
) -> GameState:
    """Create a new game from a scenario.

    Raises:
        ValueError: If ``player_faction`` is not part of the scenario
    """

    player = player_faction or scenario.default_player
    if player not in scenario.factions:
        raise ValueError(f"faction {player!r} is not part of scenario {scenario.name!r}")

    return GameState(
        current_date=scenario.start_date,
        current_faction=player,
        factions=copy.deepcopy(scenario.factions),
        cities=copy.deepcopy(scenario.cities),
        generals=copy.deepcopy(scenario.generals),
        action_points=rules.turn.max_action_points,
        phase=GamePhase.PLAYER,
        selected_city=None,
        game_id=game_id,
    )


# ---------------------------------------------------------------------------
# Validators


def validate_city_connections(state: StateView) -> ValidationReport:
    """Every connection must point at an existing city and be reciprocated."""

    errors: list[str] = []
    for city in state.cities.values():
        for connected_id in city.connected_cities:
            connected = state.cities.get(connected_id)
            if connected is None:
                errors.append(f"city {city.id} connects to unknown city {connected_id}")
                continue
            if city.id not in connected.connected_cities:
                errors.append(f"connection {city.id} -> {connected_id} is not bidirectional")
    return ValidationReport(valid=not errors, errors=errors)


def validate_general_assignments(state: StateView) -> ValidationReport:
    """Generals, cities and factions must agree on who owns and hosts whom."""

    errors: list[str] = []
    for general in state.generals.values():
        faction = state.factions.get(general.faction)
        if faction is None:
            errors.append(f"general {general.id} belongs to unknown faction {general.faction}")
            continue
        if general.id not in faction.generals:
            errors.append(f"general {general.id} missing from faction {faction.id} roster")
        if general.current_city is None:
            continue
        city = state.cities.get(general.current_city)
        if city is None:
            errors.append(f"general {general.id} is in unknown city {general.current_city}")
            continue
        if general.id not in city.stationed_generals:
            errors.append(f"general {general.id} not stationed in {city.id}")

    for faction in state.factions.values():
        for city_id in faction.cities:
            city = state.cities.get(city_id)
            if city is None:
                errors.append(f"faction {faction.id} owns unknown city {city_id}")
            elif city.faction != faction.id:
                errors.append(f"faction {faction.id} lists {city_id} owned by {city.faction}")
        for general_id in faction.generals:
            if general_id not in state.generals:
                errors.append(f"faction {faction.id} lists unknown general {general_id}")

    for city in state.cities.values():
        for general_id in city.stationed_generals:
            if general_id not in state.generals:
                errors.append(f"city {city.id} hosts unknown general {general_id}")
        if city.governor is not None and city.governor not in city.stationed_generals:
            errors.append(f"governor {city.governor} of {city.id} is not stationed there")

    return ValidationReport(valid=not errors, errors=errors)


def validate_attributes(state: StateView) -> ValidationReport:
    errors: list[str] = []
    for general in state.generals.values():
        attributes = general.attributes
        for name in ("lead", "war", "intel", "pol", "cha"):
            value = getattr(attributes, name)
            if not ATTRIBUTE_MIN <= value <= ATTRIBUTE_MAX:
                errors.append(f"general {general.id} has {name}={value} outside 0-100")
        if general.troops < 0:
            errors.append(f"general {general.id} has negative troops")
    return ValidationReport(valid=not errors, errors=errors)


def validate_diplomacy(state: StateView) -> ValidationReport:
    """Report diplomacy entries that are unknown or not reciprocated.

    Asymmetric stances are legal in play; each faction acts on its own
    view.  The report lets scenario authors spot unintended ones.
    """

    errors: list[str] = []
    for faction in state.factions.values():
        for other_id, status in faction.diplomacy.items():
            other = state.factions.get(other_id)
            if other is None:
                errors.append(f"faction {faction.id} has a stance toward unknown {other_id}")
                continue
            reverse = other.stance_toward(faction.id)
            if reverse != status:
                errors.append(
                    f"diplomacy {faction.id} -> {other_id} is {status} "
                    f"but {other_id} -> {faction.id} is {reverse}"
                )
    return ValidationReport(valid=not errors, errors=errors)


def validate_state(state: StateView) -> ValidationReport:
    """Run every validator and merge their reports."""

    errors: list[str] = []
    for validator in (
        validate_city_connections,
        validate_general_assignments,
        validate_attributes,
        validate_diplomacy,
    ):
        errors.extend(validator(state).errors)
    return ValidationReport(valid=not errors, errors=errors)
