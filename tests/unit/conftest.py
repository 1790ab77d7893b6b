"""Shared fixtures for the domain unit tests."""

from __future__ import annotations

import pytest

from warlords.domain import models as dm
from warlords.domain.enums import CityScale, DiplomacyStatus, GamePhase


def _general(
    general_id: str,
    faction: str,
    city: str | None,
    attributes: tuple[int, int, int, int, int],
    *,
    troops: int,
    age: int = 30,
) -> dm.General:
    lead, war, intel, pol, cha = attributes
    return dm.General(
        id=dm.GeneralID(general_id),
        name=general_id.title(),
        faction=dm.FactionID(faction),
        attributes=dm.GeneralAttributes(lead=lead, war=war, intel=intel, pol=pol, cha=cha),
        age=age,
        current_city=dm.CityID(city) if city else None,
        troops=troops,
    )


def _city(
    city_id: str,
    faction: str,
    scale: CityScale,
    resources: tuple[int, int, int, int, int, int, int],
    connected: list[str],
    stationed: list[str],
    governor: str | None,
) -> dm.City:
    population, gold, grain, commerce, agriculture, defense, loyalty = resources
    return dm.City(
        id=dm.CityID(city_id),
        name=city_id.title(),
        faction=dm.FactionID(faction),
        position=dm.Position(x=0.0, y=0.0),
        scale=scale,
        resources=dm.CityResources(
            population=population,
            gold=gold,
            grain=grain,
            commerce=commerce,
            agriculture=agriculture,
            defense=defense,
            loyalty=loyalty,
        ),
        connected_cities=[dm.CityID(c) for c in connected],
        stationed_generals=[dm.GeneralID(g) for g in stationed],
        governor=dm.GeneralID(governor) if governor else None,
    )


def build_world() -> dm.GameState:
    """Three factions around Xuchang.

    ``wei`` (the player) is hostile with ``shu`` and allied with ``wu``.
    Xuchang borders both Luoyang (shu) and Shouchun (wu).
    """

    H, N, A = DiplomacyStatus.HOSTILE, DiplomacyStatus.NEUTRAL, DiplomacyStatus.ALLY
    factions = {
        "wei": dm.Faction(
            id=dm.FactionID("wei"),
            name="Wei",
            leader_id=dm.GeneralID("caocao"),
            color="#2563eb",
            cities=[dm.CityID("xuchang")],
            generals=[dm.GeneralID("caocao"), dm.GeneralID("xiahou")],
            diplomacy={dm.FactionID("shu"): H, dm.FactionID("wu"): A},
        ),
        "shu": dm.Faction(
            id=dm.FactionID("shu"),
            name="Shu",
            leader_id=dm.GeneralID("liubei"),
            color="#16a34a",
            cities=[dm.CityID("luoyang")],
            generals=[dm.GeneralID("liubei")],
            diplomacy={dm.FactionID("wei"): H, dm.FactionID("wu"): N},
        ),
        "wu": dm.Faction(
            id=dm.FactionID("wu"),
            name="Wu",
            leader_id=dm.GeneralID("sunjian"),
            color="#dc2626",
            cities=[dm.CityID("shouchun")],
            generals=[dm.GeneralID("sunjian")],
            diplomacy={dm.FactionID("wei"): A, dm.FactionID("shu"): N},
        ),
    }
    cities = {
        "xuchang": _city(
            "xuchang",
            "wei",
            CityScale.LARGE,
            (300_000, 5_000, 10_000, 500, 400, 50, 80),
            ["luoyang", "shouchun"],
            ["caocao", "xiahou"],
            "caocao",
        ),
        "luoyang": _city(
            "luoyang",
            "shu",
            CityScale.MEDIUM,
            (200_000, 2_000, 5_000, 300, 300, 30, 70),
            ["xuchang"],
            ["liubei"],
            "liubei",
        ),
        "shouchun": _city(
            "shouchun",
            "wu",
            CityScale.SMALL,
            (100_000, 800, 3_000, 200, 250, 20, 75),
            ["xuchang"],
            ["sunjian"],
            "sunjian",
        ),
    }
    generals = {
        "caocao": _general("caocao", "wei", "xuchang", (90, 70, 90, 90, 95), troops=8_000),
        "xiahou": _general("xiahou", "wei", "xuchang", (85, 88, 50, 40, 60), troops=6_000),
        "liubei": _general("liubei", "shu", "luoyang", (75, 70, 70, 80, 99), troops=3_000),
        "sunjian": _general("sunjian", "wu", "shouchun", (85, 85, 70, 60, 80), troops=4_000),
    }
    return dm.GameState(
        current_date=dm.GameDate(year=190, month=1),
        current_faction=dm.FactionID("wei"),
        factions={dm.FactionID(k): v for k, v in factions.items()},
        cities={dm.CityID(k): v for k, v in cities.items()},
        generals={dm.GeneralID(k): v for k, v in generals.items()},
        action_points=3,
        phase=GamePhase.PLAYER,
        game_id="test",
    )


@pytest.fixture
def world() -> dm.GameState:
    return build_world()
