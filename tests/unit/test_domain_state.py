"""Tests for state lookups and the copy-on-write working copy."""

from __future__ import annotations

from dataclasses import replace

import pytest

from warlords.domain import models as dm
from warlords.domain.enums import GeneralEventKind
from warlords.domain.events import record_event
from warlords.domain.state import (
    InvalidReferenceError,
    StateDraft,
    best_politics_general,
    city_troops,
    get_city,
    governor_pol,
    stationed_generals,
    strongest_general,
)


def test_lookup_of_unknown_city_raises(world):
    with pytest.raises(InvalidReferenceError, match="nowhere"):
        get_city(world, dm.CityID("nowhere"))


def test_city_troops_counts_living_generals(world):
    assert city_troops(world, dm.CityID("xuchang")) == 14_000
    world.generals[dm.GeneralID("xiahou")].is_alive = False
    assert city_troops(world, dm.CityID("xuchang")) == 8_000
    assert [g.id for g in stationed_generals(world, dm.CityID("xuchang"))] == ["caocao"]


def test_strongest_general_skips_empty_commands(world):
    # caocao: 70*0.4 + 90*0.6 = 82, xiahou: 88*0.4 + 85*0.6 = 86.2
    assert strongest_general(world, dm.CityID("xuchang")).id == "xiahou"
    world.generals[dm.GeneralID("xiahou")].troops = 0
    assert strongest_general(world, dm.CityID("xuchang")).id == "caocao"


def test_strongest_general_none_without_troops(world):
    world.generals[dm.GeneralID("liubei")].troops = 0
    assert strongest_general(world, dm.CityID("luoyang")) is None


def test_best_politics_general(world):
    assert best_politics_general(world, dm.CityID("xuchang")).id == "caocao"


def test_governor_pol_ignores_dead_governor(world):
    city = world.cities[dm.CityID("xuchang")]
    assert governor_pol(world, city) == 90
    world.generals[dm.GeneralID("caocao")].is_alive = False
    assert governor_pol(world, city) is None
    assert governor_pol(world, replace(city, governor=None)) is None


def test_draft_copies_on_first_edit(world):
    draft = StateDraft(world)
    edited = draft.edit_city(dm.CityID("xuchang"))
    edited.resources.gold = 0

    assert world.cities[dm.CityID("xuchang")].resources.gold == 5_000
    assert draft.cities[dm.CityID("xuchang")].resources.gold == 0
    assert draft.edit_city(dm.CityID("xuchang")) is edited
    assert draft.touched == 1
    assert draft.cities[dm.CityID("luoyang")] is world.cities[dm.CityID("luoyang")]


def test_draft_edit_unknown_entity(world):
    draft = StateDraft(world)
    with pytest.raises(InvalidReferenceError):
        draft.edit_general(dm.GeneralID("nobody"))


def test_commit_appends_events_and_leaves_base(world):
    draft = StateDraft(world)
    draft.edit_general(dm.GeneralID("caocao")).troops = 1
    event = record_event(
        draft,
        dm.GeneralEventData(general=dm.GeneralID("caocao"), event=GeneralEventKind.MOVED),
    )

    committed = draft.commit(action_points=0)

    assert event.id == "evt-00001"
    assert event.timestamp == world.current_date
    assert committed.event_log == [event]
    assert committed.action_points == 0
    assert committed.generals[dm.GeneralID("caocao")].troops == 1
    assert world.generals[dm.GeneralID("caocao")].troops == 8_000
    assert world.event_log == []


def test_event_ids_continue_the_log(world):
    draft = StateDraft(world)
    moved = dm.GeneralEventData(general=dm.GeneralID("caocao"), event=GeneralEventKind.MOVED)
    record_event(draft, moved)
    state = draft.commit()

    second = StateDraft(state)
    event = record_event(second, moved)
    assert event.id == "evt-00002"
