"""Tests for executing planned AI actions and city capture."""

from __future__ import annotations

from warlords.domain import models as dm
from warlords.domain.ai import AttackAction, DevelopAction, RecruitAction
from warlords.domain.conquest import apply_losses, capture_city
from warlords.domain.enums import BattleOutcome, DevelopTarget, DomesticAction
from warlords.domain.orders import AIContext, execute_ai_action, execute_ai_turns
from warlords.domain.state import StateDraft
from warlords.utils.rng import FixedRandom

XUCHANG = dm.CityID("xuchang")
LUOYANG = dm.CityID("luoyang")
SHOUCHUN = dm.CityID("shouchun")
WEI = dm.FactionID("wei")
SHU = dm.FactionID("shu")


def _context(world: dm.GameState, **rng_values) -> AIContext:
    return AIContext(draft=StateDraft(world), rng=FixedRandom(**rng_values))


def test_ai_recruit_applies_costs_and_flat_loyalty_penalty(world):
    world.cities[LUOYANG].resources.gold = 5_000
    context = _context(world)

    event = execute_ai_action(
        context, SHU, RecruitAction(city_id=LUOYANG, general_id=dm.GeneralID("liubei"))
    )

    assert event is not None
    assert event.data.action == DomesticAction.RECRUIT
    assert event.data.value == 1_245
    city = context.draft.cities[LUOYANG]
    assert city.resources.gold == 5_000 - 2_490
    assert city.resources.population == 200_000 - 1_245
    assert city.resources.loyalty == 67
    assert context.draft.generals[dm.GeneralID("liubei")].troops == 4_245


def test_ai_recruit_skipped_when_city_cannot_pay(world):
    context = _context(world)
    event = execute_ai_action(
        context, SHU, RecruitAction(city_id=LUOYANG, general_id=dm.GeneralID("liubei"))
    )
    assert event is None
    assert context.draft.touched == 0


def test_ai_develop_draws_bonus(world):
    context = _context(world, ints=[3])
    action = DevelopAction(
        city_id=SHOUCHUN, general_id=dm.GeneralID("sunjian"), target=DevelopTarget.COMMERCE
    )

    event = execute_ai_action(context, dm.FactionID("wu"), action)

    assert event is not None
    assert event.data.value == 15
    assert context.draft.cities[SHOUCHUN].resources.commerce == 215
    assert context.draft.cities[SHOUCHUN].resources.gold == 700


def test_ai_attack_win_captures_and_eliminates(world):
    context = _context(world, floats=[0.9])
    action = AttackAction(from_city=XUCHANG, to_city=LUOYANG, general_id=dm.GeneralID("xiahou"))

    event = execute_ai_action(context, WEI, action)

    assert event is not None
    assert event.data.result == BattleOutcome.WIN
    assert event.data.city_captured
    assert event.data.casualties == dm.Casualties(attacker=240, defender=360)

    draft = context.draft
    assert draft.cities[LUOYANG].faction == WEI
    assert draft.cities[LUOYANG].governor == "xiahou"
    assert draft.cities[XUCHANG].stationed_generals == ["caocao"]
    assert draft.generals[dm.GeneralID("xiahou")].troops == 5_760
    assert draft.generals[dm.GeneralID("xiahou")].current_city == LUOYANG
    assert draft.factions[SHU].cities == []
    assert LUOYANG in draft.factions[WEI].cities

    scattered = draft.generals[dm.GeneralID("liubei")]
    assert scattered.current_city is None
    assert scattered.troops == 0

    [capture] = context.captures
    assert capture.eliminated
    assert capture.relocated == {dm.GeneralID("liubei"): None}
    assert context.rng.exhausted


def test_ai_attack_loss_keeps_city(world):
    world.generals[dm.GeneralID("liubei")].troops = 30_000
    context = _context(world, floats=[0.9])
    action = AttackAction(from_city=XUCHANG, to_city=LUOYANG, general_id=dm.GeneralID("xiahou"))

    event = execute_ai_action(context, WEI, action)

    assert event.data.result == BattleOutcome.LOSE
    assert not event.data.city_captured
    assert event.data.casualties == dm.Casualties(attacker=720, defender=480)
    assert context.draft.cities[LUOYANG].faction == SHU
    assert context.draft.generals[dm.GeneralID("liubei")].troops == 29_520


def test_ai_attack_skipped_when_general_left(world):
    world.generals[dm.GeneralID("xiahou")].current_city = LUOYANG
    context = _context(world)
    action = AttackAction(from_city=XUCHANG, to_city=LUOYANG, general_id=dm.GeneralID("xiahou"))
    assert execute_ai_action(context, WEI, action) is None


def test_ai_turns_skip_player_and_count_skips(world):
    draft = StateDraft(world)

    result = execute_ai_turns(draft, WEI, FixedRandom(ints=[3]))

    # shu plans a recruit it cannot afford; wu develops commerce
    assert result.skipped == 1
    [event] = result.events
    assert event.data.city == SHOUCHUN
    assert draft.cities[XUCHANG] is world.cities[XUCHANG]
    assert result.eliminated == []


def test_ai_turns_skip_factions_without_cities(world):
    world.factions[SHU].cities = []
    result = execute_ai_turns(StateDraft(world), WEI, FixedRandom(ints=[3]))
    assert result.skipped == 0
    assert len(result.events) == 1


def test_capture_relocates_defenders_to_refuge(world):
    world.cities[SHOUCHUN].faction = SHU
    world.factions[SHU].cities.append(SHOUCHUN)
    world.factions[dm.FactionID("wu")].cities = []
    draft = StateDraft(world)

    result = capture_city(draft, WEI, XUCHANG, LUOYANG, dm.GeneralID("caocao"))

    assert not result.eliminated
    assert result.relocated == {dm.GeneralID("liubei"): SHOUCHUN}
    assert "liubei" in draft.cities[SHOUCHUN].stationed_generals
    assert draft.generals[dm.GeneralID("liubei")].troops == 3_000
    assert draft.cities[XUCHANG].governor is None
    assert draft.cities[LUOYANG].stationed_generals == ["caocao"]


def test_apply_losses_hits_commander_first(world):
    draft = StateDraft(world)

    removed = apply_losses(draft, XUCHANG, 9_000)

    assert removed == 9_000
    assert draft.generals[dm.GeneralID("xiahou")].troops == 0
    assert draft.generals[dm.GeneralID("caocao")].troops == 5_000


def test_apply_losses_capped_by_garrison(world):
    draft = StateDraft(world)
    assert apply_losses(draft, XUCHANG, 20_000) == 14_000
