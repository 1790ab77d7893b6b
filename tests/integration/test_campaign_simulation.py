"""Run the 190 scenario for two in-game years and check world consistency."""

from __future__ import annotations

import pytest

from warlords.domain import models as dm
from warlords.domain.enums import GamePhase
from warlords.domain.scenario import build_game_state, load_scenario_190, validate_state
from warlords.repository import JsonGameRepository
from warlords.services import TurnOrchestrator


@pytest.mark.asyncio
async def test_two_years_of_ai_play_keep_the_world_consistent(tmp_path):
    repository = JsonGameRepository(tmp_path)
    orchestrator = TurnOrchestrator(saver=repository, rng_seed="simulation")
    state = build_game_state(load_scenario_190(), game_id="sim")
    starting_age = state.generals[dm.GeneralID("caocao")].age

    for _ in range(24):
        state = await orchestrator.end_player_turn(state)
        assert state.phase == GamePhase.PLAYER
        assert state.action_points == 3

        report = validate_state(state)
        assert report.valid, report.errors
        for city in state.cities.values():
            assert city.resources.gold >= 0
            assert city.resources.population >= 0
            assert 0 <= city.resources.loyalty <= 100
        for general in state.generals.values():
            assert general.troops >= 0

    await orchestrator.drain()

    assert state.current_date == dm.GameDate(year=192, month=1)
    assert state.generals[dm.GeneralID("caocao")].age == starting_age + 2
    ids = [event.id for event in state.event_log]
    assert ids == [f"evt-{n:05d}" for n in range(1, len(ids) + 1)]
    assert repository.load_auto_save() == state


@pytest.mark.asyncio
async def test_same_seed_replays_identically():
    scenario = load_scenario_190()
    results = []
    for _ in range(2):
        orchestrator = TurnOrchestrator(rng_seed="replay")
        state = build_game_state(scenario, game_id="replay")
        for _ in range(6):
            state = await orchestrator.end_player_turn(state)
        results.append(state)

    assert results[0] == results[1]
