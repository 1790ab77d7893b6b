"""Tests for the asynchronous turn orchestrator."""

from __future__ import annotations

import asyncio

import pytest

from warlords.domain import models as dm
from warlords.domain.enums import GamePhase
from warlords.interfaces.narrative import NarrativeContext
from warlords.services import TurnOrchestrator
from warlords.utils.rng import FixedRandom


def _rng() -> FixedRandom:
    # shu cannot afford its recruit; wu develops commerce with a roll of 3
    return FixedRandom(ints=[3])


class EchoNarrator:
    def __init__(self) -> None:
        self.phases: list[GamePhase] = []
        self.orchestrator: TurnOrchestrator | None = None

    async def generate_narrative(self, event: dm.GameEvent, context: NarrativeContext) -> str:
        if self.orchestrator is not None:
            self.phases.append(self.orchestrator.phase)
        return f"{context.city_name(event.data.city)} prospers"


class SlowNarrator:
    async def generate_narrative(self, event: dm.GameEvent, context: NarrativeContext) -> str:
        await asyncio.sleep(5)
        return "too late"


class BrokenNarrator:
    async def generate_narrative(self, event: dm.GameEvent, context: NarrativeContext) -> str:
        raise RuntimeError("narrator offline")


class GatedNarrator:
    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate_narrative(self, event: dm.GameEvent, context: NarrativeContext) -> str:
        self.started.set()
        await self.release.wait()
        return "done"


class RecordingSaver:
    def __init__(self, *, fail: bool = False) -> None:
        self.saved: list[dm.GameState] = []
        self.fail = fail

    def auto_save(self, state: dm.GameState) -> None:
        if self.fail:
            raise OSError("disk full")
        self.saved.append(state)


@pytest.mark.asyncio
async def test_end_turn_advances_calendar_and_restores_points(world):
    world.action_points = 0
    orchestrator = TurnOrchestrator()

    resolved = await orchestrator.end_player_turn(world, rng=_rng())

    assert resolved.current_date == dm.GameDate(year=190, month=2)
    assert resolved.action_points == 3
    assert resolved.phase == GamePhase.PLAYER
    assert len(resolved.event_log) == 1
    assert resolved.cities[dm.CityID("shouchun")].resources.commerce == 215
    assert resolved.cities[dm.CityID("xuchang")].resources.gold > 5_000

    report = orchestrator.last_report
    assert report is not None
    assert report.skipped_actions == 1
    assert report.eliminated == []
    assert report.narrated == 0

    assert world.current_date == dm.GameDate(year=190, month=1)
    assert world.event_log == []


@pytest.mark.asyncio
async def test_seeded_turns_are_reproducible(world):
    first = await TurnOrchestrator(rng_seed="fixed").end_player_turn(world)
    second = await TurnOrchestrator(rng_seed="fixed").end_player_turn(world)
    assert first == second


@pytest.mark.asyncio
async def test_narrative_attached_during_narrative_phase(world):
    narrator = EchoNarrator()
    orchestrator = TurnOrchestrator(narrator)
    narrator.orchestrator = orchestrator

    resolved = await orchestrator.end_player_turn(world, rng=_rng())

    assert resolved.event_log[0].narrative == "Shouchun prospers"
    assert narrator.phases == [GamePhase.NARRATIVE]
    assert orchestrator.last_report.narrated == 1
    assert orchestrator.phase == GamePhase.PLAYER


@pytest.mark.asyncio
async def test_slow_narrative_is_dropped(world):
    orchestrator = TurnOrchestrator(SlowNarrator(), narrative_timeout=0.01)

    resolved = await orchestrator.end_player_turn(world, rng=_rng())

    assert resolved.event_log[0].narrative is None
    assert resolved.current_date == dm.GameDate(year=190, month=2)


@pytest.mark.asyncio
async def test_failing_narrator_does_not_block_turn(world):
    orchestrator = TurnOrchestrator(BrokenNarrator())
    resolved = await orchestrator.end_player_turn(world, rng=_rng())
    assert resolved.event_log[0].narrative is None


@pytest.mark.asyncio
async def test_autosave_receives_resolved_state(world):
    saver = RecordingSaver()
    orchestrator = TurnOrchestrator(saver=saver)

    resolved = await orchestrator.end_player_turn(world, rng=_rng())
    await orchestrator.drain()

    assert saver.saved == [resolved]


@pytest.mark.asyncio
async def test_autosave_failure_is_swallowed(world):
    orchestrator = TurnOrchestrator(saver=RecordingSaver(fail=True))

    resolved = await orchestrator.end_player_turn(world, rng=_rng())
    await orchestrator.drain()

    assert resolved.current_date == dm.GameDate(year=190, month=2)


@pytest.mark.asyncio
async def test_second_end_turn_while_in_flight_is_ignored(world):
    narrator = GatedNarrator()
    orchestrator = TurnOrchestrator(narrator)

    first = asyncio.create_task(orchestrator.end_player_turn(world, rng=_rng()))
    await narrator.started.wait()
    assert orchestrator.in_flight

    ignored = await orchestrator.end_player_turn(world, rng=_rng())
    assert ignored is world

    narrator.release.set()
    resolved = await first
    assert resolved.current_date == dm.GameDate(year=190, month=2)
    assert not orchestrator.in_flight
