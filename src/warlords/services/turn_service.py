"""Turn orchestration: everything that happens when the player ends a turn."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace

from warlords.domain.enums import GamePhase
from warlords.domain.models import CityID, FactionID, GameEvent, GameState
from warlords.domain.orders import execute_ai_turns
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import StateDraft
from warlords.domain.turn import MonthAdvance, process_turn_end, restore_action_points
from warlords.interfaces.narrative import NarrativeContext, NarrativeService
from warlords.interfaces.persistence import AutoSaver
from warlords.utils.rng import RandomSource, generate_seed, seeded_random

logger = logging.getLogger(__name__)

DEFAULT_NARRATIVE_TIMEOUT_SECONDS = 10.0


@dataclass(slots=True)
class TurnReport:
    """Summary of the most recently resolved turn."""

    events: list[GameEvent]
    month: MonthAdvance
    gold_income: dict[CityID, int] = field(default_factory=dict)
    grain_income: dict[CityID, int] = field(default_factory=dict)
    eliminated: list[FactionID] = field(default_factory=list)
    skipped_actions: int = 0
    narrated: int = 0


class TurnOrchestrator:
    """Resolve the computer factions' turns and roll the calendar forward.

    The sequence is: AI planning and execution on a private working copy,
    turn-end calendar processing, best-effort narrative per event, a
    fire-and-forget autosave and finally the action point restore with the
    phase back at ``player``.  Only one turn end may be in flight at a time.
    """

    def __init__(
        self,
        narrator: NarrativeService | None = None,
        saver: AutoSaver | None = None,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        narrative_timeout: float = DEFAULT_NARRATIVE_TIMEOUT_SECONDS,
        rng_seed: str | None = None,
    ) -> None:
        self._narrator = narrator
        self._saver = saver
        self._rules = rules
        self._narrative_timeout = narrative_timeout
        self._rng_seed = rng_seed
        self._in_flight = False
        self._phase = GamePhase.PLAYER
        self._pending_saves: set[asyncio.Task[None]] = set()
        self._save_lock = asyncio.Lock()
        self.last_report: TurnReport | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def phase(self) -> GamePhase:
        """Phase of the turn currently being resolved (``player`` when idle)."""

        return self._phase

    async def end_player_turn(
        self, state: GameState, *, rng: RandomSource | None = None
    ) -> GameState:
        """Resolve the end of the player's turn and return the next turn's state.

        A call made while another is still running is ignored: the input
        state is returned unchanged.
        """

        if self._in_flight:
            logger.warning(
                "Turn end already in progress; ignoring request for game %s", state.game_id
            )
            return state

        self._in_flight = True
        try:
            return await self._resolve(state, rng or self._rng_for(state))
        finally:
            self._in_flight = False
            self._phase = GamePhase.PLAYER

    async def drain(self) -> None:
        """Wait for outstanding autosaves to finish."""

        if self._pending_saves:
            await asyncio.gather(*self._pending_saves, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers

    def _rng_for(self, state: GameState) -> RandomSource:
        prefix = self._rng_seed or state.game_id
        date = state.current_date
        return seeded_random(generate_seed(prefix, date.year, date.month, "turn_end"))

    async def _resolve(self, state: GameState, rng: RandomSource) -> GameState:
        self._enter(GamePhase.CALCULATION, state)
        draft = StateDraft(state)
        ai_result = execute_ai_turns(draft, state.current_faction, rng, rules=self._rules)
        turn_end = process_turn_end(draft, rules=self._rules)
        for faction_id in ai_result.eliminated:
            logger.info("Faction %s lost its last city", faction_id)

        self._enter(GamePhase.NARRATIVE, state)
        calculated = draft.commit(phase=GamePhase.NARRATIVE)
        events, narrated = await self._narrate(calculated, draft.events)

        resolved = replace(
            calculated,
            event_log=[*state.event_log, *events],
            action_points=restore_action_points(rules=self._rules),
            phase=GamePhase.PLAYER,
        )
        self._schedule_autosave(resolved)

        self.last_report = TurnReport(
            events=events,
            month=turn_end.month,
            gold_income=turn_end.gold_income,
            grain_income=turn_end.grain_income,
            eliminated=ai_result.eliminated,
            skipped_actions=ai_result.skipped,
            narrated=narrated,
        )
        logger.info(
            "Game %s advanced to %d-%02d with %d new event(s)",
            state.game_id,
            resolved.current_date.year,
            resolved.current_date.month,
            len(events),
        )
        return resolved

    def _enter(self, phase: GamePhase, state: GameState) -> None:
        self._phase = phase
        logger.info("Game %s entering %s phase", state.game_id, phase)

    async def _narrate(
        self, state: GameState, events: list[GameEvent]
    ) -> tuple[list[GameEvent], int]:
        if self._narrator is None or not events:
            return list(events), 0

        context = NarrativeContext(state=state)
        narrated: list[GameEvent] = []
        count = 0
        for event in events:
            try:
                text = await asyncio.wait_for(
                    self._narrator.generate_narrative(event, context),
                    timeout=self._narrative_timeout,
                )
            except Exception as exc:
                logger.warning("Narrative for event %s failed: %r", event.id, exc)
                narrated.append(event)
                continue
            narrated.append(replace(event, narrative=text))
            count += 1
        return narrated, count

    def _schedule_autosave(self, state: GameState) -> None:
        if self._saver is None:
            return
        task = asyncio.create_task(self._autosave(self._saver, state))
        self._pending_saves.add(task)
        task.add_done_callback(self._autosave_finished)

    async def _autosave(self, saver: AutoSaver, state: GameState) -> None:
        # saves are written in the order the turns resolved
        async with self._save_lock:
            await asyncio.to_thread(saver.auto_save, state)

    def _autosave_finished(self, task: asyncio.Task[None]) -> None:
        self._pending_saves.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Autosave failed: %r", exc)
