"""Runtime primitives backing the Warlords HTTP API."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from contextlib import suppress

from warlords.config import Settings, get_settings
from warlords.domain import models as dm
from warlords.domain.commands import CommandResult
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.scenario import build_game_state, load_scenario_190, validate_state
from warlords.repository import JsonGameRepository
from warlords.services import TurnOrchestrator, TurnReport
from warlords.utils.rng import RandomSource, generate_seed, seeded_random

logger = logging.getLogger(__name__)


class TurnInProgressError(RuntimeError):
    """Raised when a game is touched while its turn end is still resolving."""


class GameService:
    """Utilities for loading, creating and persisting games."""

    def __init__(
        self,
        repository: JsonGameRepository,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        rng_seed: str | None = None,
    ) -> None:
        self._repository = repository
        self._rules = rules
        self._rng_seed = rng_seed

    def list_games(self) -> list[dm.GameState]:
        """Return every persisted game ordered by identifier."""

        games: list[dm.GameState] = []
        for game_id in self._repository.list_games():
            with suppress(FileNotFoundError):
                games.append(self._repository.load_game(game_id))
        return games

    def get_game(self, game_id: str) -> dm.GameState:
        """Load a single game or raise ``FileNotFoundError``."""

        return self._repository.load_game(game_id)

    def save_game(self, state: dm.GameState) -> dm.GameState:
        self._repository.save_game(state)
        return state

    def create_game(self, player_faction: str | None = None) -> dm.GameState:
        """Start a new game from the 190 scenario and persist it.

        Raises:
            ValueError: If ``player_faction`` is not a scenario faction
        """

        scenario = load_scenario_190()
        faction = dm.FactionID(player_faction) if player_faction else None
        state = build_game_state(
            scenario, faction, game_id=uuid.uuid4().hex[:12], rules=self._rules
        )
        report = validate_state(state)
        for error in report.errors:
            logger.warning("Scenario %s: %s", scenario.name, error)
        logger.info("Created game %s for faction %s", state.game_id, state.current_faction)
        return self.save_game(state)

    def command_rng(self, state: dm.GameState) -> RandomSource:
        """Deterministic randomness for the next command issued in ``state``."""

        prefix = self._rng_seed or state.game_id
        date = state.current_date
        context = f"command-{len(state.event_log)}"
        return seeded_random(generate_seed(prefix, date.year, date.month, context))


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self, *, settings: Settings | None = None, rules: RulesConfig = DEFAULT_RULES
    ) -> None:
        self.settings = settings or get_settings()
        self.repository = JsonGameRepository(self.settings.data_dir)
        self.rules = rules
        self.games = GameService(
            self.repository, rules=rules, rng_seed=self.settings.rng_seed
        )
        self._orchestrators: dict[str, TurnOrchestrator] = {}

    def orchestrator_for(self, game_id: str) -> TurnOrchestrator:
        orchestrator = self._orchestrators.get(game_id)
        if orchestrator is None:
            orchestrator = TurnOrchestrator(
                saver=self.repository if self.settings.autosave_enabled else None,
                rules=self.rules,
                narrative_timeout=self.settings.narrative_timeout_seconds,
                rng_seed=self.settings.rng_seed,
            )
            self._orchestrators[game_id] = orchestrator
        return orchestrator

    def run_command(
        self,
        game_id: str,
        command: Callable[[dm.GameState, RandomSource], CommandResult],
    ) -> CommandResult:
        """Apply a player command to a stored game, persisting it on success."""

        self._ensure_idle(game_id)
        state = self.games.get_game(game_id)
        result = command(state, self.games.command_rng(state))
        if result.success:
            self.games.save_game(result.state)
        else:
            logger.info("Command rejected for game %s: %s", game_id, result.error)
        return result

    async def end_turn(self, game_id: str) -> tuple[dm.GameState, TurnReport | None]:
        """Resolve the end of the player's turn for a stored game."""

        self._ensure_idle(game_id)
        state = self.games.get_game(game_id)
        orchestrator = self.orchestrator_for(game_id)
        resolved = await orchestrator.end_player_turn(state)
        self.games.save_game(resolved)
        return resolved, orchestrator.last_report

    def _ensure_idle(self, game_id: str) -> None:
        orchestrator = self._orchestrators.get(game_id)
        if orchestrator is not None and orchestrator.in_flight:
            raise TurnInProgressError(f"turn end in progress for game {game_id}")

    async def shutdown(self) -> None:
        for orchestrator in self._orchestrators.values():
            await orchestrator.drain()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
