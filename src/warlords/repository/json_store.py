"""JSON-based repository for Warlords games."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from pydantic import TypeAdapter

from warlords.domain import models as dm

logger = logging.getLogger(__name__)

MAX_SAVE_SLOTS = 10
AUTOSAVE_NAME = "autosave.json"
_GAME_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True, slots=True)
class SaveSlotInfo:
    """Summary of an occupied manual save slot."""

    slot: int
    game_id: str
    current_date: dm.GameDate
    current_faction: dm.FactionID
    saved_at: datetime


class JsonGameRepository:
    """Persist game states as JSON snapshots on disk.

    Three kinds of snapshot live under ``base_path``: games keyed by id
    (``game_<id>.json``), a single autosave and numbered manual save slots
    (``slot_<n>.json``, 0-9).
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[dm.GameState] = TypeAdapter(dm.GameState)

    # --- games keyed by id -------------------------------------------------

    def _path_for(self, game_id: str) -> Path:
        if not _GAME_ID_PATTERN.match(game_id):
            raise ValueError(f"invalid game id: {game_id!r}")
        return self.base_path / f"game_{game_id}.json"

    def save_game(self, state: dm.GameState) -> Path:
        """Serialize a game to disk and return the snapshot path."""

        path = self._path_for(state.game_id)
        path.write_bytes(self._adapter.dump_json(state, indent=2))
        return path

    def load_game(self, game_id: str) -> dm.GameState:
        """Load a previously saved game; raises ``FileNotFoundError`` when absent."""

        return self._adapter.validate_json(self._path_for(game_id).read_bytes())

    def list_games(self) -> list[str]:
        """Return all game ids currently persisted in the repository."""

        prefix = "game_"
        suffix = ".json"
        return sorted(
            path.name[len(prefix) : -len(suffix)]
            for path in self.base_path.glob("game_*.json")
        )

    def delete_game(self, game_id: str) -> None:
        path = self._path_for(game_id)
        if path.exists():
            path.unlink()

    # --- autosave ------------------------------------------------------------

    def auto_save(self, state: dm.GameState) -> None:
        """Overwrite the autosave snapshot."""

        path = self.base_path / AUTOSAVE_NAME
        path.write_bytes(self._adapter.dump_json(state, indent=2))
        logger.debug("Autosaved game %s at %s", state.game_id, state.current_date)

    def load_auto_save(self) -> dm.GameState | None:
        path = self.base_path / AUTOSAVE_NAME
        if not path.exists():
            return None
        return self._adapter.validate_json(path.read_bytes())

    def clear_auto_save(self) -> None:
        path = self.base_path / AUTOSAVE_NAME
        if path.exists():
            path.unlink()

    # --- manual slots ----------------------------------------------------------

    def _slot_path(self, slot: int) -> Path:
        if not 0 <= slot < MAX_SAVE_SLOTS:
            raise ValueError(f"save slot must be within 0-{MAX_SAVE_SLOTS - 1}, got {slot}")
        return self.base_path / f"slot_{slot}.json"

    def save_slot(self, slot: int, state: dm.GameState) -> Path:
        """Write ``state`` into a manual save slot, replacing its content."""

        path = self._slot_path(slot)
        path.write_bytes(self._adapter.dump_json(state, indent=2))
        return path

    def load_slot(self, slot: int) -> dm.GameState:
        """Load a manual save slot; raises ``FileNotFoundError`` when empty."""

        return self._adapter.validate_json(self._slot_path(slot).read_bytes())

    def delete_slot(self, slot: int) -> None:
        path = self._slot_path(slot)
        if path.exists():
            path.unlink()

    def list_slots(self) -> list[SaveSlotInfo]:
        """Describe every occupied slot in slot order."""

        slots: list[SaveSlotInfo] = []
        for slot in range(MAX_SAVE_SLOTS):
            path = self._slot_path(slot)
            if not path.exists():
                continue
            state = self._adapter.validate_json(path.read_bytes())
            slots.append(
                SaveSlotInfo(
                    slot=slot,
                    game_id=state.game_id,
                    current_date=state.current_date,
                    current_faction=state.current_faction,
                    saved_at=datetime.fromtimestamp(path.stat().st_mtime, tz=UTC),
                )
            )
        return slots
