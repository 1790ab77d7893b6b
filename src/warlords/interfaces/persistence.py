"""Persistence Protocol Interface."""

from __future__ import annotations

from typing import Protocol

from warlords.domain.models import GameState


class AutoSaver(Protocol):
    """Protocol for the fire-and-forget autosave performed after every turn."""

    def auto_save(self, state: GameState) -> None:
        """Persist ``state`` to the autosave slot.

        Args:
            state: Game state at the start of the next player phase
        """
        ...
