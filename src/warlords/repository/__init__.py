"""Persistence adapters for Warlords games."""

from warlords.repository.json_store import JsonGameRepository, SaveSlotInfo

__all__ = ["JsonGameRepository", "SaveSlotInfo"]
