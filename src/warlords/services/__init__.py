"""Application services built on the domain layer."""

from warlords.services.turn_service import TurnOrchestrator, TurnReport

__all__ = ["TurnOrchestrator", "TurnReport"]
