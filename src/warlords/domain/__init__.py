"""Domain model and rules of the Warlords simulation kernel.

This package exposes:

* Dataclasses describing every game entity (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions for the economy, combat, the calendar and the AI.

Everything operates purely in-memory; persistence goes through a thin
repository adapter.
"""

from . import (
    ai,
    battle,
    commands,
    conquest,
    economy,
    enums,
    events,
    models,
    orders,
    rules_config,
    scenario,
    state,
    turn,
)

__all__ = [
    "ai",
    "battle",
    "commands",
    "conquest",
    "economy",
    "enums",
    "events",
    "models",
    "orders",
    "rules_config",
    "scenario",
    "state",
    "turn",
]
