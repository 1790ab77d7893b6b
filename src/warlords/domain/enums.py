"""Enumerations used across the Warlords domain."""

from __future__ import annotations

from enum import StrEnum


class CityScale(StrEnum):
    """City size tier; drives strategic value scoring."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class DiplomacyStatus(StrEnum):
    """Stance of one faction toward another."""

    HOSTILE = "hostile"
    NEUTRAL = "neutral"
    ALLY = "ally"


class GamePhase(StrEnum):
    """Turn phases; cycles player -> calculation -> narrative -> player."""

    PLAYER = "player"
    CALCULATION = "calculation"
    NARRATIVE = "narrative"


class EventType(StrEnum):
    """Kinds of entries in the event log."""

    BATTLE = "battle"
    DOMESTIC = "domestic"
    DISASTER = "disaster"
    GENERAL = "general"


class ActionType(StrEnum):
    """Action categories that consume action points."""

    DOMESTIC = "domestic"
    MOVEMENT = "movement"
    CAMPAIGN = "campaign"


class DomesticAction(StrEnum):
    """Concrete domestic actions recorded on domestic events."""

    DEVELOP_COMMERCE = "develop_commerce"
    DEVELOP_AGRICULTURE = "develop_agriculture"
    RECRUIT = "recruit"


class DevelopTarget(StrEnum):
    """City statistic raised by a develop action."""

    COMMERCE = "commerce"
    AGRICULTURE = "agriculture"


class AIActionType(StrEnum):
    """Actions the faction AI can queue."""

    RECRUIT = "recruit"
    DEVELOP = "develop"
    ATTACK = "attack"


class BattleOutcome(StrEnum):
    """Result of a battle from the attacker's point of view."""

    WIN = "win"
    LOSE = "lose"


class GeneralEventKind(StrEnum):
    """Life events recorded for generals."""

    MOVED = "moved"


class FailureReason(StrEnum):
    """Recoverable failure reasons returned by rule functions."""

    INSUFFICIENT_GOLD = "insufficient_gold"
    INSUFFICIENT_POPULATION = "insufficient_population"
    INSUFFICIENT_ACTION_POINTS = "insufficient_action_points"
    INVALID_REFERENCE = "invalid_reference"
    INVALID_TARGET = "invalid_target"
