"""Battle resolution rules."""

from __future__ import annotations

import math
from dataclasses import dataclass

from warlords.domain.enums import BattleOutcome
from warlords.domain.models import GeneralID
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.utils.rng import RandomSource


@dataclass(slots=True)
class DamageResult:
    """Damage after the high-leadership reduction was considered."""

    base_damage: int
    final_damage: int
    damage_reduced: bool


@dataclass(slots=True)
class DuelResult:
    """Outcome of the duel / instant-kill check of a single combat."""

    triggered: bool
    instant_kill: bool = False
    winner: GeneralID | None = None
    loser: GeneralID | None = None


@dataclass(slots=True)
class CasualtyResult:
    attacker_losses: int
    defender_losses: int


def attack_power(
    troops: int, war: int, lead: int, *, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """Offensive strength of ``troops`` led by a general."""

    battle = rules.battle
    return troops * (war * battle.attack_war_weight + lead * battle.attack_lead_weight) / 100


def defense_power(
    troops: int,
    lead: int,
    intel: int,
    city_defense: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> float:
    """Defensive strength of ``troops`` behind walls of ``city_defense``."""

    battle = rules.battle
    return (
        troops * (lead * battle.defense_lead_weight + intel * battle.defense_int_weight) / 100
        + city_defense
    )


def general_strength(war: int, lead: int, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Score used to pick a side's commanding general."""

    battle = rules.battle
    return war * battle.attack_war_weight + lead * battle.attack_lead_weight


def damage(
    attack: float,
    defense: float,
    factor: float,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Damage dealt by ``attack`` against ``defense`` with a random factor.

    Defense is floored at 1 to avoid a division by zero.
    """

    battle = rules.battle
    if not battle.damage_factor_min <= factor <= battle.damage_factor_max:
        raise ValueError(
            f"damage factor must be within "
            f"{battle.damage_factor_min}-{battle.damage_factor_max}, got {factor}"
        )
    ratio = attack / max(1.0, defense)
    return max(0, math.floor(ratio * battle.damage_multiplier * factor))


def roll_damage_factor(rng: RandomSource, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    battle = rules.battle
    return rng.uniform(battle.damage_factor_min, battle.damage_factor_max)


def apply_high_lead_reduction(
    base_damage: int, defender_lead: int, *, rules: RulesConfig = DEFAULT_RULES
) -> DamageResult:
    """Reduce damage taken by a defender with outstanding leadership."""

    battle = rules.battle
    if defender_lead >= battle.high_lead_threshold:
        return DamageResult(
            base_damage=base_damage,
            final_damage=math.floor(base_damage * battle.high_lead_multiplier),
            damage_reduced=True,
        )
    return DamageResult(base_damage=base_damage, final_damage=base_damage, damage_reduced=False)


def check_duel(
    attacker_war: int, defender_war: int, roll: float, *, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    """True when closely matched generals end up duelling."""

    battle = rules.battle
    return abs(attacker_war - defender_war) <= battle.duel_war_gap and roll < battle.duel_chance


def check_instant_kill(
    attacker_war: int, defender_war: int, roll: float, *, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    """True when a much stronger warrior cuts down the other outright."""

    battle = rules.battle
    return (
        abs(attacker_war - defender_war) > battle.instant_kill_war_gap
        and roll < battle.instant_kill_chance
    )


def determine_duel_winner(
    attacker_war: int,
    defender_war: int,
    attacker_id: GeneralID,
    defender_id: GeneralID,
    tie_roll: float,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> GeneralID:
    if attacker_war > defender_war:
        return attacker_id
    if defender_war > attacker_war:
        return defender_id
    return attacker_id if tie_roll < rules.battle.duel_tie_attacker_chance else defender_id


def determine_instant_kill_victim(
    attacker_war: int,
    defender_war: int,
    attacker_id: GeneralID,
    defender_id: GeneralID,
) -> GeneralID:
    """The combatant with the lower war attribute is always the victim."""

    return attacker_id if attacker_war < defender_war else defender_id


def resolve_duel(
    attacker_war: int,
    defender_war: int,
    attacker_id: GeneralID,
    defender_id: GeneralID,
    *,
    kill_roll: float,
    duel_roll: float,
    tie_roll: float,
    rules: RulesConfig = DEFAULT_RULES,
) -> DuelResult:
    """Resolve at most one of instant kill, duel or nothing.

    The instant-kill check runs first.
    """

    if check_instant_kill(attacker_war, defender_war, kill_roll, rules=rules):
        victim = determine_instant_kill_victim(
            attacker_war, defender_war, attacker_id, defender_id
        )
        winner = defender_id if victim == attacker_id else attacker_id
        return DuelResult(triggered=True, instant_kill=True, winner=winner, loser=victim)

    if check_duel(attacker_war, defender_war, duel_roll, rules=rules):
        winner = determine_duel_winner(
            attacker_war, defender_war, attacker_id, defender_id, tie_roll, rules=rules
        )
        loser = defender_id if winner == attacker_id else attacker_id
        return DuelResult(triggered=True, winner=winner, loser=loser)

    return DuelResult(triggered=False)


def roll_duel(
    attacker_war: int,
    defender_war: int,
    attacker_id: GeneralID,
    defender_id: GeneralID,
    rng: RandomSource,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> DuelResult:
    """Draw the three independent rolls and resolve the duel check."""

    return resolve_duel(
        attacker_war,
        defender_war,
        attacker_id,
        defender_id,
        kill_roll=rng.random(),
        duel_roll=rng.random(),
        tie_roll=rng.random(),
        rules=rules,
    )


def classify_outcome(
    ratio: float, coin_roll: float, *, rules: RulesConfig = DEFAULT_RULES
) -> BattleOutcome:
    """Classify a battle by attack/defense ratio; close fights are a coin flip."""

    battle = rules.battle
    if ratio > battle.decisive_win_ratio:
        return BattleOutcome.WIN
    if ratio < battle.decisive_loss_ratio:
        return BattleOutcome.LOSE
    return BattleOutcome.WIN if coin_roll > battle.coin_flip_threshold else BattleOutcome.LOSE


def power_ratio(attack: float, defense: float, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    if defense <= 0:
        return rules.battle.undefended_power_ratio
    return attack / defense


def simplified_casualties(
    attacker_troops: int,
    defender_troops: int,
    outcome: BattleOutcome,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> CasualtyResult:
    """Casualties of a quick battle; the loser bleeds more than the winner."""

    battle = rules.battle
    base = math.floor(min(attacker_troops, defender_troops) * battle.casualty_rate)
    winner_losses = math.floor(base * battle.winner_casualty_factor)
    loser_losses = math.floor(base * battle.loser_casualty_factor)
    if outcome == BattleOutcome.WIN:
        return CasualtyResult(attacker_losses=winner_losses, defender_losses=loser_losses)
    return CasualtyResult(attacker_losses=loser_losses, defender_losses=winner_losses)
