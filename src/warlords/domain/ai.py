"""Faction AI: threat evaluation, target scoring and turn planning.

Every function here is a pure read of the state; execution of the planned
actions lives in :mod:`warlords.domain.orders`.
"""

from __future__ import annotations

from dataclasses import dataclass

from warlords.domain.battle import attack_power, defense_power, power_ratio
from warlords.domain.enums import AIActionType, DevelopTarget
from warlords.domain.models import City, CityID, Faction, FactionID, GeneralID
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import (
    StateView,
    best_politics_general,
    city_troops,
    get_city,
    get_faction,
    strongest_general,
)

NEIGHBOR_DISTANCE = 1


@dataclass(frozen=True, slots=True)
class ThreatInfo:
    """A hostile neighbouring city and how dangerous it looks."""

    city_id: CityID
    faction_id: FactionID
    troops: int
    distance: int
    threat_score: float


@dataclass(frozen=True, slots=True)
class AttackTargetEvaluation:
    """Scoring of a potential attack from one city against a neighbour."""

    from_city_id: CityID
    target_city_id: CityID
    attack_power: float
    defense_power: float
    success_probability: float
    strategic_value: float
    score: float


@dataclass(frozen=True, slots=True)
class RecruitAction:
    city_id: CityID
    general_id: GeneralID
    type: AIActionType = AIActionType.RECRUIT


@dataclass(frozen=True, slots=True)
class DevelopAction:
    city_id: CityID
    general_id: GeneralID
    target: DevelopTarget
    type: AIActionType = AIActionType.DEVELOP


@dataclass(frozen=True, slots=True)
class AttackAction:
    from_city: CityID
    to_city: CityID
    general_id: GeneralID
    type: AIActionType = AIActionType.ATTACK


AIAction = RecruitAction | DevelopAction | AttackAction


def evaluate_threat(
    state: StateView, city_id: CityID, *, rules: RulesConfig = DEFAULT_RULES
) -> list[ThreatInfo]:
    """Rank hostile neighbours of a city, most threatening first.

    A neighbour counts when another faction owns it, the city owner's own
    diplomacy marks that faction hostile, and it holds troops.
    """

    ai = rules.ai
    city = get_city(state, city_id)
    owner = get_faction(state, city.faction)

    threats: list[ThreatInfo] = []
    for neighbor_id in city.connected_cities:
        neighbor = get_city(state, neighbor_id)
        if neighbor.faction == city.faction:
            continue
        if not owner.is_hostile_to(neighbor.faction):
            continue
        troops = city_troops(state, neighbor_id)
        if troops <= 0:
            continue
        threats.append(
            ThreatInfo(
                city_id=neighbor_id,
                faction_id=neighbor.faction,
                troops=troops,
                distance=NEIGHBOR_DISTANCE,
                threat_score=troops / 1000 * ai.threat_troops_weight
                + ai.threat_distance_weight,
            )
        )

    threats.sort(key=lambda threat: threat.threat_score, reverse=True)
    return threats


def should_recruit(
    state: StateView, city_id: CityID, *, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    """A city recruits when it is thin on troops or outnumbered by its threats."""

    ai = rules.ai
    troops = city_troops(state, city_id)
    if troops < ai.recruit_troop_threshold:
        return True
    threat_troops = sum(threat.troops for threat in evaluate_threat(state, city_id, rules=rules))
    return threat_troops > troops * ai.recruit_threat_ratio


def strategic_value(city: City, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    ai = rules.ai
    return (
        ai.scale_score(city.scale) * ai.strategic_scale_weight
        + city.resources.commerce / ai.strategic_development_divisor
        + city.resources.agriculture / ai.strategic_development_divisor
    )


def evaluate_attack_target(
    state: StateView,
    from_city_id: CityID,
    target_city_id: CityID,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> AttackTargetEvaluation:
    """Score an attack using both cities' strongest generals and total troops."""

    ai = rules.ai
    target = get_city(state, target_city_id)

    attacker = strongest_general(state, from_city_id, rules=rules)
    attack = 0.0
    if attacker is not None:
        attack = attack_power(
            city_troops(state, from_city_id),
            attacker.attributes.war,
            attacker.attributes.lead,
            rules=rules,
        )

    defender = strongest_general(state, target_city_id, rules=rules)
    if defender is not None:
        defense = defense_power(
            city_troops(state, target_city_id),
            defender.attributes.lead,
            defender.attributes.intel,
            target.resources.defense,
            rules=rules,
        )
    else:
        defense = float(target.resources.defense)

    ratio = power_ratio(attack, defense, rules=rules)
    probability = min(ai.max_success_probability, max(ai.min_success_probability, ratio / 2))
    value = strategic_value(target, rules=rules)
    return AttackTargetEvaluation(
        from_city_id=from_city_id,
        target_city_id=target_city_id,
        attack_power=attack,
        defense_power=defense,
        success_probability=probability,
        strategic_value=value,
        score=probability * value,
    )


def should_attack(
    state: StateView,
    faction_id: FactionID,
    target_city_id: CityID,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> bool:
    """True when any adjacent owned city can attack the hostile target with good odds."""

    faction = state.factions.get(faction_id)
    target = state.cities.get(target_city_id)
    if faction is None or target is None:
        return False
    if not faction.is_hostile_to(target.faction):
        return False

    for city_id in faction.cities:
        city = state.cities.get(city_id)
        if city is None or target_city_id not in city.connected_cities:
            continue
        evaluation = evaluate_attack_target(state, city_id, target_city_id, rules=rules)
        if evaluation.success_probability >= rules.ai.min_attack_success:
            return True
    return False


def find_best_attack_target(
    state: StateView,
    from_city_id: CityID,
    faction: Faction,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> AttackTargetEvaluation | None:
    """Best-scoring hostile neighbour with enough success probability."""

    best: AttackTargetEvaluation | None = None
    for neighbor_id in get_city(state, from_city_id).connected_cities:
        neighbor = get_city(state, neighbor_id)
        if not faction.is_hostile_to(neighbor.faction):
            continue
        evaluation = evaluate_attack_target(state, from_city_id, neighbor_id, rules=rules)
        if evaluation.success_probability < rules.ai.min_attack_success:
            continue
        if best is None or evaluation.score > best.score:
            best = evaluation
    return best


def make_decision(
    state: StateView, faction_id: FactionID, *, rules: RulesConfig = DEFAULT_RULES
) -> list[AIAction]:
    """Plan one turn of actions for a faction.

    Cities are visited in the faction's ``cities`` order with a shared
    action point budget.  Each city gets at most one action with the
    priority recruit, then attack, then develop.
    """

    ai = rules.ai
    faction = state.factions.get(faction_id)
    if faction is None:
        return []

    actions: list[AIAction] = []
    remaining = ai.action_points

    for city_id in faction.cities:
        if remaining <= 0:
            break
        city = get_city(state, city_id)
        resources = city.resources

        if remaining >= ai.recruit_cost and should_recruit(state, city_id, rules=rules):
            recruiter = best_politics_general(state, city_id)
            if (
                recruiter is not None
                and resources.gold >= ai.min_recruit_gold
                and resources.population >= ai.min_recruit_population
            ):
                actions.append(RecruitAction(city_id=city_id, general_id=recruiter.id))
                remaining -= ai.recruit_cost
                continue

        if remaining >= ai.attack_cost:
            target = find_best_attack_target(state, city_id, faction, rules=rules)
            if target is not None:
                attacker = strongest_general(state, city_id, rules=rules)
                if attacker is not None and attacker.troops >= ai.min_attack_troops:
                    actions.append(
                        AttackAction(
                            from_city=city_id,
                            to_city=target.target_city_id,
                            general_id=attacker.id,
                        )
                    )
                    remaining -= ai.attack_cost
                    continue

        if remaining >= ai.develop_cost and resources.gold >= ai.min_develop_gold:
            developer = best_politics_general(state, city_id)
            if developer is not None:
                target_stat = (
                    DevelopTarget.COMMERCE
                    if resources.commerce < resources.agriculture
                    else DevelopTarget.AGRICULTURE
                )
                actions.append(
                    DevelopAction(city_id=city_id, general_id=developer.id, target=target_stat)
                )
                remaining -= ai.develop_cost

    return actions
