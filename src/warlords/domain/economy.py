"""Domestic economy rules: income, grain, development and recruitment."""

from __future__ import annotations

import math
from dataclasses import dataclass

from warlords.domain.enums import FailureReason
from warlords.domain.models import CityResources
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.utils.rng import RandomSource


@dataclass(slots=True)
class DevelopmentResult:
    """Outcome of spending gold to raise commerce or agriculture."""

    success: bool
    gold_spent: int
    value_increase: int
    new_value: int
    error: FailureReason | None = None


@dataclass(slots=True)
class RecruitmentResult:
    """Outcome of recruiting soldiers from a city's population."""

    success: bool
    soldiers: int = 0
    gold_spent: int = 0
    population_spent: int = 0
    loyalty_decrease: int = 0
    error: FailureReason | None = None


def politics_bonus(governor_pol: int | None, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Return the income multiplier granted by a governor's politics."""

    base = rules.economy.base_politics_bonus
    if governor_pol is None:
        return base
    return governor_pol / 100 + base


def monthly_income(
    commerce: int,
    population: int,
    governor_pol: int | None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Gold produced by a city each month.

    Examples:
        >>> monthly_income(500, 300_000, 30)
        840
    """

    economy = rules.economy
    raw = (
        commerce * economy.income_commerce_multiplier
        + population / economy.income_population_divisor
    )
    return math.floor(raw * politics_bonus(governor_pol, rules=rules))


def yearly_grain(
    agriculture: int,
    population: int,
    governor_pol: int | None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Grain harvested by a city once a year."""

    economy = rules.economy
    raw = (
        agriculture * economy.grain_agriculture_multiplier
        + population / economy.grain_population_divisor
    )
    return math.floor(raw * politics_bonus(governor_pol, rules=rules))


def development_increase(
    executor_pol: int, roll: int, *, rules: RulesConfig = DEFAULT_RULES
) -> int:
    """Points gained by one develop action given the executor's politics."""

    economy = rules.economy
    if not economy.development_roll_min <= roll <= economy.development_roll_max:
        raise ValueError(
            f"development roll must be within "
            f"{economy.development_roll_min}-{economy.development_roll_max}, got {roll}"
        )
    return executor_pol // economy.development_pol_divisor + roll


def roll_development_bonus(rng: RandomSource, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    economy = rules.economy
    return rng.randint(economy.development_roll_min, economy.development_roll_max)


def execute_development(
    gold: int,
    current_value: int,
    executor_pol: int,
    max_value: int = 999,
    *,
    roll: int | None = None,
    rng: RandomSource | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> DevelopmentResult:
    """Spend gold to raise a development statistic.

    The random bonus is either injected through ``roll`` or drawn from
    ``rng``; nothing is drawn when the city cannot pay.
    """

    cost = rules.economy.development_cost
    if gold < cost:
        return DevelopmentResult(
            success=False,
            gold_spent=0,
            value_increase=0,
            new_value=current_value,
            error=FailureReason.INSUFFICIENT_GOLD,
        )

    if roll is None:
        if rng is None:
            raise ValueError("execute_development requires either roll or rng")
        roll = roll_development_bonus(rng, rules=rules)

    increase = development_increase(executor_pol, roll, rules=rules)
    new_value = min(max_value, current_value + increase)
    return DevelopmentResult(
        success=True,
        gold_spent=cost,
        value_increase=max(0, new_value - current_value),
        new_value=max(new_value, current_value),
    )


def recruitment_soldiers(lead: int, cha: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Soldiers raised by one recruitment drive."""

    economy = rules.economy
    return lead * economy.recruit_lead_multiplier + cha * economy.recruit_cha_multiplier


def loyalty_decrease(cha: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Loyalty lost by a city when a general with ``cha`` recruits there."""

    economy = rules.economy
    return max(
        economy.loyalty_min_decrease,
        economy.loyalty_base_decrease - cha // economy.loyalty_cha_divisor,
    )


def execute_recruitment(
    resources: CityResources,
    lead: int,
    cha: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> RecruitmentResult:
    """Check whether a city can pay for a recruitment drive and price it.

    Gold is checked before population.  The resources are not mutated; the
    caller applies the returned costs.
    """

    economy = rules.economy
    soldiers = recruitment_soldiers(lead, cha, rules=rules)
    gold_cost = soldiers * economy.recruit_gold_per_soldier
    population_cost = soldiers * economy.recruit_population_per_soldier

    if resources.gold < gold_cost:
        return RecruitmentResult(success=False, error=FailureReason.INSUFFICIENT_GOLD)
    if resources.population < population_cost:
        return RecruitmentResult(success=False, error=FailureReason.INSUFFICIENT_POPULATION)

    return RecruitmentResult(
        success=True,
        soldiers=soldiers,
        gold_spent=gold_cost,
        population_spent=population_cost,
        loyalty_decrease=loyalty_decrease(cha, rules=rules),
    )
