"""Unit tests for the domestic economy rules."""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from warlords.domain import economy
from warlords.domain import models as dm
from warlords.domain.enums import FailureReason
from warlords.utils.rng import FixedRandom


def _resources(*, gold: int = 5_000, population: int = 100_000) -> dm.CityResources:
    return dm.CityResources(
        population=population,
        gold=gold,
        grain=1_000,
        commerce=300,
        agriculture=300,
        defense=50,
        loyalty=80,
    )


def test_politics_bonus_without_governor_is_base():
    assert economy.politics_bonus(None) == 0.5
    assert economy.politics_bonus(30) == pytest.approx(0.8)


def test_monthly_income_with_governor():
    assert economy.monthly_income(500, 300_000, 30) == 840


def test_monthly_income_without_governor():
    assert economy.monthly_income(500, 300_000, None) == 525


def test_yearly_grain():
    assert economy.yearly_grain(400, 200_000, 50) == 5_000
    assert economy.yearly_grain(0, 0, None) == 0


def test_development_increase_uses_politics_and_roll():
    assert economy.development_increase(60, 3) == 15
    assert economy.development_increase(4, 1) == 1


@pytest.mark.parametrize("roll", [0, 6])
def test_development_increase_rejects_bad_roll(roll):
    with pytest.raises(ValueError, match="development roll"):
        economy.development_increase(60, roll)


def test_execute_development_requires_gold_and_draws_nothing():
    rng = FixedRandom(ints=[3])
    result = economy.execute_development(99, 300, 60, rng=rng)
    assert not result.success
    assert result.error == FailureReason.INSUFFICIENT_GOLD
    assert result.gold_spent == 0
    assert result.new_value == 300
    assert not rng.exhausted


def test_execute_development_with_injected_roll():
    result = economy.execute_development(100, 300, 60, roll=3)
    assert result.success
    assert result.gold_spent == 100
    assert result.value_increase == 15
    assert result.new_value == 315


def test_execute_development_clamps_to_max():
    result = economy.execute_development(1_000, 995, 60, roll=5)
    assert result.new_value == 999
    assert result.value_increase == 4


def test_execute_development_draws_from_rng():
    rng = FixedRandom(ints=[5])
    result = economy.execute_development(500, 100, 50, rng=rng)
    assert result.value_increase == 15
    assert rng.exhausted


def test_execute_development_requires_a_roll_source():
    with pytest.raises(ValueError, match="either roll or rng"):
        economy.execute_development(500, 100, 50)


@given(
    gold=st.integers(min_value=100, max_value=100_000),
    current=st.integers(min_value=0, max_value=999),
    pol=st.integers(min_value=0, max_value=100),
    roll=st.integers(min_value=1, max_value=5),
)
def test_development_never_exceeds_cap_or_decreases(gold, current, pol, roll):
    result = economy.execute_development(gold, current, pol, roll=roll)
    assert result.success
    assert current <= result.new_value <= 999
    assert result.value_increase == result.new_value - current


def test_recruitment_numbers():
    result = economy.execute_recruitment(_resources(), 90, 40)
    assert result.success
    assert result.soldiers == 1_100
    assert result.gold_spent == 2_200
    assert result.population_spent == 1_100
    assert result.loyalty_decrease == 3


def test_recruitment_checks_gold_before_population():
    result = economy.execute_recruitment(_resources(gold=10, population=10), 90, 40)
    assert not result.success
    assert result.error == FailureReason.INSUFFICIENT_GOLD


def test_recruitment_insufficient_population():
    result = economy.execute_recruitment(_resources(population=1_000), 90, 40)
    assert result.error == FailureReason.INSUFFICIENT_POPULATION


def test_recruitment_does_not_mutate_resources():
    resources = _resources()
    economy.execute_recruitment(resources, 90, 40)
    assert resources.gold == 5_000
    assert resources.population == 100_000


@given(st.integers(min_value=0, max_value=100))
def test_loyalty_decrease_never_below_one(cha):
    assert 1 <= economy.loyalty_decrease(cha) <= 5


@given(
    lead=st.integers(min_value=0, max_value=100),
    cha=st.integers(min_value=0, max_value=100),
)
def test_recruitment_is_linear_in_each_attribute(lead, cha):
    base = economy.recruitment_soldiers(lead, cha)
    assert economy.recruitment_soldiers(lead + 1, cha) - base == 10
    assert economy.recruitment_soldiers(lead, cha + 1) - base == 5


@given(
    commerce=st.integers(min_value=0, max_value=999),
    population=st.integers(min_value=1_000, max_value=500_000),
    pol=st.one_of(st.none(), st.integers(min_value=0, max_value=100)),
)
def test_monthly_income_matches_formula(commerce, population, pol):
    bonus = 0.5 if pol is None else pol / 100 + 0.5
    expected = math.floor((commerce * 1.5 + population / 1000) * bonus)

    income = economy.monthly_income(commerce, population, pol)

    assert income == expected
    assert income >= 0


@given(
    pol=st.integers(min_value=0, max_value=100),
    roll=st.integers(min_value=1, max_value=5),
)
def test_development_increase_bounds(pol, roll):
    assert pol // 5 + 1 <= economy.development_increase(pol, roll) <= pol // 5 + 5
