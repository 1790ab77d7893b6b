"""Turn and calendar state machine.

A game loops through ``player -> calculation -> narrative -> player``.  The
player spends action points; on turn end the calendar advances a month,
monthly gold is collected, generals age each January and grain is
harvested each July.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from warlords.domain.economy import monthly_income, yearly_grain
from warlords.domain.enums import ActionType, FailureReason, GamePhase
from warlords.domain.models import CityID, GameDate, General, GeneralID
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import StateDraft, StateView, governor_pol

PHASE_SEQUENCE: tuple[GamePhase, ...] = (
    GamePhase.PLAYER,
    GamePhase.CALCULATION,
    GamePhase.NARRATIVE,
)


@dataclass(slots=True)
class APDeduction:
    """Result of trying to pay for an action."""

    success: bool
    remaining: int
    deducted: int
    error: FailureReason | None = None


@dataclass(slots=True)
class APValidation:
    final_ap: int
    all_valid: bool


@dataclass(frozen=True, slots=True)
class MonthAdvance:
    """New date plus the periodic triggers it fires."""

    new_date: GameDate
    year_changed: bool
    is_january: bool
    is_july: bool


@dataclass(frozen=True, slots=True)
class AgeIncrement:
    general_id: GeneralID
    old_age: int
    new_age: int


@dataclass(slots=True)
class TurnEndResult:
    """Everything the calendar step changed."""

    month: MonthAdvance
    gold_income: dict[CityID, int] = field(default_factory=dict)
    grain_income: dict[CityID, int] = field(default_factory=dict)
    aged: list[AgeIncrement] = field(default_factory=list)


def next_phase(phase: GamePhase) -> GamePhase:
    index = PHASE_SEQUENCE.index(phase)
    return PHASE_SEQUENCE[(index + 1) % len(PHASE_SEQUENCE)]


# ---------------------------------------------------------------------------
# Action points


def action_point_cost(action_type: ActionType, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Fixed action point price of an action category."""

    turn = rules.turn
    costs = {
        ActionType.DOMESTIC: turn.domestic_cost,
        ActionType.MOVEMENT: turn.movement_cost,
        ActionType.CAMPAIGN: turn.campaign_cost,
    }
    return costs[action_type]


def has_enough_action_points(
    current: int, action_type: ActionType, *, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    return current >= action_point_cost(action_type, rules=rules)


def deduct_action_points(
    current: int, action_type: ActionType, *, rules: RulesConfig = DEFAULT_RULES
) -> APDeduction:
    """Pay for an action; on failure the original points are returned untouched."""

    cost = action_point_cost(action_type, rules=rules)
    if current < cost:
        return APDeduction(
            success=False,
            remaining=current,
            deducted=0,
            error=FailureReason.INSUFFICIENT_ACTION_POINTS,
        )
    return APDeduction(success=True, remaining=current - cost, deducted=cost)


def restore_action_points(*, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Action points available at the start of every player phase."""

    return rules.turn.max_action_points


def should_end_player_turn(action_points: int, force: bool = False) -> bool:
    return force or action_points <= 0


def validate_action_point_consumption(
    initial: int,
    actions: Iterable[ActionType],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> APValidation:
    """Replay a sequence of actions and stop at the first one that cannot be paid."""

    current = initial
    for action in actions:
        deduction = deduct_action_points(current, action, rules=rules)
        if not deduction.success:
            return APValidation(final_ap=current, all_valid=False)
        current = deduction.remaining
    return APValidation(final_ap=current, all_valid=True)


# ---------------------------------------------------------------------------
# Calendar


def advance_month(date: GameDate, *, rules: RulesConfig = DEFAULT_RULES) -> MonthAdvance:
    """Move the calendar forward by one month, wrapping the year after December."""

    turn = rules.turn
    month = date.month + 1
    year = date.year
    year_changed = False
    if month > turn.months_per_year:
        month = 1
        year += 1
        year_changed = True
    return MonthAdvance(
        new_date=GameDate(year=year, month=month),
        year_changed=year_changed,
        is_january=month == turn.aging_month,
        is_july=month == turn.grain_month,
    )


def increment_general_ages(generals: Mapping[GeneralID, General]) -> dict[GeneralID, General]:
    """Return a new map with every living general one year older."""

    return {
        general_id: replace(general, age=general.age + 1) if general.is_alive else general
        for general_id, general in generals.items()
    }


def age_increment_record(generals: Mapping[GeneralID, General]) -> list[AgeIncrement]:
    return [
        AgeIncrement(general_id=general_id, old_age=general.age, new_age=general.age + 1)
        for general_id, general in generals.items()
        if general.is_alive
    ]


def monthly_gold_income(
    state: StateView, *, rules: RulesConfig = DEFAULT_RULES
) -> dict[CityID, int]:
    """Gold each city earns this month."""

    return {
        city_id: monthly_income(
            city.resources.commerce,
            city.resources.population,
            governor_pol(state, city),
            rules=rules,
        )
        for city_id, city in state.cities.items()
    }


def july_grain_distribution(
    state: StateView, *, rules: RulesConfig = DEFAULT_RULES
) -> dict[CityID, int]:
    """Grain each city harvests in July."""

    return {
        city_id: yearly_grain(
            city.resources.agriculture,
            city.resources.population,
            governor_pol(state, city),
            rules=rules,
        )
        for city_id, city in state.cities.items()
    }


def process_turn_end(draft: StateDraft, *, rules: RulesConfig = DEFAULT_RULES) -> TurnEndResult:
    """Advance the calendar and apply the periodic effects to the draft.

    Order: advance the month, collect gold, age generals in January and
    harvest grain in July.
    """

    month = advance_month(draft.current_date, rules=rules)
    draft.current_date = month.new_date
    result = TurnEndResult(month=month)

    result.gold_income = monthly_gold_income(draft, rules=rules)
    for city_id, gold in result.gold_income.items():
        draft.edit_city(city_id).resources.gold += gold

    if month.is_january:
        result.aged = age_increment_record(draft.generals)
        for record in result.aged:
            draft.edit_general(record.general_id).age = record.new_age

    if month.is_july:
        result.grain_income = july_grain_distribution(draft, rules=rules)
        for city_id, grain in result.grain_income.items():
            draft.edit_city(city_id).resources.grain += grain

    return result
