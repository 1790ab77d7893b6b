"""Player commands issued during the player phase.

Each command validates its references, pays its action point cost and
emits exactly one event.  A failed command returns the untouched input
state together with the failure reason.
"""

from __future__ import annotations

from dataclasses import dataclass

from warlords.domain.battle import (
    apply_high_lead_reduction,
    attack_power,
    classify_outcome,
    damage,
    defense_power,
    power_ratio,
    roll_damage_factor,
    roll_duel,
)
from warlords.domain.conquest import CaptureResult, apply_losses, capture_city
from warlords.domain.economy import execute_development, execute_recruitment
from warlords.domain.enums import (
    ActionType,
    BattleOutcome,
    DevelopTarget,
    DiplomacyStatus,
    DomesticAction,
    FailureReason,
    GamePhase,
    GeneralEventKind,
)
from warlords.domain.events import record_event
from warlords.domain.models import (
    BattleEventData,
    Casualties,
    CityID,
    DomesticEventData,
    DuelRecord,
    GameEvent,
    GameState,
    General,
    GeneralEventData,
    GeneralID,
)
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import StateDraft, city_troops, strongest_general
from warlords.domain.turn import deduct_action_points
from warlords.utils.rng import RandomSource


@dataclass(slots=True)
class CommandResult:
    """Outcome of a player command."""

    success: bool
    state: GameState
    event: GameEvent | None = None
    error: FailureReason | None = None
    detail: str | None = None
    capture: CaptureResult | None = None


def develop(
    state: GameState,
    city_id: CityID,
    general_id: GeneralID,
    target: DevelopTarget,
    rng: RandomSource,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> CommandResult:
    """Spend 100 gold and one action point to raise commerce or agriculture."""

    failure = _check_executor(state, city_id, general_id)
    if failure is not None:
        return failure

    deduction = deduct_action_points(state.action_points, ActionType.DOMESTIC, rules=rules)
    if not deduction.success:
        return _no_action_points(state)

    city = state.cities[city_id]
    general = state.generals[general_id]
    economy = rules.economy
    if target == DevelopTarget.COMMERCE:
        current, cap = city.resources.commerce, economy.commerce_max
    else:
        current, cap = city.resources.agriculture, economy.agriculture_max

    development = execute_development(
        city.resources.gold, current, general.attributes.pol, cap, rng=rng, rules=rules
    )
    if not development.success:
        return _failure(state, FailureReason.INSUFFICIENT_GOLD, "not enough gold")

    draft = StateDraft(state)
    edited = draft.edit_city(city_id)
    edited.resources.gold -= development.gold_spent
    if target == DevelopTarget.COMMERCE:
        edited.resources.commerce = development.new_value
        action = DomesticAction.DEVELOP_COMMERCE
    else:
        edited.resources.agriculture = development.new_value
        action = DomesticAction.DEVELOP_AGRICULTURE

    event = record_event(
        draft,
        DomesticEventData(
            faction=state.current_faction,
            city=city_id,
            action=action,
            executor=general_id,
            value=development.value_increase,
        ),
    )
    return CommandResult(
        success=True,
        state=draft.commit(action_points=deduction.remaining),
        event=event,
    )


def recruit(
    state: GameState,
    city_id: CityID,
    general_id: GeneralID,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> CommandResult:
    """Raise soldiers for a general at the cost of gold, population and loyalty."""

    failure = _check_executor(state, city_id, general_id)
    if failure is not None:
        return failure

    deduction = deduct_action_points(state.action_points, ActionType.DOMESTIC, rules=rules)
    if not deduction.success:
        return _no_action_points(state)

    city = state.cities[city_id]
    general = state.generals[general_id]
    recruitment = execute_recruitment(
        city.resources, general.attributes.lead, general.attributes.cha, rules=rules
    )
    if not recruitment.success:
        reason = recruitment.error or FailureReason.INSUFFICIENT_GOLD
        return _failure(state, reason, f"cannot recruit in {city.name}")

    draft = StateDraft(state)
    edited = draft.edit_city(city_id)
    edited.resources.gold -= recruitment.gold_spent
    edited.resources.population -= recruitment.population_spent
    edited.resources.loyalty = max(0, edited.resources.loyalty - recruitment.loyalty_decrease)
    draft.edit_general(general_id).troops += recruitment.soldiers

    event = record_event(
        draft,
        DomesticEventData(
            faction=state.current_faction,
            city=city_id,
            action=DomesticAction.RECRUIT,
            executor=general_id,
            value=recruitment.soldiers,
        ),
    )
    return CommandResult(
        success=True,
        state=draft.commit(action_points=deduction.remaining),
        event=event,
    )


def move_general(
    state: GameState,
    general_id: GeneralID,
    to_city_id: CityID,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> CommandResult:
    """Move a general and the troops they lead to an adjacent friendly city."""

    general = state.generals.get(general_id)
    to_city = state.cities.get(to_city_id)
    if general is None or to_city is None:
        return _failure(state, FailureReason.INVALID_REFERENCE, "unknown general or city")
    if general.current_city is None:
        return _failure(state, FailureReason.INVALID_TARGET, f"{general.name} has no city")

    failure = _check_executor(state, general.current_city, general_id)
    if failure is not None:
        return failure

    from_city = state.cities[general.current_city]
    if to_city_id not in from_city.connected_cities:
        return _failure(state, FailureReason.INVALID_TARGET, f"{to_city.name} is not adjacent")
    if to_city.faction != state.current_faction:
        return _failure(state, FailureReason.INVALID_TARGET, f"{to_city.name} is not ours")

    deduction = deduct_action_points(state.action_points, ActionType.MOVEMENT, rules=rules)
    if not deduction.success:
        return _no_action_points(state)

    draft = StateDraft(state)
    source = draft.edit_city(from_city.id)
    source.stationed_generals = [gid for gid in source.stationed_generals if gid != general_id]
    if source.governor == general_id:
        source.governor = None
    draft.edit_city(to_city_id).stationed_generals.append(general_id)
    draft.edit_general(general_id).current_city = to_city_id

    event = record_event(
        draft,
        GeneralEventData(
            general=general_id,
            event=GeneralEventKind.MOVED,
            details=f"{from_city.id}->{to_city_id}",
        ),
    )
    return CommandResult(
        success=True,
        state=draft.commit(action_points=deduction.remaining),
        event=event,
    )


def launch_campaign(
    state: GameState,
    from_city_id: CityID,
    to_city_id: CityID,
    general_id: GeneralID,
    rng: RandomSource,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> CommandResult:
    """Attack an adjacent foreign city with a general and the troops they lead.

    The full combat model applies: a duel or instant kill may settle the
    commanders first, both sides deal damage reduced by high leadership,
    and the outcome follows the attack/defense power ratio.  A victory
    captures the city.
    """

    failure = _check_executor(state, from_city_id, general_id)
    if failure is not None:
        return failure

    to_city = state.cities.get(to_city_id)
    if to_city is None:
        return _failure(state, FailureReason.INVALID_REFERENCE, f"unknown city {to_city_id!r}")
    from_city = state.cities[from_city_id]
    player = state.factions[state.current_faction]
    if to_city_id not in from_city.connected_cities:
        return _failure(state, FailureReason.INVALID_TARGET, f"{to_city.name} is not adjacent")
    if to_city.faction == state.current_faction:
        return _failure(state, FailureReason.INVALID_TARGET, f"{to_city.name} is already ours")
    if player.stance_toward(to_city.faction) == DiplomacyStatus.ALLY:
        return _failure(state, FailureReason.INVALID_TARGET, "cannot attack an ally")

    general = state.generals[general_id]
    if general.troops <= 0:
        return _failure(state, FailureReason.INVALID_TARGET, f"{general.name} has no troops")

    deduction = deduct_action_points(state.action_points, ActionType.CAMPAIGN, rules=rules)
    if not deduction.success:
        return _no_action_points(state)

    draft = StateDraft(state)
    defender = strongest_general(state, to_city_id, rules=rules)
    defender_troops = city_troops(state, to_city_id)
    city_defense = to_city.resources.defense

    duel_record: DuelRecord | None = None
    forced: BattleOutcome | None = None
    slain_troops = 0
    if defender is not None:
        duel = roll_duel(
            general.attributes.war,
            defender.attributes.war,
            general_id,
            defender.id,
            rng,
            rules=rules,
        )
        if duel.triggered and duel.winner is not None and duel.loser is not None:
            duel_record = DuelRecord(
                winner=duel.winner, loser=duel.loser, instant_kill=duel.instant_kill
            )
            if duel.instant_kill:
                slain = draft.edit_general(duel.loser)
                slain_troops = slain.troops
                slain.is_alive = False
                slain.troops = 0
                forced = BattleOutcome.WIN if duel.winner == general_id else BattleOutcome.LOSE

    # a slain commander's army deals no damage
    attacker_troops = 0 if forced == BattleOutcome.LOSE else general.troops
    engaged = None if forced == BattleOutcome.WIN else defender
    attack, defense = _campaign_powers(
        general, attacker_troops, engaged, defender_troops, city_defense, rules
    )
    counter_attack, counter_defense = _counter_powers(
        general, attacker_troops, engaged, defender_troops, rules
    )

    dealt = damage(attack, defense, roll_damage_factor(rng, rules=rules), rules=rules)
    if engaged is not None:
        reduced = apply_high_lead_reduction(dealt, engaged.attributes.lead, rules=rules)
        dealt = reduced.final_damage
    taken = 0
    if counter_attack > 0:
        taken = damage(
            counter_attack, counter_defense, roll_damage_factor(rng, rules=rules), rules=rules
        )
        taken = apply_high_lead_reduction(taken, general.attributes.lead, rules=rules).final_damage

    coin = rng.random()
    if forced is not None:
        outcome = forced
    else:
        ratio = power_ratio(attack, defense, rules=rules)
        outcome = classify_outcome(ratio, coin, rules=rules)

    attacker = draft.edit_general(general_id)
    attacker_losses = min(attacker.troops, taken)
    attacker.troops -= attacker_losses
    defender_losses = apply_losses(draft, to_city_id, dealt, rules=rules)
    if forced == BattleOutcome.LOSE:
        attacker_losses += slain_troops
    elif forced == BattleOutcome.WIN:
        defender_losses += slain_troops

    capture: CaptureResult | None = None
    if outcome == BattleOutcome.WIN and attacker.is_alive:
        capture = capture_city(draft, state.current_faction, from_city_id, to_city_id, general_id)

    event = record_event(
        draft,
        BattleEventData(
            attacker_faction=state.current_faction,
            defender_faction=to_city.faction,
            attacker_general=general_id,
            defender_general=defender.id if defender is not None else None,
            from_city=from_city_id,
            target_city=to_city_id,
            result=outcome,
            casualties=Casualties(attacker=attacker_losses, defender=defender_losses),
            duel=duel_record,
            city_captured=capture is not None,
        ),
    )
    return CommandResult(
        success=True,
        state=draft.commit(action_points=deduction.remaining),
        event=event,
        capture=capture,
    )


def _campaign_powers(
    general: General,
    attacker_troops: int,
    defender: General | None,
    defender_troops: int,
    city_defense: int,
    rules: RulesConfig,
) -> tuple[float, float]:
    attack = attack_power(
        attacker_troops, general.attributes.war, general.attributes.lead, rules=rules
    )
    if defender is None:
        return attack, float(city_defense)
    defense = defense_power(
        defender_troops,
        defender.attributes.lead,
        defender.attributes.intel,
        city_defense,
        rules=rules,
    )
    return attack, defense


def _counter_powers(
    general: General,
    attacker_troops: int,
    defender: General | None,
    defender_troops: int,
    rules: RulesConfig,
) -> tuple[float, float]:
    if defender is None:
        return 0.0, 1.0
    counter_attack = attack_power(
        defender_troops, defender.attributes.war, defender.attributes.lead, rules=rules
    )
    counter_defense = defense_power(
        attacker_troops, general.attributes.lead, general.attributes.intel, 0, rules=rules
    )
    return counter_attack, counter_defense


def _check_executor(
    state: GameState, city_id: CityID, general_id: GeneralID
) -> CommandResult | None:
    if state.phase != GamePhase.PLAYER:
        return _failure(state, FailureReason.INVALID_TARGET, f"phase is {state.phase}")

    city = state.cities.get(city_id)
    general = state.generals.get(general_id)
    if city is None:
        return _failure(state, FailureReason.INVALID_REFERENCE, f"unknown city {city_id!r}")
    if general is None:
        return _failure(state, FailureReason.INVALID_REFERENCE, f"unknown general {general_id}")
    if city.faction != state.current_faction:
        return _failure(state, FailureReason.INVALID_TARGET, f"{city.name} is not ours")
    if general.faction != state.current_faction or not general.is_alive:
        return _failure(state, FailureReason.INVALID_TARGET, f"{general.name} cannot serve")
    if general_id not in city.stationed_generals:
        return _failure(state, FailureReason.INVALID_TARGET, f"{general.name} is elsewhere")
    return None


def _failure(state: GameState, reason: FailureReason, detail: str) -> CommandResult:
    return CommandResult(success=False, state=state, error=reason, detail=detail)


def _no_action_points(state: GameState) -> CommandResult:
    return _failure(state, FailureReason.INSUFFICIENT_ACTION_POINTS, "not enough action points")
