"""Execution of planned AI actions against a turn's working copy."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import cast

from warlords.domain import ai as ai_rules
from warlords.domain.battle import (
    attack_power,
    classify_outcome,
    defense_power,
    power_ratio,
    simplified_casualties,
)
from warlords.domain.conquest import CaptureResult, apply_losses, capture_city
from warlords.domain.economy import execute_development, execute_recruitment
from warlords.domain.enums import AIActionType, BattleOutcome, DevelopTarget, DomesticAction
from warlords.domain.events import record_event
from warlords.domain.models import (
    BattleEventData,
    Casualties,
    CityID,
    DomesticEventData,
    FactionID,
    GameEvent,
    General,
)
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import (
    StateDraft,
    city_troops,
    get_city,
    get_general,
    strongest_general,
)
from warlords.utils.rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AIContext:
    """Shared context passed to every AI action handler."""

    draft: StateDraft
    rng: RandomSource
    rules: RulesConfig = DEFAULT_RULES
    captures: list[CaptureResult] = field(default_factory=list)


@dataclass(slots=True)
class AITurnResult:
    """Events and conquests produced by all AI factions in one turn."""

    events: list[GameEvent] = field(default_factory=list)
    captures: list[CaptureResult] = field(default_factory=list)
    skipped: int = 0

    @property
    def eliminated(self) -> list[FactionID]:
        return [capture.previous_owner for capture in self.captures if capture.eliminated]


AIHandler = Callable[[AIContext, FactionID, ai_rules.AIAction], GameEvent | None]


def execute_ai_turns(
    draft: StateDraft,
    player_faction_id: FactionID,
    rng: RandomSource,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> AITurnResult:
    """Plan and execute one turn for every computer-controlled faction.

    Factions act in ascending id order; each plans against the working copy
    as left by the factions before it.  Factions without cities are skipped.
    """

    context = AIContext(draft=draft, rng=rng, rules=rules)
    result = AITurnResult()

    for faction_id in sorted(draft.factions):
        if faction_id == player_faction_id:
            continue
        if not draft.factions[faction_id].cities:
            continue

        for action in ai_rules.make_decision(draft, faction_id, rules=rules):
            event = execute_ai_action(context, faction_id, action)
            if event is None:
                result.skipped += 1
                continue
            result.events.append(event)

    result.captures = context.captures
    return result


def execute_ai_action(
    context: AIContext, faction_id: FactionID, action: ai_rules.AIAction
) -> GameEvent | None:
    """Re-validate and apply one planned action; returns its event or ``None``."""

    handler = _AI_HANDLERS[action.type]
    return handler(context, faction_id, action)


# ---------------------------------------------------------------------------
# Registered action handlers


def _execute_recruit(
    context: AIContext, faction_id: FactionID, action: ai_rules.AIAction
) -> GameEvent | None:
    action = cast(ai_rules.RecruitAction, action)
    draft = context.draft
    city = get_city(draft, action.city_id)
    general = get_general(draft, action.general_id)
    if not _can_act_in(general, city.id, faction_id) or city.faction != faction_id:
        return _skip(action, "recruiter unavailable")

    recruitment = execute_recruitment(
        city.resources,
        general.attributes.lead,
        general.attributes.cha,
        rules=context.rules,
    )
    if not recruitment.success:
        return _skip(action, str(recruitment.error))

    city = draft.edit_city(action.city_id)
    city.resources.gold -= recruitment.gold_spent
    city.resources.population -= recruitment.population_spent
    penalty = context.rules.ai.recruit_loyalty_penalty
    city.resources.loyalty = max(0, city.resources.loyalty - penalty)
    draft.edit_general(action.general_id).troops += recruitment.soldiers

    return record_event(
        draft,
        DomesticEventData(
            faction=faction_id,
            city=action.city_id,
            action=DomesticAction.RECRUIT,
            executor=action.general_id,
            value=recruitment.soldiers,
        ),
    )


def _execute_develop(
    context: AIContext, faction_id: FactionID, action: ai_rules.AIAction
) -> GameEvent | None:
    action = cast(ai_rules.DevelopAction, action)
    draft = context.draft
    economy = context.rules.economy
    city = get_city(draft, action.city_id)
    general = get_general(draft, action.general_id)
    if not _can_act_in(general, city.id, faction_id) or city.faction != faction_id:
        return _skip(action, "developer unavailable")

    if action.target == DevelopTarget.COMMERCE:
        current, cap = city.resources.commerce, economy.commerce_max
    else:
        current, cap = city.resources.agriculture, economy.agriculture_max

    development = execute_development(
        city.resources.gold,
        current,
        general.attributes.pol,
        cap,
        rng=context.rng,
        rules=context.rules,
    )
    if not development.success:
        return _skip(action, str(development.error))

    city = draft.edit_city(action.city_id)
    city.resources.gold -= development.gold_spent
    if action.target == DevelopTarget.COMMERCE:
        city.resources.commerce = development.new_value
        domestic_action = DomesticAction.DEVELOP_COMMERCE
    else:
        city.resources.agriculture = development.new_value
        domestic_action = DomesticAction.DEVELOP_AGRICULTURE

    return record_event(
        draft,
        DomesticEventData(
            faction=faction_id,
            city=action.city_id,
            action=domestic_action,
            executor=action.general_id,
            value=development.value_increase,
        ),
    )


def _execute_attack(
    context: AIContext, faction_id: FactionID, action: ai_rules.AIAction
) -> GameEvent | None:
    action = cast(ai_rules.AttackAction, action)
    draft = context.draft
    rules = context.rules
    from_city = get_city(draft, action.from_city)
    to_city = get_city(draft, action.to_city)
    general = get_general(draft, action.general_id)

    if from_city.faction != faction_id or not _can_act_in(general, from_city.id, faction_id):
        return _skip(action, "attacker unavailable")
    if to_city.faction == faction_id or action.to_city not in from_city.connected_cities:
        return _skip(action, "target no longer valid")
    if general.troops <= 0:
        return _skip(action, "attacker has no troops")

    defender_faction = to_city.faction
    defender = strongest_general(draft, action.to_city, rules=rules)
    defender_troops = city_troops(draft, action.to_city)

    attack = attack_power(
        general.troops, general.attributes.war, general.attributes.lead, rules=rules
    )
    if defender is not None:
        defense = defense_power(
            defender_troops,
            defender.attributes.lead,
            defender.attributes.intel,
            to_city.resources.defense,
            rules=rules,
        )
    else:
        defense = float(to_city.resources.defense)

    ratio = power_ratio(attack, defense, rules=rules)
    outcome = classify_outcome(ratio, context.rng.random(), rules=rules)
    casualties = simplified_casualties(general.troops, defender_troops, outcome, rules=rules)

    attacker = draft.edit_general(action.general_id)
    attacker.troops = max(0, attacker.troops - casualties.attacker_losses)
    apply_losses(draft, action.to_city, casualties.defender_losses, rules=rules)

    captured = False
    if outcome == BattleOutcome.WIN:
        context.captures.append(
            capture_city(draft, faction_id, action.from_city, action.to_city, action.general_id)
        )
        captured = True

    return record_event(
        draft,
        BattleEventData(
            attacker_faction=faction_id,
            defender_faction=defender_faction,
            attacker_general=action.general_id,
            defender_general=defender.id if defender is not None else None,
            from_city=action.from_city,
            target_city=action.to_city,
            result=outcome,
            casualties=Casualties(
                attacker=casualties.attacker_losses, defender=casualties.defender_losses
            ),
            city_captured=captured,
        ),
    )


_AI_HANDLERS: dict[AIActionType, AIHandler] = {
    AIActionType.RECRUIT: _execute_recruit,
    AIActionType.DEVELOP: _execute_develop,
    AIActionType.ATTACK: _execute_attack,
}


def _can_act_in(general: General, city_id: CityID, faction_id: FactionID) -> bool:
    return general.is_alive and general.faction == faction_id and general.current_city == city_id


def _skip(action: ai_rules.AIAction, reason: str) -> None:
    logger.debug("Skipping AI %s action %r: %s", action.type, action, reason)
    return None
