"""City capture and garrison losses shared by AI attacks and player campaigns."""

from __future__ import annotations

from dataclasses import dataclass, field

from warlords.domain.models import CityID, FactionID, GeneralID
from warlords.domain.rules_config import DEFAULT_RULES, RulesConfig
from warlords.domain.state import (
    StateDraft,
    get_general,
    stationed_generals,
    strongest_general,
)


@dataclass(slots=True)
class CaptureResult:
    """What changed hands when a city fell."""

    city_id: CityID
    previous_owner: FactionID
    new_owner: FactionID
    relocated: dict[GeneralID, CityID | None] = field(default_factory=dict)
    eliminated: bool = False


def capture_city(
    draft: StateDraft,
    attacker_faction_id: FactionID,
    from_city_id: CityID,
    to_city_id: CityID,
    general_id: GeneralID,
) -> CaptureResult:
    """Transfer ``to_city`` to the attacker and move the victorious general in.

    Foreign generals in the captured city retreat to the loser's first
    remaining city.  When the loser has no city left they are scattered:
    removed from the map with their troops lost.  The victorious general
    becomes governor of the captured city.
    """

    to_city = draft.edit_city(to_city_id)
    loser_id = to_city.faction
    loser = draft.edit_faction(loser_id)
    winner = draft.edit_faction(attacker_faction_id)

    loser.cities = [city_id for city_id in loser.cities if city_id != to_city_id]
    if to_city_id not in winner.cities:
        winner.cities.append(to_city_id)
    to_city.faction = attacker_faction_id

    from_city = draft.edit_city(from_city_id)
    from_city.stationed_generals = [
        stationed for stationed in from_city.stationed_generals if stationed != general_id
    ]
    if from_city.governor == general_id:
        from_city.governor = None

    attacker = draft.edit_general(general_id)
    attacker.current_city = to_city_id

    result = CaptureResult(
        city_id=to_city_id,
        previous_owner=loser_id,
        new_owner=attacker_faction_id,
        eliminated=not loser.cities,
    )

    refuge_id = loser.cities[0] if loser.cities else None
    remaining: list[GeneralID] = []
    for stationed_id in to_city.stationed_generals:
        if stationed_id == general_id:
            continue
        stationed = get_general(draft, stationed_id)
        if stationed.faction == attacker_faction_id:
            remaining.append(stationed_id)
            continue

        evicted = draft.edit_general(stationed_id)
        evicted.current_city = refuge_id
        if refuge_id is None:
            evicted.troops = 0
        else:
            draft.edit_city(refuge_id).stationed_generals.append(stationed_id)
        result.relocated[stationed_id] = refuge_id

    to_city.stationed_generals = [*remaining, general_id]
    to_city.governor = general_id
    return result


def apply_losses(
    draft: StateDraft,
    city_id: CityID,
    losses: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Take ``losses`` troops from a city's garrison, commander first.

    Returns the number of troops actually removed.
    """

    commander = strongest_general(draft, city_id, rules=rules)
    order = [commander] if commander is not None else []
    order += [
        general
        for general in stationed_generals(draft, city_id)
        if commander is None or general.id != commander.id
    ]

    remaining = losses
    for general in order:
        if remaining <= 0:
            break
        if general.troops <= 0:
            continue
        taken = min(general.troops, remaining)
        draft.edit_general(general.id).troops -= taken
        remaining -= taken
    return losses - remaining
