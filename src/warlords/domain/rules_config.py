"""Declarative rule configuration for the Warlords domain layer."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import CityScale


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Income, development and recruitment constants."""

    base_politics_bonus: float = 0.5
    income_commerce_multiplier: float = 1.5
    income_population_divisor: int = 1000
    grain_agriculture_multiplier: int = 10
    grain_population_divisor: int = 200
    development_cost: int = 100
    development_roll_min: int = 1
    development_roll_max: int = 5
    development_pol_divisor: int = 5
    commerce_max: int = 999
    agriculture_max: int = 999
    recruit_lead_multiplier: int = 10
    recruit_cha_multiplier: int = 5
    recruit_gold_per_soldier: int = 2
    recruit_population_per_soldier: int = 1
    loyalty_base_decrease: int = 5
    loyalty_cha_divisor: int = 20
    loyalty_min_decrease: int = 1


@dataclass(frozen=True, slots=True)
class BattleRules:
    """Combat power, damage and duel constants."""

    attack_war_weight: float = 0.4
    attack_lead_weight: float = 0.6
    defense_lead_weight: float = 0.8
    defense_int_weight: float = 0.2
    damage_multiplier: int = 300
    damage_factor_min: float = 0.9
    damage_factor_max: float = 1.1
    high_lead_threshold: int = 90
    high_lead_multiplier: float = 0.8
    duel_war_gap: int = 10
    duel_chance: float = 0.05
    instant_kill_war_gap: int = 20
    instant_kill_chance: float = 0.01
    duel_tie_attacker_chance: float = 0.5
    decisive_win_ratio: float = 1.5
    decisive_loss_ratio: float = 0.67
    coin_flip_threshold: float = 0.5
    undefended_power_ratio: float = 10.0
    casualty_rate: float = 0.1
    winner_casualty_factor: float = 0.8
    loser_casualty_factor: float = 1.2


@dataclass(frozen=True, slots=True)
class TurnRules:
    """Action point budget and calendar triggers."""

    max_action_points: int = 3
    domestic_cost: int = 1
    movement_cost: int = 1
    campaign_cost: int = 2
    months_per_year: int = 12
    aging_month: int = 1
    grain_month: int = 7


@dataclass(frozen=True, slots=True)
class AIRules:
    """Heuristic weights and thresholds for the faction AI."""

    action_points: int = 3
    recruit_cost: int = 1
    attack_cost: int = 2
    develop_cost: int = 1
    recruit_troop_threshold: int = 10_000
    recruit_threat_ratio: float = 1.5
    threat_troops_weight: float = 1.0
    threat_distance_weight: float = 2.0
    min_attack_success: float = 0.6
    min_success_probability: float = 0.05
    max_success_probability: float = 0.95
    strategic_scale_weight: int = 10
    strategic_development_divisor: int = 100
    small_scale_score: int = 1
    medium_scale_score: int = 2
    large_scale_score: int = 3
    min_recruit_gold: int = 1000
    min_recruit_population: int = 500
    min_develop_gold: int = 100
    min_attack_troops: int = 1000
    recruit_loyalty_penalty: int = 3

    def scale_score(self, scale: CityScale) -> int:
        if scale == CityScale.LARGE:
            return self.large_scale_score
        if scale == CityScale.MEDIUM:
            return self.medium_scale_score
        return self.small_scale_score


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    economy: EconomyRules = EconomyRules()
    battle: BattleRules = BattleRules()
    turn: TurnRules = TurnRules()
    ai: AIRules = AIRules()


DEFAULT_RULES = RulesConfig()
