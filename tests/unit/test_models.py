"""Tests for model helpers, settings and narrative context lookups."""

from __future__ import annotations

from warlords.config import Settings
from warlords.domain import models as dm
from warlords.domain.enums import DiplomacyStatus
from warlords.interfaces.narrative import NarrativeContext


def test_stance_defaults_to_neutral(world):
    wei = world.factions[dm.FactionID("wei")]
    assert wei.stance_toward(dm.FactionID("shu")) == DiplomacyStatus.HOSTILE
    assert wei.stance_toward(dm.FactionID("wu")) == DiplomacyStatus.ALLY
    assert wei.stance_toward(dm.FactionID("stranger")) == DiplomacyStatus.NEUTRAL
    assert wei.is_hostile_to(dm.FactionID("shu"))
    assert not wei.is_hostile_to(dm.FactionID("stranger"))


def test_narrative_context_names_fall_back_to_ids(world):
    context = NarrativeContext(state=world)
    assert context.city_name(dm.CityID("xuchang")) == "Xuchang"
    assert context.general_name(dm.GeneralID("caocao")) == "Caocao"
    assert context.faction_name(dm.FactionID("wei")) == "Wei"
    assert context.city_name(dm.CityID("atlantis")) == "atlantis"


def test_settings_read_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("WARLORDS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("WARLORDS_RNG_SEED", "seeded")
    monkeypatch.setenv("WARLORDS_AUTOSAVE_ENABLED", "false")

    settings = Settings()

    assert settings.data_dir == tmp_path
    assert settings.rng_seed == "seeded"
    assert settings.autosave_enabled is False
    assert settings.narrative_timeout_seconds == 10.0
