"""Tests for the declarative rules configuration."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from dominion.domain.enums import Ruleset, UnitType
from dominion.domain.rules_config import (
    DEFAULT_RULES,
    LEGACY_COMBAT,
    UNIFIED_COMBAT,
    GalaxyRules,
    load_rules,
    rules_document,
    rules_from_json,
    rules_from_mapping,
)


def test_combat_for_selects_ruleset():
    assert DEFAULT_RULES.combat_for(Ruleset.UNIFIED) is UNIFIED_COMBAT
    assert DEFAULT_RULES.combat_for(Ruleset.LEGACY) is LEGACY_COMBAT


def test_underdog_and_diversity_never_both_enabled():
    assert UNIFIED_COMBAT.underdog_enabled and not UNIFIED_COMBAT.diversity_enabled
    assert LEGACY_COMBAT.diversity_enabled and not LEGACY_COMBAT.underdog_enabled


def test_unit_table_lookup():
    assert UNIFIED_COMBAT.unit_power.value(UnitType.STATIONS) == 30.0
    assert LEGACY_COMBAT.unit_power.value(UnitType.SOLDIERS) == 0.0


def test_rules_document_is_json_serialisable():
    document = rules_document()
    assert document["unified"]["defender_bonus"] == pytest.approx(0.10)
    json.dumps(document)


def test_partial_override_keeps_other_values():
    rules = rules_from_mapping({"unified": {"defender_bonus": 0.0}})
    assert rules.unified.defender_bonus == 0.0
    assert rules.unified.retreat_rate == UNIFIED_COMBAT.retreat_rate
    assert rules.legacy == LEGACY_COMBAT
    # The shared default is untouched.
    assert DEFAULT_RULES.unified.defender_bonus == pytest.approx(0.10)


def test_rules_from_json_rejects_non_object():
    with pytest.raises(ValueError, match="JSON object"):
        rules_from_json("[1, 2, 3]")


def test_rules_from_json_rejects_bad_types():
    with pytest.raises(ValidationError):
        rules_from_json(json.dumps({"bots": {"actions_per_turn": "many"}}))


def test_load_rules_from_disk(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"victory": {"checkpoint_interval": 3}}), encoding="utf-8")
    rules = load_rules(path)
    assert rules.victory.checkpoint_interval == 3
    assert rules.victory.conquest_share == DEFAULT_RULES.victory.conquest_share


def test_galaxy_needs_room_for_a_connection():
    with pytest.raises(ValueError, match="min_regions"):
        GalaxyRules(min_regions=1)
    with pytest.raises(ValueError, match="max_regions"):
        GalaxyRules(min_regions=6, max_regions=4)
    with pytest.raises(ValueError):
        rules_from_mapping({"galaxy": {"min_regions": 1}})
