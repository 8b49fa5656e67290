"""Integration tests for unattended simulations and the CLI."""

from __future__ import annotations

import json

from dominion.domain.enums import GameStatus, Ruleset
from dominion.domain.simulation import COVERAGE_COUNTERS, SimulationConfig, run_simulation
from dominion.main import main


def _config(**overrides) -> SimulationConfig:
    values = {"empire_count": 6, "turn_limit": 40, "protection_turns": 5, "seed": "itest"}
    values.update(overrides)
    return SimulationConfig(**values)


def test_simulation_is_reproducible():
    first = run_simulation(_config())
    second = run_simulation(_config())

    assert first.turns_played == second.turns_played
    assert first.coverage == second.coverage
    assert first.final_state == second.final_state


def test_simulation_reports_coverage_and_ends_cleanly():
    result = run_simulation(_config())
    state = result.final_state

    assert 1 <= result.turns_played <= 40
    assert set(COVERAGE_COUNTERS) <= set(result.coverage)
    assert result.coverage["phase_faults"] == 0
    assert result.coverage["messages"] > 0
    if result.turns_played < 40:
        assert state.status == GameStatus.COMPLETED
    if result.victory is not None:
        assert result.winner is not None
        assert result.winner.id == result.victory.winner_id

    owners = [sector.id for empire in state.empires.values() for sector in empire.sectors]
    assert len(owners) == len(set(owners))
    for empire in state.empires.values():
        assert empire.resources.credits >= 0
        assert empire.resources.food >= 0
        if empire.is_eliminated:
            assert empire.sectors == []


def test_seeds_change_the_outcome():
    first = run_simulation(_config(seed="a", turn_limit=15))
    second = run_simulation(_config(seed="b", turn_limit=15))
    assert first.final_state != second.final_state


def test_legacy_ruleset_runs():
    result = run_simulation(_config(ruleset=Ruleset.LEGACY, include_player=True, turn_limit=25))
    assert result.final_state.ruleset == Ruleset.LEGACY
    assert result.coverage["phase_faults"] == 0


def test_cli_simulate_prints_summary(capsys, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    exit_code = main(
        ["--log-level", "WARNING", "simulate", "--empires", "4", "--turns", "8", "--seed", "cli"]
    )
    assert exit_code == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["turns_played"] <= 8
    assert "coverage" in summary
