import sys

import pytest

from keepdefense.app import run_headless


def _run(monkeypatch, capsys, *argv: str) -> str:
    monkeypatch.setattr(sys, "argv", ["run_headless", *argv])
    assert run_headless.main() == 0
    return capsys.readouterr().out


def test_plain_run_prints_summary(monkeypatch, capsys):
    out = _run(monkeypatch, capsys, "--seconds", "2", "--seed", "4", "--set", "waves.spawn_chance=0")
    assert "seed=4" in out
    assert "ticks=120" in out
    assert "lives=20" in out


def test_baseline_policy_run(monkeypatch, capsys):
    out = _run(monkeypatch, capsys, "--seconds", "5", "--seed", "4", "--policy", "baseline")
    assert "towers=" in out
    assert "towers=0 " not in out


def test_bad_override_exits(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["run_headless", "--set", "economy.nope=1"])
    with pytest.raises(SystemExit):
        run_headless.main()
