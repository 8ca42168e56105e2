from __future__ import annotations

import pytest
from typer.testing import CliRunner

from src import main

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_database(monkeypatch):
    def _unreachable():
        raise AssertionError("options must be validated before connecting")

    monkeypatch.setattr(main, "create_executor", _unreachable)


def test_run_rejects_unknown_strategy():
    result = runner.invoke(main.app, ["run", "--strategy", "bogus", "--no-persist"])

    assert result.exit_code == 2
    assert "Unknown strategy" in result.output


@pytest.mark.parametrize("sizes", ["10,abc", "10,-5"])
def test_run_rejects_malformed_sizes(sizes):
    result = runner.invoke(main.app, ["run", "--sizes", sizes, "--no-persist"])

    assert result.exit_code == 2
    assert "--sizes" in result.output


def test_run_lists_strategies_without_connecting():
    result = runner.invoke(main.app, ["run", "--strategy", "list"])

    assert result.exit_code == 0
    assert "batched, join, naive" in result.output
