"""Tests for the click entry point."""

import pytest
from click.testing import CliRunner

from foretell import __version__
from foretell import cli as cli_module
from foretell.sync.runner import JoinOutcome


@pytest.fixture
def flow_calls(monkeypatch, tmp_path):
    calls = []

    def fake_flow(config, sync=True, sync_only=False):
        calls.append((config, sync, sync_only))
        return JoinOutcome.FINISHED

    monkeypatch.setenv("FORETELL_CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("FORETELL_LOG_TO_FILE", "false")
    monkeypatch.setattr(cli_module, "main_flow", fake_flow)
    return calls


def test_help():
    result = CliRunner().invoke(cli_module.main, ["--help"])

    assert result.exit_code == 0
    assert "--sync-only" in result.output


def test_version():
    result = CliRunner().invoke(cli_module.main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_default_run_syncs_in_background(flow_calls, tmp_path):
    result = CliRunner().invoke(cli_module.main, [])

    assert result.exit_code == 0, result.output
    config, sync, sync_only = flow_calls[0]
    assert (sync, sync_only) == (True, False)
    assert config.cache_dir == tmp_path


def test_no_sync(flow_calls):
    CliRunner().invoke(cli_module.main, ["--no-sync"])

    assert flow_calls[0][1:] == (False, False)


def test_sync_only(flow_calls):
    CliRunner().invoke(cli_module.main, ["--sync-only", "--log-level", "debug"])

    assert flow_calls[0][1:] == (True, True)


def test_conflicting_flags(flow_calls):
    result = CliRunner().invoke(cli_module.main, ["--no-sync", "--sync-only"])

    assert result.exit_code == 2
    assert "mutually exclusive" in result.output
    assert flow_calls == []


def test_crash_is_mentioned(monkeypatch, flow_calls):
    monkeypatch.setattr(cli_module, "main_flow", lambda *a, **k: JoinOutcome.CRASHED)

    result = CliRunner().invoke(cli_module.main, [])

    assert result.exit_code == 0
    assert "crashed" in result.output
