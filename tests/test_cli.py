"""Tests for the CLI module."""

import json

import pytest
from click.testing import CliRunner
from conftest import make_row

from mail_topic_tracker.cli import cli
from mail_topic_tracker.models import SyncState
from mail_topic_tracker.report import TopicWorkbook
from mail_topic_tracker.state import load_state, save_state


@pytest.fixture
def output_root(tmp_path, monkeypatch):
    """Point every setting at the temporary directory."""
    root = tmp_path / "out"
    monkeypatch.setenv("MAIL_TRACKER_OUTPUT_ROOT", str(root))
    monkeypatch.setenv("MAIL_TRACKER_CREDENTIALS", str(tmp_path / "credentials.json"))
    monkeypatch.setenv("MAIL_TRACKER_TOKEN", str(tmp_path / "token.json"))
    monkeypatch.delenv("MAIL_TRACKER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("MAIL_TRACKER_PAGE_SIZE", raising=False)
    return root


@pytest.fixture
def report(output_root):
    wb = TopicWorkbook(output_root / "MailTracker.xlsx")
    wb.append_rows("PRJ-42", [make_row("p1", date_local="2024-05-09 10:00", is_read="No")])
    wb.append_rows("Acme", [make_row("a1", date_local="2024-05-01 10:00"), make_row("a2")])
    wb.save()
    return wb.path


def test_cli_help():
    """CLI --help should work and show commands."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "sync" in result.output
    assert "summary" in result.output
    assert "export" in result.output
    assert "auth" in result.output
    assert "state" in result.output


def test_cli_version():
    """CLI --version should show version."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_sync_no_credentials(output_root):
    """Sync without credentials is a configuration error."""
    runner = CliRunner()
    result = runner.invoke(cli, ["sync"])
    assert result.exit_code == 1
    assert "Credentials file not found" in result.output
    assert not output_root.exists()


def test_sync_rejects_bad_page_size(output_root, tmp_path):
    (tmp_path / "credentials.json").write_text("{}")
    runner = CliRunner()
    result = runner.invoke(cli, ["sync", "--page-size", "0"])
    assert result.exit_code == 1
    assert "Page size" in result.output


def test_invalid_env_setting(output_root, monkeypatch):
    monkeypatch.setenv("MAIL_TRACKER_PAGE_SIZE", "lots")
    runner = CliRunner()
    result = runner.invoke(cli, ["state", "info"])
    assert result.exit_code == 1
    assert "MAIL_TRACKER_PAGE_SIZE" in result.output


def test_sync_failure_exit_code(output_root, tmp_path, monkeypatch):
    """Errors after configuration is valid exit with code 2."""
    import mail_topic_tracker.cli as cli_module

    (tmp_path / "credentials.json").write_text("{}")

    def _boom(service, config):
        raise RuntimeError("network down")

    monkeypatch.setattr(cli_module, "get_gmail_service", lambda *args: object())
    monkeypatch.setattr(cli_module, "sync", _boom)

    runner = CliRunner()
    result = runner.invoke(cli, ["sync"])
    assert result.exit_code == 2
    assert "network down" in result.output


def test_state_info_empty(output_root):
    """State info without a state file should not crash."""
    runner = CliRunner()
    result = runner.invoke(cli, ["state", "info"])
    assert result.exit_code == 0
    assert "never" in result.output.lower()


def test_state_reset(output_root):
    save_state(output_root / "state.json", SyncState(processed_ids={"m1"}))

    runner = CliRunner()
    result = runner.invoke(cli, ["state", "reset", "--yes"])
    assert result.exit_code == 0
    assert "reset" in result.output.lower()
    assert load_state(output_root / "state.json").processed_ids == set()


def test_state_reset_asks_first(output_root):
    save_state(output_root / "state.json", SyncState(processed_ids={"m1"}))

    runner = CliRunner()
    result = runner.invoke(cli, ["state", "reset"], input="n\n")
    assert result.exit_code != 0
    assert load_state(output_root / "state.json").processed_ids == {"m1"}


def test_summary_without_report(output_root):
    runner = CliRunner()
    result = runner.invoke(cli, ["summary"])
    assert result.exit_code != 0
    assert "No report found" in result.output


def test_summary(report):
    runner = CliRunner()
    result = runner.invoke(cli, ["summary"])
    assert result.exit_code == 0
    assert "Topics shown: 2 of 2" in result.output
    assert "Messages: 3" in result.output


def test_export_json(report, tmp_path):
    out = tmp_path / "summary.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["export", "--format", "json", "-f", str(out)])
    assert result.exit_code == 0

    data = json.loads(out.read_text(encoding="utf-8"))
    assert [d["topic"] for d in data] == ["PRJ-42", "Acme"]
    assert data[0]["unread"] == 1
    assert data[1]["total"] == 2


def test_export_csv_with_output_option(tmp_path, report):
    out = tmp_path / "summary.csv"
    runner = CliRunner()
    result = runner.invoke(
        cli, ["-o", str(report.parent), "export", "--format", "csv", "-f", str(out)]
    )
    assert result.exit_code == 0
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("topic,total,unread")
    assert len(lines) == 3
