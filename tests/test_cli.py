"""Tests for the CLI module."""

import json

from click.testing import CliRunner

import gmail_inbox_stats.cli as cli_module
from gmail_inbox_stats.cli import cli


def test_cli_help():
    """CLI --help should work and show commands."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "scan" in result.output
    assert "auth" in result.output
    assert "inbox" in result.output
    assert "trash" in result.output


def test_cli_version():
    """CLI --version should show version."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_scan_no_credentials(tmp_path, monkeypatch):
    """Scan without credentials should show clear error."""
    import gmail_inbox_stats.auth as auth_module

    monkeypatch.setattr(auth_module, "CREDENTIALS_PATH", tmp_path / "nonexistent.json")
    monkeypatch.setattr(auth_module, "TOKEN_PATH", tmp_path / "token.json")
    monkeypatch.setattr(auth_module, "CONFIG_DIR", tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["scan"])
    assert result.exit_code != 0
    assert "Credentials file not found" in result.output or "Error" in result.output


def test_scan_shows_top_senders_and_exports(tmp_path, monkeypatch, two_page_client):
    """Scan should run to completion, print top senders and write the export."""
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "GmailMailboxClient", lambda credentials: two_page_client)
    out = tmp_path / "stats.json"

    runner = CliRunner()
    result = runner.invoke(cli, ["scan", "--page-size", "2", "-n", "1", "--export", str(out)])

    assert result.exit_code == 0, result.output
    assert "alice@example.com" in result.output
    assert "Summary" in result.output
    data = json.loads(out.read_text())
    assert data["totalEmails"] == 3
    assert data["topSenders"] == [{"email": "alice@example.com", "count": 2, "size": 150}]


def test_scan_reports_skipped_messages(monkeypatch, fake_mailbox, three_messages):
    client = fake_mailbox(
        pages={None: (["m1", "m2", "m3"], None)},
        messages=three_messages,
        failing_ids={"m2"},
    )
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "GmailMailboxClient", lambda credentials: client)

    runner = CliRunner()
    result = runner.invoke(cli, ["scan"])

    assert result.exit_code == 0, result.output
    assert "skipped" in result.output


def test_auth_failure(monkeypatch):
    def fail(credentials):
        raise RuntimeError("invalid_grant")

    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "get_profile_email", fail)

    runner = CliRunner()
    result = runner.invoke(cli, ["auth"])
    assert result.exit_code != 0
    assert "Authentication failed" in result.output


def test_auth_success(monkeypatch):
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "get_profile_email", lambda credentials: "me@example.com")

    runner = CliRunner()
    result = runner.invoke(cli, ["auth"])
    assert result.exit_code == 0
    assert "me@example.com" in result.output


def test_inbox_lists_newest_messages(monkeypatch, two_page_client):
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "GmailMailboxClient", lambda credentials: two_page_client)

    runner = CliRunner()
    result = runner.invoke(cli, ["inbox", "-n", "1"])

    assert result.exit_code == 0, result.output
    assert "alice@example.com" in result.output
    assert "bob@example.com" not in result.output
    assert two_page_client.get_calls == ["m1"]


def test_trash_with_yes_skips_prompt(monkeypatch, two_page_client):
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "GmailMailboxClient", lambda credentials: two_page_client)

    runner = CliRunner()
    result = runner.invoke(cli, ["trash", "m1", "--yes"])

    assert result.exit_code == 0, result.output
    assert "moved to trash" in result.output
    assert two_page_client.trashed == ["m1"]
    assert two_page_client.get_calls == []


def test_trash_requires_confirmation(monkeypatch, two_page_client):
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "GmailMailboxClient", lambda credentials: two_page_client)

    runner = CliRunner()
    result = runner.invoke(cli, ["trash", "m1"], input="no\n")

    assert result.exit_code == 0, result.output
    assert "Cancelled" in result.output
    assert two_page_client.trashed == []


def test_trash_failure(monkeypatch, two_page_client):
    monkeypatch.setattr(cli_module, "get_local_credentials", lambda: object())
    monkeypatch.setattr(cli_module, "GmailMailboxClient", lambda credentials: two_page_client)

    runner = CliRunner()
    result = runner.invoke(cli, ["trash", "missing", "--yes"])

    assert result.exit_code != 0
    assert "Failed to delete email missing" in result.output
