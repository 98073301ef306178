"""Tests for the command line entry point."""

import json

import pytest

from signal_notifier.__main__ import main
from signal_notifier.config.loader import CONFIG_PATH_ENV


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"store:\n  db_path: {tmp_path / 'subs.db'}\n"
        f"delivery:\n  outbox_path: {tmp_path / 'outbox.jsonl'}\n  send_welcome: false\n"
        "logging:\n  level: WARNING\n"
    )
    return str(path)


def test_check_config(settings, capsys):
    assert main(["--config", settings, "check-config"]) == 0
    assert "Configuration OK" in capsys.readouterr().out


def test_bad_config_exit_code(tmp_path, capsys):
    path = tmp_path / "settings.yaml"
    path.write_text("scheduler:\n  hour: 99\n")

    assert main(["--config", str(path), "check-config"]) == 2
    assert "scheduler.hour" in capsys.readouterr().err


def test_subscribe_list_unsubscribe(settings, capsys):
    assert main(["--config", settings, "subscribe", "Investor@Example.com", "aapl", "--strategy", "swing"]) == 0
    response = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert response["success"] is True

    assert main(["--config", settings, "list"]) == 0
    listed = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert listed["email"] == "investor@example.com"
    assert listed["ticker"] == "AAPL"
    assert listed["trading_strategy"] == "swing"

    assert main(["--config", settings, "unsubscribe", "investor@example.com", "AAPL"]) == 0
    capsys.readouterr()
    assert main(["--config", settings, "unsubscribe", "investor@example.com", "AAPL"]) == 1


def test_subscribe_rejects_bad_email(settings, capsys):
    assert main(["--config", settings, "subscribe", "nope", "AAPL"]) == 1
    response = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert response["success"] is False


def test_run_once_prints_summary(settings, capsys):
    main(["--config", settings, "subscribe", "investor@example.com", "AAPL"])
    capsys.readouterr()

    main(["--config", settings, "run-once"])
    summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])

    assert summary["processed"] == 1
    assert summary["sent"] + summary["skipped"] == 1
    assert summary["aborted"] is False


def test_malformed_config_exit_code(tmp_path, capsys):
    path = tmp_path / "settings.yaml"
    path.write_text("scheduler: {hour: 5\n")

    assert main(["--config", str(path), "check-config"]) == 2
    assert "not valid YAML" in capsys.readouterr().err
