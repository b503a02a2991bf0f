"""
Tests for the command line interface.
"""

import json
import time

import httpx
import pytest
from click.testing import CliRunner

import wa_dispatch.cli as cli_module
from wa_dispatch.cli import cli
from wa_dispatch.messaging import WascriptClient


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def paths(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return {
        "db": f"sqlite:///{tmp_path / 'targets.db'}",
        "log": tmp_path / "send.log",
    }


@pytest.fixture
def wascript(monkeypatch):
    """Route CLI sends to a MockTransport and make the pause instant."""
    state = {"bodies": [], "responses": {}, "sleeps": []}

    def handler(request):
        body = json.loads(request.content)
        state["bodies"].append(body)
        answer = state["responses"].get(body["phone"], {"success": True})
        return httpx.Response(200, json=answer)

    def make_client(config=None):
        return WascriptClient(config, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli_module, "WascriptClient", make_client)
    monkeypatch.setattr(time, "sleep", state["sleeps"].append)
    return state


def _invoke(paths, *args, env=None):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ["--db", paths["db"], "--log-file", str(paths["log"]), *args],
        env=env,
    )


# ---------------------------------------------------------------------------
# targets / categories
# ---------------------------------------------------------------------------

class TestTargetCommands:
    def test_add_and_list(self, paths):
        result = _invoke(paths, "targets", "add", "--id", "111@g.us", "--name", "Team", "--category", "Work")
        assert result.exit_code == 0
        assert "Added Team (111@g.us)" in result.output

        result = _invoke(paths, "targets", "list")
        assert result.exit_code == 0
        assert "111@g.us" in result.output
        assert "Team" in result.output

    def test_add_duplicate(self, paths):
        _invoke(paths, "targets", "add", "--id", "111@g.us", "--name", "Team", "--category", "Work")
        result = _invoke(paths, "targets", "add", "--id", "111@g.us", "--name", "Other", "--category", "Work")
        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_add_blank_name(self, paths):
        result = _invoke(paths, "targets", "add", "--id", "111@g.us", "--name", " ", "--category", "Work")
        assert result.exit_code == 2
        assert "required" in result.output

    def test_list_json(self, paths):
        _invoke(paths, "targets", "add", "--id", "1@g.us", "--name", "A", "--category", "Work")
        _invoke(paths, "targets", "add", "--id", "2@g.us", "--name", "B", "--category", "Church")
        result = _invoke(paths, "targets", "list", "--category", "Church", "--json-output")
        assert json.loads(result.output) == [{"id": "2@g.us", "name": "B", "category": "Church"}]

    def test_remove(self, paths):
        _invoke(paths, "targets", "add", "--id", "1@g.us", "--name", "A", "--category", "Work")
        assert "Removed 1@g.us" in _invoke(paths, "targets", "remove", "1@g.us").output
        assert "not found" in _invoke(paths, "targets", "remove", "1@g.us").output
        assert "No saved targets" in _invoke(paths, "targets", "list").output

    def test_categories(self, paths):
        _invoke(paths, "targets", "add", "--id", "1@g.us", "--name", "A", "--category", "Work")
        _invoke(paths, "targets", "add", "--id", "2@g.us", "--name", "B", "--category", "Church")
        result = _invoke(paths, "categories")
        assert result.output.split() == ["Church", "Work"]


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------

class TestSendCommand:
    def test_send_to_explicit_targets(self, paths, wascript):
        result = _invoke(
            paths, "send", "-m", "Hello", "-t", "1@g.us", "-t", "2@g.us",
            env={"WASCRIPT_TOKEN": "tok"},
        )
        assert result.exit_code == 0, result.output
        assert [b["phone"] for b in wascript["bodies"]] == ["1@g.us", "2@g.us"]
        assert wascript["sleeps"] == [13]
        assert "Delivered: 2" in result.output

        log_lines = paths["log"].read_text(encoding="utf-8").splitlines()
        assert any("SUCCESS: Message delivered to 2@g.us" in line for line in log_lines)

    def test_send_to_category(self, paths, wascript):
        _invoke(paths, "targets", "add", "--id", "1@g.us", "--name", "A", "--category", "Work")
        _invoke(paths, "targets", "add", "--id", "2@g.us", "--name", "B", "--category", "Church")
        _invoke(paths, "targets", "add", "--id", "3@g.us", "--name", "C", "--category", "Work")

        result = _invoke(
            paths, "send", "-m", "Reunião", "-c", "Work", "--interval", "15", "--token", "tok",
        )
        assert result.exit_code == 0, result.output
        assert [b["phone"] for b in wascript["bodies"]] == ["1@g.us", "3@g.us"]
        assert wascript["sleeps"] == [15]

    def test_explicit_and_saved_targets_not_sent_twice(self, paths, wascript):
        _invoke(paths, "targets", "add", "--id", "1@g.us", "--name", "A", "--category", "Work")
        _invoke(paths, "targets", "add", "--id", "2@g.us", "--name", "B", "--category", "Work")

        result = _invoke(paths, "send", "-m", "Hi", "-t", "2@g.us", "--all", "--token", "tok")
        assert result.exit_code == 0, result.output
        assert [b["phone"] for b in wascript["bodies"]] == ["2@g.us", "1@g.us"]

    def test_message_file(self, paths, wascript, tmp_path):
        message_file = tmp_path / "msg.txt"
        message_file.write_text("Line one\nLine two", encoding="utf-8")
        result = _invoke(
            paths, "send", "--message-file", str(message_file), "-t", "1@g.us", "--token", "tok",
        )
        assert result.exit_code == 0, result.output
        assert wascript["bodies"][0]["message"] == "Line one\nLine two"

    def test_json_output(self, paths, wascript):
        result = _invoke(paths, "send", "-m", "Hi", "-t", "1@g.us", "--token", "tok", "--json-output")
        data = json.loads(result.output)
        assert data["delivered"] == 1
        assert data["outcomes"][0]["target_id"] == "1@g.us"

    def test_failed_delivery_exit_code(self, paths, wascript):
        wascript["responses"]["1@g.us"] = {"success": False, "reason": "blocked"}
        result = _invoke(paths, "send", "-m", "Hi", "-t", "1@g.us", "-t", "2@g.us", "--token", "tok")
        assert result.exit_code == 1
        assert "Failed:    1" in result.output
        assert len(wascript["bodies"]) == 2

    def test_interval_below_floor(self, paths, wascript):
        result = _invoke(paths, "send", "-m", "Hi", "-t", "1@g.us", "--interval", "5", "--token", "tok")
        assert result.exit_code == 2
        assert "13" in result.output
        assert wascript["bodies"] == []
        assert not paths["log"].exists()

    def test_missing_token(self, paths, wascript):
        result = _invoke(paths, "send", "-m", "Hi", "-t", "1@g.us")
        assert result.exit_code == 2
        assert "WASCRIPT_TOKEN" in result.output
        assert wascript["bodies"] == []

    def test_no_targets(self, paths, wascript):
        result = _invoke(paths, "send", "-m", "Hi", "--all", "--token", "tok")
        assert result.exit_code == 2
        assert "No targets" in result.output
        assert wascript["bodies"] == []

    def test_message_and_message_file_conflict(self, paths, wascript, tmp_path):
        message_file = tmp_path / "msg.txt"
        message_file.write_text("From file", encoding="utf-8")
        result = _invoke(
            paths, "send", "-m", "Inline", "--message-file", str(message_file),
            "-t", "1@g.us", "--token", "tok",
        )
        assert result.exit_code == 2
        assert "not both" in result.output
        assert wascript["bodies"] == []

    def test_missing_message(self, paths, wascript):
        result = _invoke(paths, "send", "-t", "1@g.us", "--token", "tok")
        assert result.exit_code == 2
        assert "--message" in result.output
