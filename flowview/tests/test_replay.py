"""Tests for the replay CLI and settings."""

import json
import sys

import pytest

from flowview.config import Settings
from flowview.models.agent_event import (
    agent_completed,
    agent_invoked,
    human_input_required,
    state_updated,
)
from flowview.scripts import replay

from conftest import HUMAN_PATTERN, SEQUENCE_PATTERN


def _write_events(path, events, extra_lines=()):
    lines = [e.model_dump_json(by_alias=True) for e in events]
    lines.extend(extra_lines)
    path.write_text("\n".join(lines) + "\n")


@pytest.fixture
def files(tmp_path):
    events_file = tmp_path / "events.jsonl"
    pattern_file = tmp_path / "pattern.json"
    first = agent_invoked("sequence", "A")
    _write_events(
        events_file,
        [
            first,
            first,
            agent_completed("sequence", "A"),
            state_updated("sequence", "story", "draft"),
            agent_invoked("sequence", "B"),
            agent_invoked("other", "Z"),
        ],
        extra_lines=["not json", ""],
    )
    pattern_file.write_text(json.dumps(SEQUENCE_PATTERN))
    return events_file, pattern_file


class TestReplayCli:
    """Test the replay command."""

    def test_load_event_log_drops_bad_lines(self, files):
        log = replay.load_event_log(files[0])
        assert len(log) == 5
        assert log.rejected_count == 1
        assert log.duplicate_count == 1

    def test_json_output(self, files, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["flowview-replay", str(files[0]), str(files[1]), "--json"])
        replay.main()
        output = json.loads(capsys.readouterr().out)

        assert output["pattern"] == "sequence"
        assert output["completed_agents"] == ["A"]
        assert output["active_agents"] == ["B"]
        assert output["scope"] == {"story": "draft"}
        assert output["event_count"] == 4
        assert len(output["layout"]["nodes"]) == 3

    def test_text_output(self, files, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["flowview-replay", str(files[0]), str(files[1])])
        replay.main()
        output = capsys.readouterr().out
        assert "Sequential Workflow (SEQUENCE)" in output
        assert "A -> B: M " in output
        assert "story = 'draft'" in output

    def test_pending_prompt_shown(self, tmp_path, monkeypatch, capsys):
        events_file = tmp_path / "events.jsonl"
        pattern_file = tmp_path / "pattern.json"
        _write_events(events_file, [human_input_required("human-in-loop", "Approve?", "7")])
        pattern_file.write_text(json.dumps(HUMAN_PATTERN))

        monkeypatch.setattr(sys, "argv", ["flowview-replay", str(events_file), str(pattern_file)])
        replay.main()
        assert "Waiting on human input: Approve?" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(
            sys, "argv", ["flowview-replay", str(tmp_path / "nope.jsonl"), str(tmp_path / "p.json")]
        )
        with pytest.raises(SystemExit) as exc_info:
            replay.main()
        assert exc_info.value.code == 1
        assert "file not found" in capsys.readouterr().err


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ["FLOWVIEW_WS_URL", "FLOWVIEW_RECONNECT_DELAY", "FLOWVIEW_CONNECT"]:
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.ws_url == "ws://localhost:8080/ws/websocket"
        assert settings.reconnect_delay == 5.0
        assert settings.heartbeat_ms == 4000
        assert settings.connect_on_startup is False

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("FLOWVIEW_RECONNECT_DELAY", "1.5")
        monkeypatch.setenv("FLOWVIEW_CORS_ORIGINS", "http://a.test,http://b.test")
        monkeypatch.setenv("FLOWVIEW_CONNECT", "true")
        settings = Settings.from_env()
        assert settings.reconnect_delay == 1.5
        assert settings.cors_origins == ["http://a.test", "http://b.test"]
        assert settings.connect_on_startup is True
