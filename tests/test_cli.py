"""Tests for the meshmetrics CLI."""

import json

import pytest
from typer.testing import CliRunner

from meshmetrics import __version__
from meshmetrics.cli.commands import app
from meshmetrics.metrics.collector import LocalMetricsStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(metrics_dir, monkeypatch):
    monkeypatch.setenv("AI_MESH_METRICS_DIR", str(metrics_dir))
    monkeypatch.setenv("USER", "dev")
    for name in (
        "AI_MESH_METRICS_API_URL",
        "AI_MESH_METRICS_API_KEY",
        "AI_MESH_METRICS_API_TIMEOUT",
        "AI_MESH_METRICS_BUDGET_MS",
        "CLAUDE_SESSION_ID",
    ):
        monkeypatch.delenv(name, raising=False)


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


class TestSimulate:
    def test_read(self, metrics_dir):
        result = runner.invoke(app, ["simulate", "Read", '{"file_path": "/nonexistent/file.txt"}'])

        assert result.exit_code == 0
        assert "Simulating Read tool execution" in result.output
        assert "Tool metrics logged successfully" in result.output

        [event] = LocalMetricsStore(metrics_dir).read_events()
        assert event["tool_name"] == "Read"
        assert event["file_size_bytes"] == 0
        assert event["session_id"] == "default-session"
        assert 10 <= event["execution_time_ms"] <= 110

    def test_task_writes_two_events(self, metrics_dir):
        result = runner.invoke(
            app,
            [
                "simulate",
                "Task",
                '{"subagent_type": "frontend-developer", "description": "Create component"}',
                "true",
            ],
        )

        assert result.exit_code == 0
        events = LocalMetricsStore(metrics_dir).read_events()
        assert [e["event_type"] for e in events] == ["agent_invocation", "tool_execution"]
        indicators = json.loads((metrics_dir / "productivity-indicators.json").read_text())
        assert indicators["agents_invoked"] == {"frontend-developer": 1}

    def test_failure_flag(self, metrics_dir):
        result = runner.invoke(app, ["simulate", "Bash", '{"command": "ls"}', "false"])

        assert result.exit_code == 0
        [event] = LocalMetricsStore(metrics_dir).read_events()
        assert event["success"] is False
        assert event["error_message"] == "Simulated tool failure"

    def test_invalid_json(self):
        result = runner.invoke(app, ["simulate", "Read", "{not json"])

        assert result.exit_code == 1
        assert "Invalid tool input JSON" in result.output

    def test_invalid_setting(self, monkeypatch):
        monkeypatch.setenv("AI_MESH_METRICS_API_TIMEOUT", "later")

        result = runner.invoke(app, ["simulate", "Read"])

        assert result.exit_code == 1
        assert "AI_MESH_METRICS_API_TIMEOUT" in result.output


class TestHook:
    def test_reads_payload_from_stdin(self, metrics_dir):
        payload = {
            "session_id": "sess-from-payload",
            "tool_name": "Edit",
            "tool_input": {"file_path": "/src/a.py", "old_string": "a", "new_string": "b\nc"},
            "tool_response": {"filePath": "/src/a.py"},
        }

        result = runner.invoke(app, ["hook"], input=json.dumps(payload))

        assert result.exit_code == 0
        [event] = LocalMetricsStore(metrics_dir).read_events()
        assert event["session_id"] == "sess-from-payload"
        assert event["net_lines"] == 1
        assert event["success"] is True

    def test_tool_response_error_marks_failure(self, metrics_dir):
        payload = {"tool_name": "Bash", "tool_input": {}, "tool_response": {"error": "denied"}}

        result = runner.invoke(app, ["hook"], input=json.dumps(payload))

        assert result.exit_code == 0
        [event] = LocalMetricsStore(metrics_dir).read_events()
        assert event["error_message"] == "denied"

    def test_report_flag(self):
        result = runner.invoke(app, ["hook", "--report"], input='{"tool_name": "Read"}')

        assert result.exit_code == 0
        assert '"success": true' in result.output

    @pytest.mark.parametrize("stdin", ["not json", "[1, 2]"])
    def test_bad_payload_never_fails(self, stdin, metrics_dir):
        result = runner.invoke(app, ["hook"], input=stdin)

        assert result.exit_code == 0
        assert LocalMetricsStore(metrics_dir).read_events() == []


class TestSession:
    def test_start_and_show(self, metrics_dir):
        result = runner.invoke(app, ["session", "start", "sess-abc"])

        assert result.exit_code == 0
        assert (metrics_dir / ".current-session-id").read_text().strip() == "sess-abc"

        result = runner.invoke(app, ["session", "show"])
        assert result.output.strip() == "sess-abc"

    def test_start_generates_id(self, metrics_dir):
        result = runner.invoke(app, ["session", "start"])

        assert result.exit_code == 0
        assert (metrics_dir / ".current-session-id").read_text().startswith("session-")


class TestMetricsCommands:
    def test_empty_store(self):
        result = runner.invoke(app, ["metrics", "tools"])

        assert result.exit_code == 0
        assert "No tool events recorded yet" in result.output

        result = runner.invoke(app, ["metrics", "indicators"])
        assert "No productivity indicators recorded yet" in result.output

    def test_after_simulation(self):
        runner.invoke(app, ["simulate", "Write", '{"file_path": "/tmp/a.md", "content": "x"}'])

        tools = runner.invoke(app, ["metrics", "tools"])
        summary = runner.invoke(app, ["metrics", "summary"])
        indicators = runner.invoke(app, ["metrics", "indicators"])

        assert tools.exit_code == 0
        assert "Write" in tools.output
        assert summary.exit_code == 0
        assert "Tool calls" in summary.output
        assert indicators.exit_code == 0
        assert "Commands executed" in indicators.output

    def test_activity(self):
        empty = runner.invoke(app, ["metrics", "activity"])
        assert "No activity recorded yet" in empty.output

        runner.invoke(app, ["simulate", "Read"])
        runner.invoke(app, ["simulate", "Bash", '{"command": "ls"}'])

        result = runner.invoke(app, ["metrics", "activity", "--limit", "1"])

        assert result.exit_code == 0
        assert "Bash" in result.output
        assert "Read" not in result.output
        assert "unknown" in result.output

    def test_reset(self, metrics_dir):
        runner.invoke(app, ["simulate", "Read"])
        assert metrics_dir.exists()

        result = runner.invoke(app, ["metrics", "reset", "--yes"])

        assert result.exit_code == 0
        assert not metrics_dir.exists()
