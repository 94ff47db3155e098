"""Tests for the pulse CLI."""

import json
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from system_pulse.config import AppConfig
from system_pulse.ui.cli import app, fetch_remote_snapshot, render_summary

runner = CliRunner()

SNAPSHOT = {
    "timestamp": "2024-05-01T12:30:45.123Z",
    "collectionTimeMs": 42,
    "host": {"hostname": "pixel"},
    "memory": {"total": 100},
    "cpu": {"usage": 12.5},
    "disk": [],
    "network": {"error": "source-unavailable", "message": "no proc"},
    "android": {"available": False, "reason": "Android features not available on Darwin"},
    "meta": {"warnings": ["network: source-unavailable"], "status": "partial"},
}


@pytest.fixture
def settings():
    config = AppConfig(auth_token="tok", service_url="http://pulse.local:3001")
    with patch("system_pulse.ui.cli.get_settings", return_value=config):
        yield config


class TestSnapshotCommand:
    def test_local_snapshot_prints_json(self, settings: AppConfig) -> None:
        with patch("system_pulse.ui.cli.collect_local_snapshot", return_value=SNAPSHOT):
            result = runner.invoke(app, ["snapshot"])

        assert result.exit_code == 0
        assert '"status": "partial"' in result.stdout
        assert '"collectionTimeMs": 42' in result.stdout

    def test_remote_snapshot_uses_configured_url_and_token(self, settings: AppConfig) -> None:
        with patch(
            "system_pulse.ui.cli.fetch_remote_snapshot", return_value=SNAPSHOT
        ) as mock_fetch:
            result = runner.invoke(app, ["snapshot", "--remote"])

        assert result.exit_code == 0
        mock_fetch.assert_called_once_with("http://pulse.local:3001", "tok")

    def test_remote_unreachable_exits_1(self, settings: AppConfig) -> None:
        with patch(
            "system_pulse.ui.cli.fetch_remote_snapshot",
            side_effect=httpx.ConnectError("connection refused"),
        ):
            result = runner.invoke(app, ["snapshot", "--remote"])

        assert result.exit_code == 1
        assert "Cannot reach System Pulse service" in result.stdout

    def test_summary_table(self, settings: AppConfig) -> None:
        with patch("system_pulse.ui.cli.collect_local_snapshot", return_value=SNAPSHOT):
            result = runner.invoke(app, ["snapshot", "--summary"])

        assert result.exit_code == 0
        assert "network" in result.stdout
        assert "source-unavailable" in result.stdout
        assert "status: partial" in result.stdout


def test_serve_runs_uvicorn(settings: AppConfig) -> None:
    with patch("system_pulse.ui.cli.uvicorn.run") as mock_run:
        result = runner.invoke(app, ["serve", "--port", "4000"])

    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "system_pulse.service.app:app",
        host="0.0.0.0",
        port=4000,
        log_level="info",
    )


class TestFetchRemoteSnapshot:
    def test_sends_bearer_token(self) -> None:
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization", "")
            return httpx.Response(200, json=SNAPSHOT)

        data = fetch_remote_snapshot(
            "http://pulse.local:3001/", "tok", transport=httpx.MockTransport(handler)
        )

        assert data == SNAPSHOT
        assert seen == {"url": "http://pulse.local:3001/api/metrics", "auth": "Bearer tok"}

    def test_unauthorized_raises(self) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(401, json={"error": "Unauthorized"})
        )

        with pytest.raises(httpx.HTTPStatusError):
            fetch_remote_snapshot("http://pulse.local:3001", None, transport=transport)


def test_render_summary_rows() -> None:
    table = render_summary(json.loads(json.dumps(SNAPSHOT)))
    assert table.row_count == 6
    assert table.caption == "status: partial"
