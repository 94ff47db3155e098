"""Command-line interface for System Pulse.

Examples:
    pulse snapshot              # collect once on this host and print JSON
    pulse snapshot --summary    # one row per domain
    pulse snapshot --remote     # fetch /api/metrics from a running service
    pulse serve                 # run the HTTP service
"""

import asyncio
from typing import Any, Optional

import httpx
import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from system_pulse.aggregator import DOMAINS, Aggregator
from system_pulse.config import get_settings

app = typer.Typer(help="System Pulse - host telemetry snapshots")
console = Console()


def _request_error_message(error: Exception, url: str) -> str:
    """Convert client errors to user-friendly CLI output."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        details = error.response.text[:300]
        return f"Service request failed ({status}): {details}"
    if isinstance(error, httpx.RequestError):
        return (
            f"Cannot reach System Pulse service at {url}. "
            "Set PULSE_SERVICE_URL and ensure the service is running."
        )
    return str(error)


def fetch_remote_snapshot(
    base_url: str,
    token: str | None,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """GET /api/metrics from a running service.

    Raises:
        httpx.HTTPError: On connection failures or non-2xx responses.
    """
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    with httpx.Client(timeout=timeout, transport=transport) as client:
        response = client.get(f"{base_url.rstrip('/')}/api/metrics", headers=headers)
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        return data


def collect_local_snapshot() -> dict[str, Any]:
    """Collect one snapshot in-process."""
    snapshot = asyncio.run(Aggregator.from_settings(get_settings()).collect())
    return snapshot.to_dict()


def render_summary(data: dict[str, Any]) -> Table:
    """One row per domain: ok or the failure kind and message."""
    meta = data.get("meta", {})
    table = Table(
        title=f"Snapshot {data.get('timestamp', '')} ({data.get('collectionTimeMs', '?')} ms)"
    )
    table.add_column("Domain", style="cyan")
    table.add_column("Status")
    table.add_column("Details", style="dim")

    for domain in DOMAINS:
        slot = data.get(domain)
        if isinstance(slot, dict) and "error" in slot:
            table.add_row(domain, f"[red]{slot['error']}[/red]", str(slot.get("message", "")))
        else:
            table.add_row(domain, "[green]ok[/green]", "")

    table.caption = f"status: {meta.get('status', 'unknown')}"
    return table


@app.command(name="snapshot")
def snapshot_command(
    remote: bool = typer.Option(
        False, "--remote", help="Fetch from the running service instead of collecting locally"
    ),
    url: Optional[str] = typer.Option(
        None, "--url", help="Service base URL (defaults to PULSE_SERVICE_URL)"
    ),
    summary: bool = typer.Option(False, "--summary", help="Print a per-domain table, not JSON"),
) -> None:
    """Print one metrics snapshot."""
    settings = get_settings()
    base_url = url or settings.service_url

    try:
        if remote:
            data = fetch_remote_snapshot(base_url, settings.auth_token)
        else:
            data = collect_local_snapshot()
    except Exception as e:
        console.print(f"[red]{_request_error_message(e, base_url)}[/red]")
        raise typer.Exit(1) from e

    if summary:
        console.print(render_summary(data))
    else:
        console.print_json(data=data)


@app.command(name="serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (PULSE_SERVICE_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (PULSE_SERVICE_PORT)"),
) -> None:
    """Run the HTTP service."""
    settings = get_settings()
    uvicorn.run(
        "system_pulse.service.app:app",
        host=host or settings.service_host,
        port=port or settings.service_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
