"""CLI commands for meshmetrics."""

import asyncio
import json
import os
import random
import sys

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from meshmetrics import __logo__, __version__

app = typer.Typer(
    name="meshmetrics",
    help=f"{__logo__} meshmetrics - Tool usage metrics for AI coding assistants",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} meshmetrics v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show debug logs"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Silence all logs"),
):
    """meshmetrics - Tool usage metrics for AI coding assistants."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    if quiet:
        logger.disable("meshmetrics")
    else:
        logger.enable("meshmetrics")


def _load_settings():
    from meshmetrics.config import MetricsSettings
    from meshmetrics.errors import ConfigError

    try:
        return MetricsSettings.from_env()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Hook execution
# ============================================================================


@app.command()
def simulate(
    tool_name: str = typer.Argument(..., help="Tool name, e.g. Read, Edit, Task"),
    tool_input: str = typer.Argument("{}", help="Tool input as a JSON object"),
    success: str = typer.Argument("true", help="'false' simulates a failed tool call"),
):
    """Simulate one tool execution and run the metrics hook on it."""
    from meshmetrics.hooks.tool_metrics import handle_tool_invocation

    try:
        parsed_input = json.loads(tool_input)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid tool input JSON: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    succeeded = success != "false"
    tool_data = {
        "tool_name": tool_name,
        "tool_input": parsed_input,
        "error": None if succeeded else "Simulated tool failure",
        "execution_time": random.uniform(10, 110),  # noqa: S311
    }

    console.print(f"🔧 Simulating {escape(tool_name)} tool execution...")
    console.print(f"📝 Input: {escape(json.dumps(parsed_input, indent=2))}")
    console.print(f"✅ Success: {str(succeeded).lower()}")

    settings = _load_settings()
    try:
        report = asyncio.run(handle_tool_invocation(tool_data, settings=settings))
    except Exception as e:
        console.print(f"[red]❌ Hook execution failed: {e}[/red]")
        raise typer.Exit(1)

    if report.success:
        method = report.metrics.api_method if report.metrics else "?"
        console.print(
            f"[green]✓[/green] Tool metrics logged successfully in "
            f"{report.execution_time_ms}ms [dim]({method})[/dim]"
        )
    else:
        console.print(f"[red]❌ Tool metrics failed: {escape(str(report.error_message))}[/red]")


@app.command()
def hook(
    print_report: bool = typer.Option(False, "--report", help="Print the execution report as JSON"),
):
    """Run as a PostToolUse hook, reading the payload JSON from stdin.

    Always exits 0 so a metrics problem never blocks the assistant.
    """
    from meshmetrics.config import MetricsSettings
    from meshmetrics.constants import SESSION_ID_ENV
    from meshmetrics.errors import ConfigError
    from meshmetrics.hooks.tool_metrics import handle_tool_invocation

    try:
        payload = json.loads(sys.stdin.read() or "{}")
        settings = MetricsSettings.from_env()
    except (json.JSONDecodeError, ConfigError) as e:
        logger.warning(f"Tool metrics hook skipped: {e}")
        return
    if not isinstance(payload, dict):
        logger.warning("Tool metrics hook skipped: payload is not a JSON object")
        return

    response = payload.get("tool_response")
    error = payload.get("error")
    if error is None and isinstance(response, dict):
        error = response.get("error")
        if error is None and response.get("success") is False:
            error = "Tool reported failure"

    raw = {
        "tool_name": payload.get("tool_name"),
        "tool_input": payload.get("tool_input"),
        "error": error,
        "execution_time": payload.get("execution_time", 0),
    }

    environ = dict(os.environ)
    if payload.get("session_id") and not environ.get(SESSION_ID_ENV):
        environ[SESSION_ID_ENV] = str(payload["session_id"])

    report = asyncio.run(handle_tool_invocation(raw, settings=settings, environ=environ))
    if print_report:
        console.print_json(json.dumps(report.to_dict()))


# ============================================================================
# Session
# ============================================================================


session_app = typer.Typer(help="Manage the current session id")
app.add_typer(session_app, name="session")


@session_app.command("start")
def session_start(
    session_id: str = typer.Argument(None, help="Session id (generated if omitted)"),
):
    """Persist the session id used by hooks started without CLAUDE_SESSION_ID."""
    import uuid

    from meshmetrics.session import write_session_id

    settings = _load_settings()
    session_id = session_id or f"session-{uuid.uuid4().hex[:12]}"
    path = write_session_id(session_id, settings.metrics_dir)
    console.print(f"[green]✓[/green] Session [cyan]{session_id}[/cyan] written to {path}")


@session_app.command("show")
def session_show():
    """Show the session id hooks would use right now."""
    from meshmetrics.session import resolve_session_id

    settings = _load_settings()
    console.print(resolve_session_id(settings.metrics_dir))


# ============================================================================
# Metrics Commands
# ============================================================================


metrics_app = typer.Typer(help="View collected tool metrics")
app.add_typer(metrics_app, name="metrics")


@metrics_app.command("summary")
def metrics_summary(
    hours: float = typer.Option(24, "--hours", "-h", help="Look-back window in hours"),
):
    """Show high-level metrics summary."""
    from meshmetrics.metrics.collector import LocalMetricsStore
    from meshmetrics.metrics.report import summary_report

    store = LocalMetricsStore(_load_settings().metrics_dir)
    report = summary_report(store, hours=hours)

    console.print(f"\n{__logo__} Metrics Summary (last {report['period_hours']}h)\n")

    table = Table(title="Overview")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Tool calls", str(report["tool_calls"]))
    table.add_row("Success rate", f"{report['success_rate']}%")
    table.add_row("Avg execution time", f"{report['avg_execution_time_ms']}ms")
    table.add_row("Sessions", str(report["sessions"]))
    table.add_row("Agent invocations", str(report["agent_invocations"]))
    console.print(table)

    if report["agents"]:
        table2 = Table(title="Agents")
        table2.add_column("Agent", style="cyan")
        table2.add_column("Invocations", justify="right")
        for name, count in sorted(report["agents"].items(), key=lambda kv: -kv[1]):
            table2.add_row(name, str(count))
        console.print(table2)
    console.print()


@metrics_app.command("tools")
def metrics_tools(
    hours: float = typer.Option(24, "--hours", "-h", help="Look-back window in hours"),
):
    """Show per-tool metrics breakdown."""
    from meshmetrics.metrics.collector import LocalMetricsStore
    from meshmetrics.metrics.report import tool_report

    store = LocalMetricsStore(_load_settings().metrics_dir)
    rows = tool_report(store, hours=hours)

    if not rows:
        console.print("[yellow]No tool events recorded yet.[/yellow]")
        return

    console.print(f"\n{__logo__} Tool Metrics (last {hours}h)\n")

    table = Table()
    table.add_column("Tool", style="cyan")
    table.add_column("Calls", justify="right")
    table.add_column("Success %", justify="right")
    table.add_column("Avg Time", justify="right")
    table.add_column("Top Errors", style="red")

    for r in rows:
        errors = (
            ", ".join(f"{k}({v})" for k, v in r["top_errors"].items()) if r["top_errors"] else ""
        )
        table.add_row(
            r["tool"],
            str(r["calls"]),
            f"{r['success_rate']}%",
            f"{r['avg_execution_time_ms']}ms",
            errors[:60] if errors else "[dim]-[/dim]",
        )

    console.print(table)
    console.print()


@metrics_app.command("activity")
def metrics_activity(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of recent lines to show"),
):
    """Show the most recent lines of the realtime activity log."""
    from meshmetrics.metrics.collector import LocalMetricsStore

    lines = LocalMetricsStore(_load_settings().metrics_dir).read_activity(limit=limit)
    if not lines:
        console.print("[yellow]No activity recorded yet.[/yellow]")
        return

    table = Table(title=f"{__logo__} Recent Activity")
    table.add_column("Time", style="dim")
    table.add_column("Tool", style="cyan")
    table.add_column("Status")
    for line in lines:
        timestamp, _, tool_name, status = (line.split("|") + ["", "", ""])[:4]
        table.add_row(escape(timestamp), escape(tool_name), escape(status))
    console.print(table)


@metrics_app.command("indicators")
def metrics_indicators():
    """Show the current productivity indicators."""
    from meshmetrics.metrics.indicators import JsonIndicatorsStore
    from meshmetrics.metrics.report import indicators_report

    store = JsonIndicatorsStore(_load_settings().metrics_dir)
    try:
        data = indicators_report(store)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read {store.path}: {e}[/red]")
        raise typer.Exit(1)

    if data is None:
        console.print("[yellow]No productivity indicators recorded yet.[/yellow]")
        return

    table = Table(title=f"{__logo__} Productivity Indicators")
    table.add_column("Indicator", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Session start", str(data["session_start"]))
    table.add_row("Commands executed", str(data["commands_executed"]))
    table.add_row("Files modified", str(data["files_modified"]))
    table.add_row("Lines changed", f"{data['lines_changed']:,}")
    table.add_row("Success rate", f"{data['success_rate']:.1f}%")
    table.add_row("Last activity", str(data["last_activity"] or "-"))
    for tool, count in sorted(data["tools_used"].items(), key=lambda kv: -kv[1]):
        table.add_row(f"  tool: {tool}", str(count))
    for agent, count in sorted(data["agents_invoked"].items(), key=lambda kv: -kv[1]):
        table.add_row(f"  agent: {agent}", str(count))
    console.print(table)


@metrics_app.command("reset")
def metrics_reset(
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Clear all collected metrics data."""
    metrics_dir = _load_settings().metrics_dir

    if not confirm:
        if not typer.confirm(f"Delete all metrics in {metrics_dir}?"):
            raise typer.Exit()

    import shutil

    if metrics_dir.exists():
        shutil.rmtree(metrics_dir)
        console.print("[green]✓[/green] Metrics data cleared")
    else:
        console.print("[dim]No metrics data found[/dim]")


if __name__ == "__main__":
    app()
