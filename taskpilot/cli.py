"""CLI entrypoint for Taskpilot."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import click
import yaml

from taskpilot.core.exceptions import TaskpilotError
from taskpilot.core.models import Message, MessageType

# Agent currently driven by `taskpilot run`, used by the SIGINT handler
_active_agent: Optional[Any] = None
_interrupt_count: int = 0

_MESSAGE_STYLES: dict[MessageType, dict[str, Any]] = {
    MessageType.GOAL: {"fg": "cyan", "bold": True},
    MessageType.TASK: {"fg": "blue"},
    MessageType.ANALYSIS: {"fg": "magenta"},
    MessageType.ACTION: {"fg": "green"},
    MessageType.SYSTEM: {"fg": "yellow"},
    MessageType.ERROR: {"fg": "red", "bold": True},
    MessageType.USER: {"fg": "white", "bold": True},
    MessageType.SUMMARY: {"fg": "green", "bold": True},
}


def _sigint_handler(signum: int, frame: Any) -> None:
    """First Ctrl+C stops the agent at the next item boundary; the second exits."""
    global _interrupt_count
    _interrupt_count += 1
    if _active_agent is not None and _interrupt_count == 1:
        click.echo("\n")
        click.echo(click.style("Stopping after the current work item...", fg="yellow", bold=True))
        click.echo("  Press Ctrl+C again to exit immediately.")
        _active_agent.stop_agent()
        return
    click.echo("\n")
    click.echo(click.style("Interrupted.", fg="yellow", bold=True))
    sys.exit(130)


def _setup_logging(verbose: bool = False, env: Optional[str] = None) -> None:
    """Apply logging configuration from config/default.yaml."""
    from taskpilot.core.config import load_config

    try:
        config = load_config(env=env)
        level_name = config.logging.level
        fmt = config.logging.format
    except Exception:
        level_name = "INFO"
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def _echo_message(message: Message) -> None:
    style = _MESSAGE_STYLES.get(message.type, {})
    label = click.style(f"[{message.type.value}]", **style)
    click.echo(f"{label} {message.value}")
    if message.info and message.type in (MessageType.ACTION, MessageType.ANALYSIS):
        click.echo(f"    {message.info}")


def _format_summary(summary: dict[str, Any]) -> list[str]:
    if not summary.get("total_work"):
        return ["  No work executed."]
    outcomes = ", ".join(f"{k}={v}" for k, v in sorted(summary.get("outcomes", {}).items()))
    return [
        f"  Work items:      {summary['total_work']}",
        f"  Attempts:        {summary['total_attempts']} ({summary['total_retries']} retries)",
        f"  Duration:        {summary['total_duration_seconds']:.2f}s",
        f"  Outcomes:        {outcomes}",
    ]


async def _drive_agent(bundle: Any, summarize: bool) -> None:
    from taskpilot.core.factory import ComponentFactory

    try:
        await bundle.agent.run()
        if summarize and bundle.run_model.get_completed_tasks():
            await bundle.agent.summarize()
    finally:
        await ComponentFactory.close(bundle)


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose (DEBUG) logging.")
@click.option("--env", required=False, default=None, help="Optional config overlay environment.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, env: Optional[str]) -> None:
    """Taskpilot command line interface."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["env"] = env
    _setup_logging(verbose=verbose, env=env)
    signal.signal(signal.SIGINT, _sigint_handler)


@cli.command("run")
@click.option("--goal", required=True, help="Goal the agent should work towards.")
@click.option(
    "--max-loops",
    required=False,
    type=click.IntRange(min=0),
    default=None,
    help="Override model_settings.custom_max_loops.",
)
@click.option("--api-url", required=False, default=None, help="Override the agent API base URL.")
@click.option(
    "--summarize/--no-summarize",
    default=False,
    show_default=True,
    help="Summarize completed tasks once the loop ends.",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    goal: str,
    max_loops: Optional[int],
    api_url: Optional[str],
    summarize: bool,
) -> None:
    """Run the autonomous loop for GOAL until it completes or is stopped."""
    global _active_agent, _interrupt_count
    from taskpilot.core.factory import ComponentFactory

    try:
        bundle = ComponentFactory.create(
            goal=goal,
            env=ctx.obj.get("env"),
            max_loops=max_loops,
            api_url=api_url,
            renderer=_echo_message,
            transport=ctx.obj.get("transport"),
        )
    except TaskpilotError as exc:
        raise click.ClickException(str(exc)) from exc

    _active_agent = bundle.agent
    _interrupt_count = 0
    try:
        asyncio.run(_drive_agent(bundle, summarize))
    except TaskpilotError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        _active_agent = None

    click.echo("")
    click.echo(click.style("Run finished.", bold=True))
    click.echo(f"  Run ID:          {bundle.run_model.run_id}")
    click.echo(f"  Lifecycle:       {bundle.run_model.get_lifecycle().value}")
    click.echo(f"  Completed tasks: {len(bundle.run_model.get_completed_tasks())}")
    for line in _format_summary(bundle.metrics.get_summary()):
        click.echo(line)


@cli.command("show-config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the effective configuration as YAML."""
    from taskpilot.core.config import load_config

    try:
        config = load_config(env=ctx.obj.get("env"))
    except TaskpilotError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False).rstrip())


def main() -> None:
    """Entry point used by `taskpilot` console script."""
    from dotenv import load_dotenv
    load_dotenv(Path(__file__).parent.parent / ".env", override=True)
    cli()


if __name__ == "__main__":
    main()
