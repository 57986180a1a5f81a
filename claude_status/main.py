"""Entry point: render Claude usage and context in the terminal."""

from __future__ import annotations

import argparse
import logging
import sys
import time

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from claude_status.config import settings
from claude_status.core.state import CoreState, NoCredentialsError
from claude_status.credentials.store import CredentialsError
from claude_status.display import (
    format_five_hour_reset,
    format_seven_day_reset,
    format_tokens,
    make_bar,
)
from claude_status.monitor.watcher import MonitorError
from claude_status.transcript.parser import TranscriptError
from claude_status.usage_api.client import AuthError, UsageApiError

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


def refresh(state: CoreState) -> list[str]:
    """Fetch usage and read context; return human-readable problems."""
    problems: list[str] = []
    try:
        state.fetch_usage()
    except NoCredentialsError:
        problems.append("No credentials: run `claude login`")
    except AuthError:
        problems.append("Token rejected: run `claude login` again")
    except UsageApiError as e:
        problems.append(str(e))
    try:
        state.read_context()
    except TranscriptError as e:
        problems.append(str(e))
    return problems


def render(state: CoreState, problems: list[str]) -> Panel:
    """Build the status panel from the last snapshots."""
    plan = state.credentials.plan_name if state.credentials else None
    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold")
    table.add_column()
    table.add_column(justify="right")
    table.add_column(style="dim")

    usage = state.last_usage
    if usage is not None:
        for label, period, reset in (
            ("5h", usage.five_hour, format_five_hour_reset(usage.five_hour.resets_at)),
            ("7d", usage.seven_day, format_seven_day_reset(usage.seven_day.resets_at)),
        ):
            color = state.color_for(period.utilization)
            table.add_row(
                label,
                f"[{color}]{make_bar(period.utilization)}[/]",
                f"[{color}]{period.utilization:3.0f}%[/]",
                reset,
            )

    ctx = state.last_context
    if ctx is not None:
        color = state.color_for(ctx.context_pct)
        table.add_row(
            "Ctx",
            f"[{color}]{make_bar(ctx.context_pct)}[/]",
            f"[{color}]{ctx.context_pct:3.0f}%[/]",
            f"{format_tokens(ctx.context_tokens)} / {format_tokens(ctx.context_window_size)}",
        )
        if ctx.model_name:
            table.add_row("Model", ctx.model_name, "", "")

    for problem in problems:
        table.add_row("[red]![/red]", f"[red]{problem}[/red]", "", "")

    return Panel(table, title=f"Claude {plan or '-'}", expand=False)


def _load(state: CoreState, path: str | None) -> None:
    try:
        state.load_credentials(path)
    except CredentialsError as e:
        logger.warning("%s", e)


def run_status(credentials_path: str | None) -> int:
    """Print a one-shot snapshot. Returns a process exit code."""
    with CoreState() as state:
        _load(state, credentials_path)
        problems = refresh(state)
        console.print(render(state, problems))
    return 1 if state.last_usage is None else 0


def run_watch(credentials_path: str | None) -> int:
    """Refresh every ``update_interval`` seconds until interrupted."""
    with CoreState() as state:
        _load(state, credentials_path)
        try:
            state.start_monitor(credentials_path)
        except MonitorError as e:
            logger.warning("Credential changes will not be detected: %s", e)

        last_fetch = 0.0
        problems: list[str] = []
        with Live(render(state, problems), console=console, auto_refresh=False) as live:
            try:
                while True:
                    if state.poll_credentials_changed():
                        logger.info("Credentials file changed, reloading")
                        _load(state, credentials_path)
                        last_fetch = 0.0
                    if time.monotonic() - last_fetch >= state.config.update_interval:
                        problems = refresh(state)
                        last_fetch = time.monotonic()
                        live.update(render(state, problems), refresh=True)
                    time.sleep(1)
            except KeyboardInterrupt:
                pass
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Claude usage and context status")
    parser.add_argument(
        "--credentials",
        default=settings.credentials_path,
        help="Credentials file (default: ~/.claude/.credentials.json)",
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("status", help="Print current usage once")
    sub.add_parser("watch", help="Keep refreshing until Ctrl-C")

    args = parser.parse_args()

    if args.command == "status":
        sys.exit(run_status(args.credentials))
    elif args.command == "watch":
        sys.exit(run_watch(args.credentials))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
