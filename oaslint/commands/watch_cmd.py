"""Watch command - re-lint the contract whenever a file changes."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable

from rich.console import Console

from ..config import ConfigError
from ..document import LoadFailure
from ..watcher import run_watch_loop
from .lint import build_ruleset, lint_entry, print_load_failure, print_report


def lint_snapshot(
    console: Console,
    entry: Path,
    config_path: Path | None = None,
    disable: Iterable[str] = (),
) -> None:
    """Lint the current state of the tree, re-reading the config first."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    console.rule(f"{timestamp} {entry.name}", style="dim")
    try:
        config, rules = build_ruleset(entry, config_path, disable)
    except ConfigError as e:
        console.print(f"Config error: {e}", style="bold red", markup=False)
        return
    try:
        graph, violations = lint_entry(entry, config, rules)
    except LoadFailure as failure:
        print_load_failure(console, failure, entry)
        return
    print_report(console, graph, violations)


def run_watch(
    entry: Path,
    *,
    config_path: Path | None = None,
    disable: Iterable[str] = (),
) -> int:
    """
    Lint once, then again after every change below the entry directory.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(highlight=False, soft_wrap=True)
    base_dir = entry.resolve().parent
    disable = tuple(disable)

    def on_change(changed: list[str]) -> None:
        for path in changed:
            console.print(f"changed: {path}", style="dim", markup=False)
        lint_snapshot(console, entry, config_path, disable)

    console.print(f"[bold]Watching[/bold] {base_dir}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    lint_snapshot(console, entry, config_path, disable)

    try:
        run_watch_loop(base_dir, on_change)
    except KeyboardInterrupt:
        console.print()
        console.print("[bold]Stopped.[/bold]")

    return 0
