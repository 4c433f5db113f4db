"""Lint command implementation."""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable

from rich.console import Console
from rich.table import Table

from ..checker import RulesetConformanceChecker
from ..config import LintConfig, find_config, load_config
from ..document import LoadFailure, load_document
from ..document.graph import DocumentGraph
from ..rules import DEFAULT_RULES, RULE_EXPLANATIONS, RuleSpec, Violation, get_rule_ids

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_LOAD_FAILURE = 2

_LEVEL_STYLES = {
    "error": "bold red",
    "warning": "yellow",
    "info": "dim",
}


def build_ruleset(
    entry: Path,
    config_path: Path | None = None,
    disable: Iterable[str] = (),
) -> tuple[LintConfig, tuple[RuleSpec, ...]]:
    """Resolve configuration and the enabled rules.

    Raises:
        ConfigError: if the config file or a rule id is invalid
    """
    path = config_path or find_config(entry)
    config = load_config(path) if path else LintConfig()
    if path:
        logger.info("Using config %s", path)
    config = config.with_disabled(disable)
    return config, config.apply(DEFAULT_RULES)


def lint_entry(entry: Path, config: LintConfig, rules: tuple[RuleSpec, ...]) -> tuple[DocumentGraph, list[Violation]]:
    """Load `entry` and run the checker. Raises LoadFailure."""
    logger.info("Loading %s", entry)
    graph = load_document(entry, exclude=config.exclude)
    checker = RulesetConformanceChecker(rules, config)
    return graph, checker.check(graph)


def is_failing(violations: list[Violation], fail_on: str = "warning") -> bool:
    """Info never fails; warnings fail unless fail_on == "error"."""
    failing_levels = {"error"} if fail_on == "error" else {"error", "warning"}
    return any(v.severity in failing_levels for v in violations)


def run_lint(
    entry: Path,
    *,
    config: LintConfig,
    rules: tuple[RuleSpec, ...],
    output_json: bool = False,
    fail_on: str = "warning",
) -> int:
    """Run lint checks on an OpenAPI entry file.

    Args:
        entry: Path to the root OpenAPI document
        config: Resolved lint configuration
        rules: Enabled rules (see build_ruleset)
        output_json: Output results as JSON instead of human-readable
        fail_on: Lowest severity that makes the run fail ("error" or "warning")

    Returns:
        Exit code (0 = clean, 1 = violations found, 2 = graph unresolvable)
    """
    console = Console(highlight=False, soft_wrap=True)

    try:
        graph, violations = lint_entry(entry, config, rules)
    except LoadFailure as failure:
        if output_json:
            print(json.dumps({"entry": str(entry), "error": _failure_to_dict(failure, entry)}, indent=2))
        else:
            print_load_failure(Console(stderr=True, highlight=False, soft_wrap=True), failure, entry)
        return EXIT_LOAD_FAILURE

    if output_json:
        _output_json(entry, graph, violations)
    else:
        print_report(console, graph, violations)

    return EXIT_VIOLATIONS if is_failing(violations, fail_on) else EXIT_OK


def _display_path(path: Path, entry: Path) -> str:
    base = entry.resolve().parent
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return str(path)


def _failure_to_dict(failure: LoadFailure, entry: Path) -> dict[str, str]:
    data = failure.to_dict()
    data["file_path"] = _display_path(failure.file, entry)
    return data


def print_load_failure(console: Console, failure: LoadFailure, entry: Path) -> None:
    line = f"{_display_path(failure.file, entry)}:{failure.pointer} [{failure.rule_id}] {failure.message}"
    console.print(line, style="bold red", markup=False)


def _counts(violations: list[Violation]) -> dict[str, int]:
    counts = {"error": 0, "warning": 0, "info": 0}
    for v in violations:
        counts[v.severity] = counts.get(v.severity, 0) + 1
    return counts


def _output_json(entry: Path, graph: DocumentGraph, violations: list[Violation]) -> None:
    """Output violations as JSON for CI integration."""
    counts = _counts(violations)
    output = {
        "entry": str(entry),
        "violations": [v.to_dict() for v in violations],
        "summary": {
            "documents": len(graph.documents),
            "files_with_violations": len({v.file_path for v in violations}),
            "total": len(violations),
            "errors": counts["error"],
            "warnings": counts["warning"],
            "info": counts["info"],
        },
    }

    print(json.dumps(output, indent=2, default=str))


def print_report(console: Console, graph: DocumentGraph, violations: list[Violation]) -> None:
    """Print violations grouped by file, then a summary."""
    by_file: dict[str, list[Violation]] = {}
    for v in violations:
        by_file.setdefault(v.file_path, []).append(v)

    for file_path, file_violations in by_file.items():
        console.print(file_path, style="bold", markup=False)
        for v in file_violations:
            console.print(str(v), style=_LEVEL_STYLES.get(v.severity, ""), markup=False)
        console.print()

    if not violations:
        console.print(f"✓ No violations ({len(graph.documents)} document(s) checked)", style="bold green")
        return

    table = Table(title="Violations by rule", show_header=False)
    table.add_column("Rule", style="cyan")
    table.add_column("Count", justify="right")
    for rule_id, count in sorted(Counter(v.rule_id for v in violations).items()):
        table.add_row(rule_id, str(count))
    console.print(table)

    counts = _counts(violations)
    console.print(
        f"✗ {len(violations)} violation(s) in {len(by_file)} file(s) "
        f"({counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info)",
        style="bold red" if counts["error"] else "yellow",
    )


def run_rules() -> int:
    """List the built-in rules."""
    console = Console()

    table = Table(title="Rules")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Checks")
    for rule in DEFAULT_RULES:
        table.add_row(rule.id, rule.severity, rule.summary)

    console.print(table)
    return EXIT_OK


def run_explain(rule_id: str) -> int:
    """Explain a specific lint rule.

    Args:
        rule_id: Rule ID to explain (case-insensitive)

    Returns:
        Exit code (0 = success, 1 = rule not found)
    """
    from rich.markdown import Markdown

    console = Console()

    # Normalize rule_id
    rule_id = rule_id.upper().strip().replace("-", "_")

    if rule_id not in RULE_EXPLANATIONS:
        console.print(f"Unknown rule: {rule_id}", style="bold red", markup=False)
        console.print()
        console.print("Known rules:", style="bold")
        for rid in get_rule_ids():
            console.print(f"  - {rid}", markup=False)
        return 1

    console.print(Markdown(RULE_EXPLANATIONS[rule_id]))
    return 0
