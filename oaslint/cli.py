"""CLI entrypoint for oaslint."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import ConfigError


def _configure_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _prepare(entry: Path, config_path: Path | None, disable: tuple[str, ...], verbose: bool):
    from .commands.lint import build_ruleset

    _configure_logging(verbose)
    try:
        return build_ruleset(entry, config_path, disable)
    except ConfigError as e:
        raise click.UsageError(str(e)) from e


def lint_options(fn):
    """Options shared by `oaslint lint`, `oaslint watch` and `lint-openapi`."""
    decorators = [
        click.argument(
            "entry",
            type=click.Path(exists=False, dir_okay=False, path_type=Path),
        ),
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="TOML config file (default: .oaslint.toml next to ENTRY, if present)",
        ),
        click.option(
            "--disable",
            "disable",
            multiple=True,
            metavar="RULE_ID",
            help="Switch a rule off (repeatable)",
        ),
        click.option(
            "--verbose",
            is_flag=True,
            help="Log loader and checker progress to stderr",
        ),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def report_options(fn):
    fn = click.option(
        "--fail-on",
        type=click.Choice(["error", "warning"]),
        default="warning",
        help="Exit with error if this level or higher found",
    )(fn)
    fn = click.option(
        "--json",
        "output_json",
        is_flag=True,
        help="Output results as JSON",
    )(fn)
    return fn


def _lint(
    entry: Path,
    config_path: Path | None,
    disable: tuple[str, ...],
    verbose: bool,
    output_json: bool,
    fail_on: str,
) -> None:
    from .commands.lint import run_lint

    config, rules = _prepare(entry, config_path, disable, verbose)
    exit_code = run_lint(entry, config=config, rules=rules, output_json=output_json, fail_on=fail_on)
    sys.exit(exit_code)


@click.group()
@click.version_option(__version__, prog_name="oaslint")
def cli() -> None:
    """oaslint - conformance checker for modular OpenAPI contracts.

    Checks that a multi-file OpenAPI contract follows the modularity ruleset:
    schemas live in components/schemas, the entry file only holds $refs,
    every file is reachable, names follow the conventions and error
    responses are shared.
    """


@cli.command()
@lint_options
@report_options
def lint(
    entry: Path,
    config_path: Path | None,
    disable: tuple[str, ...],
    verbose: bool,
    output_json: bool,
    fail_on: str,
) -> None:
    """Check ENTRY and every file it references.

    Exit codes: 0 = no violations, 1 = violations found, 2 = the document
    graph could not be resolved (broken $ref, invalid YAML/JSON).
    """
    _lint(entry, config_path, disable, verbose, output_json, fail_on)


@click.command("lint-openapi")
@click.version_option(__version__, prog_name="lint-openapi")
@lint_options
@report_options
def lint_openapi(
    entry: Path,
    config_path: Path | None,
    disable: tuple[str, ...],
    verbose: bool,
    output_json: bool,
    fail_on: str,
) -> None:
    """Check an OpenAPI ENTRY file against the modularity ruleset.

    Exit codes: 0 = no violations, 1 = violations found, 2 = the document
    graph could not be resolved.
    """
    _lint(entry, config_path, disable, verbose, output_json, fail_on)


@cli.command()
def rules() -> None:
    """List the built-in rules."""
    from .commands.lint import run_rules

    sys.exit(run_rules())


@cli.command()
@click.argument("rule_id")
def explain(rule_id: str) -> None:
    """Explain a rule (e.g. oaslint explain MISLOCATED_SCHEMA)."""
    from .commands.lint import run_explain

    sys.exit(run_explain(rule_id))


@cli.command()
@lint_options
def watch(
    entry: Path,
    config_path: Path | None,
    disable: tuple[str, ...],
    verbose: bool,
) -> None:
    """Re-lint ENTRY whenever a file below its directory changes.

    The config file is re-read on every run, so edits to it take effect
    without a restart.
    """
    from .commands.watch_cmd import run_watch

    # Reject a bad starting config before entering the loop
    _prepare(entry, config_path, disable, verbose)
    sys.exit(run_watch(entry, config_path=config_path, disable=disable))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
