"""CLI tests using click's CliRunner."""

import json
from pathlib import Path

from click.testing import CliRunner

from conftest import write_api
from oaslint.cli import cli, lint_openapi

ORPHAN = "components/schemas/unused-thing.yaml"


def _add_orphan(entry: Path) -> None:
    write_api(entry.parent, {ORPHAN: {"type": "object"}})


def _break_ref(entry: Path) -> None:
    write_api(
        entry.parent,
        {"components/schemas/team-list.yaml": {"type": "array", "items": {"$ref": "./gone.yaml"}}},
    )


def test_lint_clean_api_exits_zero(clean_api_path: Path) -> None:
    result = CliRunner().invoke(cli, ["lint", str(clean_api_path)])

    assert result.exit_code == 0, result.output
    assert "No violations" in result.output
    assert "10 document(s)" in result.output


def test_lint_reports_violations_and_exits_one(clean_api_path: Path) -> None:
    _add_orphan(clean_api_path)

    result = CliRunner().invoke(cli, ["lint", str(clean_api_path)])

    assert result.exit_code == 1
    assert f"{ORPHAN}: [ORPHAN_FILE] File is not reachable from the entry document through $ref" in result.output
    assert "1 violation(s) in 1 file(s)" in result.output


def test_lint_unresolvable_graph_exits_two(clean_api_path: Path) -> None:
    _break_ref(clean_api_path)

    result = CliRunner().invoke(cli, ["lint", str(clean_api_path)])

    assert result.exit_code == 2
    assert "components/schemas/team-list.yaml:/items [GRAPH_UNRESOLVABLE]" in result.output
    assert len(result.output.strip().splitlines()) == 1


def test_lint_json_output(clean_api_path: Path) -> None:
    _add_orphan(clean_api_path)

    result = CliRunner().invoke(cli, ["lint", "--json", str(clean_api_path)])

    assert result.exit_code == 1
    data = json.loads(result.output)
    assert data["violations"] == [
        {
            "rule_id": "ORPHAN_FILE",
            "file_path": ORPHAN,
            "json_pointer": "",
            "message": "File is not reachable from the entry document through $ref",
            "severity": "error",
        }
    ]
    assert data["summary"]["total"] == 1
    assert data["summary"]["errors"] == 1
    assert data["summary"]["documents"] == 10


def test_lint_json_output_on_load_failure(clean_api_path: Path) -> None:
    _break_ref(clean_api_path)

    result = CliRunner().invoke(cli, ["lint", "--json", str(clean_api_path)])

    assert result.exit_code == 2
    error = json.loads(result.output)["error"]
    assert error["rule_id"] == "GRAPH_UNRESOLVABLE"
    assert error["file_path"] == "components/schemas/team-list.yaml"
    assert error["json_pointer"] == "/items"


def test_disable_option_switches_rule_off(clean_api_path: Path) -> None:
    _add_orphan(clean_api_path)

    result = CliRunner().invoke(cli, ["lint", "--disable", "orphan_file", str(clean_api_path)])

    assert result.exit_code == 0, result.output


def test_unknown_disabled_rule_is_a_usage_error(clean_api_path: Path) -> None:
    result = CliRunner().invoke(cli, ["lint", "--disable", "NOPE", str(clean_api_path)])

    assert result.exit_code == 2
    assert "Unknown rule id(s): NOPE" in result.output


def test_config_file_next_to_entry_is_used(clean_api_path: Path) -> None:
    _add_orphan(clean_api_path)
    (clean_api_path.parent / ".oaslint.toml").write_text('[severity]\nORPHAN_FILE = "info"\n', encoding="utf-8")

    result = CliRunner().invoke(cli, ["lint", str(clean_api_path)])

    assert result.exit_code == 0, result.output
    assert "[ORPHAN_FILE]" in result.output


def test_fail_on_error_ignores_warnings(clean_api_path: Path, tmp_path: Path) -> None:
    _add_orphan(clean_api_path)
    config = tmp_path / "strict.toml"
    config.write_text('[severity]\nORPHAN_FILE = "warning"\n', encoding="utf-8")

    runner = CliRunner()
    warned = runner.invoke(cli, ["lint", "--config", str(config), str(clean_api_path)])
    relaxed = runner.invoke(cli, ["lint", "--config", str(config), "--fail-on", "error", str(clean_api_path)])

    assert warned.exit_code == 1
    assert relaxed.exit_code == 0


def test_lint_openapi_command(clean_api_path: Path) -> None:
    runner = CliRunner()

    assert runner.invoke(lint_openapi, [str(clean_api_path)]).exit_code == 0
    _add_orphan(clean_api_path)
    assert runner.invoke(lint_openapi, [str(clean_api_path)]).exit_code == 1


def test_missing_entry_exits_two(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["lint", str(tmp_path / "openapi.yaml")])

    assert result.exit_code == 2
    assert "[GRAPH_UNRESOLVABLE]" in result.output


def test_explain_known_rule() -> None:
    result = CliRunner().invoke(cli, ["explain", "mislocated-schema"])

    assert result.exit_code == 0
    assert "MISLOCATED_SCHEMA" in result.output
    assert "components/schemas" in result.output


def test_explain_unknown_rule() -> None:
    result = CliRunner().invoke(cli, ["explain", "nope"])

    assert result.exit_code == 1
    assert "Unknown rule: NOPE" in result.output
    assert "ORPHAN_FILE" in result.output


def test_rules_lists_every_rule() -> None:
    result = CliRunner().invoke(cli, ["rules"])

    assert result.exit_code == 0
    for rule_id in ("MISLOCATED_SCHEMA", "ORPHAN_FILE", "NAMING_VIOLATION"):
        assert rule_id in result.output
