"""Lint configuration loaded from TOML."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from .rules.schema import RuleSpec

CONFIG_FILENAME = ".oaslint.toml"
DEFAULT_ERROR_SCHEMA = "components/schemas/common/error-response"


class ConfigError(ValueError):
    """Invalid configuration file or option."""


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coerce_str_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def _normalize_document_id(value: str) -> str:
    value = value.strip().replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    path = Path(value)
    if path.suffix.lower() in {".yaml", ".yml", ".json"}:
        path = path.with_suffix("")
    return path.as_posix()


@dataclass(frozen=True)
class LintConfig:
    disable: frozenset[str] = frozenset()
    exclude: tuple[str, ...] = ()
    severity: dict[str, str] = field(default_factory=dict)  # rule id -> severity
    error_schema: str = DEFAULT_ERROR_SCHEMA
    allow_scalar_parameter_schemas: bool = False
    source: Path | None = None

    def with_disabled(self, rule_ids: Iterable[str]) -> LintConfig:
        extra = {r.strip().upper() for r in rule_ids if r.strip()}
        if not extra:
            return self
        return dataclasses.replace(self, disable=self.disable | extra)

    def apply(self, rules: Iterable[RuleSpec]) -> tuple[RuleSpec, ...]:
        """Return the enabled rules with severity overrides applied.

        Raises ConfigError for rule ids that match no rule.
        """
        rules = tuple(rules)
        known = {r.id for r in rules}
        unknown = sorted((set(self.disable) | set(self.severity)) - known)
        if unknown:
            raise ConfigError(f"Unknown rule id(s): {', '.join(unknown)}")

        selected = []
        for rule in rules:
            if rule.id in self.disable:
                continue
            override = self.severity.get(rule.id)
            if override and override != rule.severity:
                rule = dataclasses.replace(rule, severity=override)
            selected.append(rule)
        return tuple(selected)


def load_config(path: Path) -> LintConfig:
    """
    Load lint configuration from TOML.

    Only the [lint] and [severity] tables are read; anything else is ignored.
    """
    import tomllib

    from .rules.schema import SEVERITIES

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e.strerror or e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    lint = _coerce_dict(data.get("lint"))

    disable = {r.upper() for r in _coerce_str_list(lint.get("disable"), "lint.disable")}
    exclude = tuple(_coerce_str_list(lint.get("exclude"), "lint.exclude"))

    error_schema = lint.get("error_schema", DEFAULT_ERROR_SCHEMA)
    if not isinstance(error_schema, str) or not error_schema.strip():
        raise ConfigError("lint.error_schema must be a non-empty string")

    allow_scalar = lint.get("allow_scalar_parameter_schemas", False)
    if not isinstance(allow_scalar, bool):
        raise ConfigError("lint.allow_scalar_parameter_schemas must be true or false")

    severity: dict[str, str] = {}
    for rule_id, level in _coerce_dict(data.get("severity")).items():
        level_str = str(level).strip().lower()
        if level_str not in SEVERITIES:
            raise ConfigError(f"severity.{rule_id} must be one of {', '.join(SEVERITIES)}, got {level!r}")
        severity[str(rule_id).strip().upper()] = level_str

    return LintConfig(
        disable=frozenset(disable),
        exclude=exclude,
        severity=severity,
        error_schema=_normalize_document_id(error_schema),
        allow_scalar_parameter_schemas=allow_scalar,
        source=path,
    )


def find_config(entry: Path) -> Path | None:
    """Look for .oaslint.toml next to the entry document."""
    candidate = entry.resolve().parent / CONFIG_FILENAME
    return candidate if candidate.is_file() else None
