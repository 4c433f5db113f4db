from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Literal

from ..models import Node, NodeKind

if TYPE_CHECKING:
    from .checks import CheckContext


Severity = Literal["error", "warning", "info"]
SEVERITIES: tuple[str, ...] = ("error", "warning", "info")


@dataclass(frozen=True)
class Finding:
    """Raw predicate output, turned into a Violation by the checker."""

    pointer: str
    params: dict[str, Any] = field(default_factory=dict)
    file: Path | None = None  # defaults to the node's file


PredicateFn = Callable[[Node, "CheckContext"], list[Finding]]


@dataclass(frozen=True)
class RuleSpec:
    id: str
    kinds: frozenset[NodeKind]
    predicate: PredicateFn
    message_template: str
    severity: Severity = "error"
    summary: str = ""

    def render(self, params: dict[str, Any]) -> str:
        return self.message_template.format(**params)


@dataclass(frozen=True)
class Violation:
    """A single deviation from the ruleset."""

    rule_id: str
    file_path: str  # relative to the entry directory, POSIX separators
    json_pointer: str
    message: str
    severity: Severity = "error"

    def __str__(self) -> str:
        return f"{self.file_path}:{self.json_pointer} [{self.rule_id}] {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {
            "rule_id": self.rule_id,
            "file_path": self.file_path,
            "json_pointer": self.json_pointer,
            "message": self.message,
            "severity": self.severity,
        }
