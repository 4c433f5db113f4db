"""Rules as data, predicates as code."""

from .registry import DEFAULT_RULES, RULE_EXPLANATIONS, get_rule, get_rule_ids
from .schema import Finding, RuleSpec, Violation

__all__ = [
    "DEFAULT_RULES",
    "RULE_EXPLANATIONS",
    "Finding",
    "RuleSpec",
    "Violation",
    "get_rule",
    "get_rule_ids",
]
