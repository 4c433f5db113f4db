"""Pytest configuration and fixtures."""

import shutil
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from oaslint.checker import RulesetConformanceChecker
from oaslint.document.graph import DocumentGraph
from oaslint.document.loader import load_document

FIXTURES = Path(__file__).parent / "fixtures"


def complete_operation(**overrides: Any) -> dict[str, Any]:
    """An operation that satisfies every operation-level rule."""
    operation: dict[str, Any] = {
        "tags": ["Teams"],
        "summary": "List teams",
        "description": "Returns every team.",
        "responses": {"200": {"description": "OK"}},
    }
    operation.update(overrides)
    return operation


def write_api(root: Path, files: dict[str, Any]) -> Path:
    """Write a multi-file API under `root` and return the entry path.

    Keys are paths relative to `root`; dict/list values are dumped as YAML,
    strings are written verbatim. The first key is the entry file.
    """
    entry = None
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else yaml.safe_dump(content, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        if entry is None:
            entry = path
    assert entry is not None
    return entry


def entry_document(paths: dict[str, Any] | None = None, components: dict[str, Any] | None = None) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "openapi": "3.0.3",
        "info": {"title": "Teams API", "version": "1.0.0"},
        "paths": paths or {},
    }
    if components is not None:
        doc["components"] = components
    return doc


@pytest.fixture
def clean_api_path(tmp_path: Path) -> Path:
    """Entry file of a writable copy of the clean fixture API."""
    target = tmp_path / "clean_api"
    shutil.copytree(FIXTURES / "clean_api", target)
    return target / "openapi.yaml"


@pytest.fixture
def clean_graph(clean_api_path: Path) -> DocumentGraph:
    return load_document(clean_api_path)


@pytest.fixture
def checker() -> RulesetConformanceChecker:
    return RulesetConformanceChecker()


@pytest.fixture
def lint(checker: RulesetConformanceChecker) -> Callable[[Path], list]:
    """Load an entry file and return its violations."""

    def _lint(entry: Path) -> list:
        return checker.check(load_document(entry))

    return _lint
