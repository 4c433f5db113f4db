"""Load a multi-file OpenAPI contract into a DocumentGraph."""

import json
import logging
import os
from collections import deque
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Iterable, Iterator

import yaml

from . import pointer as jp
from .graph import DocumentGraph, Reference

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = {".yaml", ".yml", ".json"}

# Folders next to the entry file whose files must all be reachable
CANDIDATE_FOLDERS = ("components", "paths")


class LoadFailure(Exception):
    """The document graph cannot be resolved; no checks can run."""

    rule_id = "GRAPH_UNRESOLVABLE"

    def __init__(self, file: Path, pointer: str, message: str):
        super().__init__(message)
        self.file = file
        self.pointer = pointer
        self.message = message

    def __str__(self) -> str:
        return f"{self.file}:{self.pointer} [{self.rule_id}] {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {
            "rule_id": self.rule_id,
            "file_path": str(self.file),
            "json_pointer": self.pointer,
            "message": self.message,
        }


def parse_file(path: Path) -> Any:
    """Parse a YAML or JSON file. Raises LoadFailure on any read/parse error."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LoadFailure(path, "", f"cannot read file: {e.strerror or e}") from e

    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise LoadFailure(path, "", f"invalid JSON: {e.msg} (line {e.lineno}, col {e.colno})") from e
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" (line {mark.line + 1}, col {mark.column + 1})" if mark else ""
        problem = getattr(e, "problem", None) or str(e)
        raise LoadFailure(path, "", f"invalid YAML: {problem}{where}") from e


def iter_refs(value: Any, pointer: str = "") -> Iterator[tuple[str, str]]:
    """Yield (pointer, ref) for every {"$ref": str} mapping in a parsed value."""
    if isinstance(value, dict):
        ref = value.get("$ref")
        if isinstance(ref, str):
            yield pointer, ref
        for key, child in value.items():
            if key == "$ref":
                continue
            yield from iter_refs(child, jp.join(pointer, key))
    elif isinstance(value, list):
        for index, child in enumerate(value):
            yield from iter_refs(child, jp.join(pointer, index))


def discover_candidates(base_dir: Path, exclude: Iterable[str] = ()) -> list[Path]:
    """Find document files under components/ and paths/ next to the entry."""
    patterns = [p for p in exclude if p]
    found: list[Path] = []

    for folder in CANDIDATE_FOLDERS:
        root = base_dir / folder
        if not root.is_dir():
            continue
        for path in root.rglob("*"):
            if not path.is_file() or path.suffix.lower() not in DOCUMENT_SUFFIXES:
                continue
            rel = path.relative_to(base_dir)
            # Skip hidden files and directories
            if any(part.startswith(".") for part in rel.parts):
                continue
            if any(fnmatch(rel.as_posix(), pattern) for pattern in patterns):
                continue
            found.append(path.resolve())

    # Symlinked files may resolve outside base_dir
    base = base_dir.resolve()
    return sorted(set(found), key=lambda p: Path(os.path.relpath(p, base)).as_posix())


def load_document(entry: Path, exclude: Iterable[str] = ()) -> DocumentGraph:
    """Load the entry file and every file it references, transitively.

    Args:
        entry: Path to the root OpenAPI document
        exclude: Glob patterns (relative to the entry directory) of candidate
            files to ignore

    Returns:
        DocumentGraph with all references verified

    Raises:
        LoadFailure: if any file cannot be parsed or any $ref does not resolve
    """
    entry = entry.resolve()
    if not entry.is_file():
        raise LoadFailure(entry, "", "entry file not found")

    graph = DocumentGraph(entry=entry)
    queue: deque[Path] = deque([entry])

    while queue:
        path = queue.popleft()
        if path in graph.documents:
            continue

        document = parse_file(path)
        if path == entry and not isinstance(document, dict):
            raise LoadFailure(path, "", "entry document must be a mapping")
        graph.documents[path] = document

        refs = list(iter_refs(document))
        logger.debug("Parsed %s (%d references)", graph.relpath(path), len(refs))

        for ref_pointer, raw in refs:
            if jp.is_remote(raw):
                logger.debug("Skipping remote reference %s in %s", raw, graph.relpath(path))
                continue
            target, target_pointer = jp.split_ref(path, raw)
            if not target.is_file():
                raise LoadFailure(path, ref_pointer, f"$ref '{raw}' points to a missing file")
            graph.add_reference(
                Reference(
                    source=path,
                    pointer=ref_pointer,
                    raw=raw,
                    target=target,
                    target_pointer=target_pointer,
                )
            )
            if target not in graph.documents:
                queue.append(target)

    # Every file is loaded; now every fragment must exist in its target
    for ref in graph.references:
        try:
            jp.resolve(graph.documents[ref.target], ref.target_pointer)
        except (KeyError, ValueError):
            raise LoadFailure(
                ref.source,
                ref.pointer,
                f"$ref '{ref.raw}' does not resolve ({ref.target_pointer or '/'} not found in {graph.relpath(ref.target)})",
            ) from None

    graph.candidates = discover_candidates(entry.parent, exclude)
    logger.debug(
        "Loaded %d document(s), %d reference(s), %d candidate file(s)",
        len(graph.documents),
        len(graph.references),
        len(graph.candidates),
    )
    return graph
