"""Document graph: parsed files, $ref edges and reachability."""

import os
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import pointer as jp


@dataclass(frozen=True)
class Reference:
    """A resolved $ref edge."""

    source: Path
    pointer: str  # location of the {"$ref": ...} mapping in `source`
    raw: str
    target: Path
    target_pointer: str


@dataclass
class DocumentGraph:
    """Files reachable from the entry document, with their $ref edges."""

    entry: Path
    documents: dict[Path, Any] = field(default_factory=dict)  # path -> parsed value
    references: list[Reference] = field(default_factory=list)
    edges: dict[Path, set[Path]] = field(
        default_factory=lambda: defaultdict(set)
    )  # file -> files it references
    candidates: list[Path] = field(default_factory=list)  # on-disk components/** and paths/**

    @property
    def base_dir(self) -> Path:
        return self.entry.parent

    @property
    def root(self) -> dict:
        return self.documents[self.entry]

    def add_reference(self, ref: Reference) -> None:
        self.references.append(ref)
        if ref.target != ref.source:
            self.edges[ref.source].add(ref.target)

    def transitive_closure(self, start: Path | None = None) -> set[Path]:
        """All files reachable from `start` (default: the entry), including it."""
        visited: set[Path] = set()
        stack = [start or self.entry]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            for dep in self.edges.get(current, set()):
                if dep not in visited:
                    stack.append(dep)

        return visited

    def orphans(self) -> list[Path]:
        """Candidate files never reached from the entry, sorted by relative path."""
        reachable = self.transitive_closure()
        return sorted(
            (p for p in self.candidates if p not in reachable),
            key=self.relpath,
        )

    def relpath(self, path: Path) -> str:
        """Path relative to the entry directory, POSIX separators."""
        try:
            return path.relative_to(self.base_dir).as_posix()
        except ValueError:
            return Path(os.path.relpath(path, self.base_dir)).as_posix()

    def in_folder(self, path: Path, folder: str) -> bool:
        """True if `path` lives below `folder` (relative to the entry directory)."""
        return self.relpath(path).startswith(folder.rstrip("/") + "/")

    def area(self, path: Path) -> int:
        """Sort group of a file: entry, paths/, components/, anything else."""
        if path == self.entry:
            return 0
        if self.in_folder(path, "paths"):
            return 1
        if self.in_folder(path, "components"):
            return 2
        return 3

    def resolve(self, path: Path, pointer: str) -> Any:
        return jp.resolve(self.documents[path], pointer)

    def dereference(self, path: Path, pointer: str, value: Any) -> tuple[Path, str, Any]:
        """Follow a chain of $ref mappings to the first non-reference value.

        Remote refs and cycles stop the chain at the last local value.
        """
        seen: set[tuple[Path, str]] = set()
        while isinstance(value, dict) and isinstance(value.get("$ref"), str):
            ref = value["$ref"]
            if jp.is_remote(ref):
                break
            target, target_pointer = jp.split_ref(path, ref)
            if (target, target_pointer) in seen or target not in self.documents:
                break
            seen.add((target, target_pointer))
            try:
                value = self.resolve(target, target_pointer)
            except (KeyError, ValueError):
                break
            path, pointer = target, target_pointer
        return path, pointer, value
