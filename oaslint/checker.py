"""Single-pass conformance check over a resolved document graph."""

import logging
from pathlib import Path
from typing import Any, Sequence

from .config import LintConfig
from .document import pointer as jp
from .document.graph import DocumentGraph
from .models import COMPONENT_SECTIONS, HTTP_METHODS, Node, NodeKind
from .rules.checks import CheckContext
from .rules.registry import DEFAULT_RULES
from .rules.schema import RuleSpec, Violation

logger = logging.getLogger(__name__)


class GraphWalker:
    """Visit every node reachable from the entry, tagged by location.

    The kind of a node is decided by where it is reached from, never by the
    keys it happens to carry. A $ref is followed and its target visited with
    the kind expected at the referencing location.
    """

    def __init__(self, graph: DocumentGraph):
        self.graph = graph
        self.nodes: list[Node] = []
        self._seen: set[tuple[NodeKind, Path, str]] = set()

    def walk(self) -> list[Node]:
        self.visit(NodeKind.ROOT, self.graph.entry, "", self.graph.root)

        for path in [self.graph.entry, *self.graph.candidates]:
            if (NodeKind.FILE, path, "") in self._seen:
                continue
            self._seen.add((NodeKind.FILE, path, ""))
            self.nodes.append(Node(NodeKind.FILE, path, "", self.graph.documents.get(path)))

        return self.nodes

    def visit(
        self,
        kind: NodeKind,
        file: Path,
        pointer: str,
        value: Any,
        name: str | None = None,
        parent: NodeKind | None = None,
    ) -> None:
        file, pointer, value = self.graph.dereference(file, pointer, value)
        key = (kind, file, pointer)
        if key in self._seen:
            return
        self._seen.add(key)

        node = Node(kind, file, pointer, value, name, parent)
        self.nodes.append(node)

        if not isinstance(value, dict):
            return
        handler = getattr(self, f"_walk_{kind.value}", None)
        if handler is not None:
            handler(node)

    def _visit_children(self, kind: NodeKind, node: Node, container: dict, key: str) -> None:
        """Visit the entries of `container[key]`, which may itself be a $ref."""
        file, section_pointer, children = self.graph.dereference(node.file, jp.join(node.pointer, key), container.get(key))
        if isinstance(children, dict):
            for child_key, child in children.items():
                self.visit(kind, file, jp.join(section_pointer, child_key), child, str(child_key), node.kind)
        elif isinstance(children, list):
            for index, child in enumerate(children):
                self.visit(kind, file, jp.join(section_pointer, index), child, parent=node.kind)

    def _visit_schema(self, node: Node) -> None:
        if "schema" in node.value:
            self.visit(
                NodeKind.SCHEMA,
                node.file,
                jp.join(node.pointer, "schema"),
                node.value["schema"],
                "schema",
                node.kind,
            )

    def _walk_root(self, node: Node) -> None:
        self._visit_children(NodeKind.PATH_ITEM, node, node.value, "paths")

        file, pointer, components = self.graph.dereference(
            node.file, jp.join(node.pointer, "components"), node.value.get("components")
        )
        if isinstance(components, dict):
            section_owner = Node(NodeKind.ROOT, file, pointer, components)
            for section, kind in COMPONENT_SECTIONS.items():
                self._visit_children(kind, section_owner, components, section)

    def _walk_path_item(self, node: Node) -> None:
        self._visit_children(NodeKind.PARAMETER, node, node.value, "parameters")
        for method in HTTP_METHODS:
            if method in node.value:
                self.visit(
                    NodeKind.OPERATION,
                    node.file,
                    jp.join(node.pointer, method),
                    node.value[method],
                    method,
                    node.kind,
                )

    def _walk_operation(self, node: Node) -> None:
        self._visit_children(NodeKind.PARAMETER, node, node.value, "parameters")
        if "requestBody" in node.value:
            self.visit(
                NodeKind.REQUEST_BODY,
                node.file,
                jp.join(node.pointer, "requestBody"),
                node.value["requestBody"],
                "requestBody",
                node.kind,
            )
        self._visit_children(NodeKind.RESPONSE, node, node.value, "responses")

    def _walk_parameter(self, node: Node) -> None:
        self._visit_schema(node)
        self._visit_children(NodeKind.MEDIA_TYPE, node, node.value, "content")

    def _walk_header(self, node: Node) -> None:
        self._visit_schema(node)
        self._visit_children(NodeKind.MEDIA_TYPE, node, node.value, "content")

    def _walk_request_body(self, node: Node) -> None:
        self._visit_children(NodeKind.MEDIA_TYPE, node, node.value, "content")

    def _walk_response(self, node: Node) -> None:
        self._visit_children(NodeKind.HEADER, node, node.value, "headers")
        self._visit_children(NodeKind.MEDIA_TYPE, node, node.value, "content")

    def _walk_media_type(self, node: Node) -> None:
        self._visit_schema(node)


class RulesetConformanceChecker:
    """Walk a resolved document graph and report ruleset violations.

    Rules are passed in explicitly and never mutated. A bad node produces a
    Violation and the walk continues; every rule that applies to a node runs.
    """

    def __init__(self, rules: Sequence[RuleSpec] = DEFAULT_RULES, config: LintConfig | None = None):
        self.rules = tuple(rules)
        self.config = config or LintConfig()

    def check(self, graph: DocumentGraph) -> list[Violation]:
        """Return violations ordered by file (entry, paths/, components/) then traversal."""
        ctx = CheckContext(graph=graph, config=self.config)
        nodes = GraphWalker(graph).walk()

        collected: list[tuple[int, str, int, Violation]] = []
        for seq, node in enumerate(nodes):
            for rule in self.rules:
                if node.kind not in rule.kinds:
                    continue
                for finding in rule.predicate(node, ctx):
                    file = finding.file or node.file
                    rel = graph.relpath(file)
                    collected.append(
                        (
                            graph.area(file),
                            rel,
                            seq,
                            Violation(
                                rule_id=rule.id,
                                file_path=rel,
                                json_pointer=finding.pointer,
                                message=rule.render(finding.params),
                                severity=rule.severity,
                            ),
                        )
                    )

        # Stable sort keeps rule order for findings on the same node
        collected.sort(key=lambda item: item[:3])
        violations = [item[3] for item in collected]

        logger.debug(
            "Checked %d node(s) with %d rule(s): %d violation(s)",
            len(nodes),
            len(self.rules),
            len(violations),
        )
        return violations
