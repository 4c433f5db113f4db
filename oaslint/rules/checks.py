from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config import LintConfig
from ..document import pointer as jp
from ..document.graph import DocumentGraph
from ..models import Node, NodeKind
from .schema import Finding

SCHEMAS_FOLDER = "components/schemas"
REQUEST_BODIES_FOLDER = "components/request-bodies"
RESPONSES_FOLDER = "components/responses"
PARAMETERS_FOLDER = "components/parameters"
COMPONENTS_FOLDER = "components"

# Payload schemas may not be defined inline in these folders
SCHEMA_FORBIDDEN_FOLDERS = ("paths", REQUEST_BODIES_FOLDER, RESPONSES_FOLDER)

REQUEST_BODY_KEYS = frozenset({"required", "content"})
OPERATION_REQUIRED_FIELDS = ("tags", "summary", "description", "responses")
REF_SIBLINGS = frozenset({"$ref", "summary", "description"})

KEBAB_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
PASCAL_RE = re.compile(r"^(?:[A-Z][a-z0-9]*)+$")
ERROR_STATUS_RE = re.compile(r"^[45](?:[0-9]{2}|XX)$", flags=re.IGNORECASE)

# components.<section> -> required key suffix
COMPONENT_KEY_SUFFIXES = {
    "schemas": "",
    "requestBodies": "Request",
    "responses": "Response",
    "parameters": "Param",
}

# folder -> required suffix for definition keys of multi-definition files
FOLDER_KEY_SUFFIXES = {
    SCHEMAS_FOLDER: "",
    REQUEST_BODIES_FOLDER: "Request",
    RESPONSES_FOLDER: "Response",
    PARAMETERS_FOLDER: "Param",
}

# A schema with any of these keys describes a structured payload
COMPOSITE_SCHEMA_KEYS = ("properties", "items", "allOf", "oneOf", "anyOf", "additionalProperties")


@dataclass
class CheckContext:
    graph: DocumentGraph
    config: LintConfig = field(default_factory=LintConfig)
    reachable: set[Path] = field(init=False)
    fragment_targets: set[Path] = field(init=False)

    def __post_init__(self) -> None:
        self.reachable = self.graph.transitive_closure()
        # Files addressed by a top-level fragment from elsewhere (team.yaml#/Team) hold several definitions
        self.fragment_targets = {
            ref.target
            for ref in self.graph.references
            if ref.target != ref.source and len(jp.split(ref.target_pointer)) == 1
        }

    def section(self, node: Node, *tokens: str) -> tuple[Path, str, Any]:
        """Dereference a section of `node` (paths, components.<x>) that may itself be a $ref."""
        file, pointer, value = node.file, node.pointer, node.value
        for token in tokens:
            value = value.get(token) if isinstance(value, dict) else None
            file, pointer, value = self.graph.dereference(file, jp.join(pointer, token), value)
        return file, pointer, value

    def folder_of(self, path: Path, folders: tuple[str, ...]) -> str | None:
        for folder in folders:
            if self.graph.in_folder(path, folder):
                return folder
        return None

    def document_id(self, path: Path) -> str:
        """Relative path without extension: components/schemas/common/error-response."""
        return str(Path(self.graph.relpath(path)).with_suffix("").as_posix())


def _is_ref(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("$ref"), str)


def _is_ref_entry(value: Any) -> bool:
    return _is_ref(value) and set(value) <= REF_SIBLINGS


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def _is_scalar_schema(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    if any(key in value for key in COMPOSITE_SCHEMA_KEYS):
        return False
    return value.get("type") not in ("object", "array")


def predicate_mislocated_schema(node: Node, ctx: CheckContext) -> list[Finding]:
    if not node.is_inline:
        return []
    if (
        ctx.config.allow_scalar_parameter_schemas
        and node.parent in (NodeKind.PARAMETER, NodeKind.HEADER)
        and _is_scalar_schema(node.value)
    ):
        return []
    folder = ctx.folder_of(node.file, SCHEMA_FORBIDDEN_FOLDERS)
    if folder is None:
        return []
    return [Finding(pointer=node.pointer, params={"folder": folder})]


def predicate_inline_in_entrypoint(node: Node, ctx: CheckContext) -> list[Finding]:
    root = node.value if isinstance(node.value, dict) else {}
    findings: list[Finding] = []

    # A whole section may be a $ref to an index file
    paths = root.get("paths")
    if isinstance(paths, dict) and not _is_ref_entry(paths):
        for key, value in paths.items():
            if not _is_ref_entry(value):
                findings.append(
                    Finding(
                        pointer=jp.join(node.pointer, "paths", key),
                        params={"section": "paths", "name": key},
                    )
                )

    components = root.get("components")
    if isinstance(components, dict) and not _is_ref_entry(components):
        for section, entries in components.items():
            if str(section).startswith("x-") or not isinstance(entries, dict) or _is_ref_entry(entries):
                continue
            for key, value in entries.items():
                if not _is_ref_entry(value):
                    findings.append(
                        Finding(
                            pointer=jp.join(node.pointer, "components", section, key),
                            params={"section": f"components.{section}", "name": key},
                        )
                    )

    return findings


def predicate_orphan_file(node: Node, ctx: CheckContext) -> list[Finding]:
    if node.file == ctx.graph.entry or node.file in ctx.reachable:
        return []
    return [Finding(pointer="")]


def predicate_request_body_shape(node: Node, ctx: CheckContext) -> list[Finding]:
    if not ctx.graph.in_folder(node.file, REQUEST_BODIES_FOLDER):
        return []

    body = node.value
    if not isinstance(body, dict):
        return [Finding(pointer=node.pointer, params={"problem": "is not a mapping"})]

    findings: list[Finding] = []
    problems: list[str] = []

    unexpected = [str(k) for k in body if k not in REQUEST_BODY_KEYS]
    if unexpected:
        problems.append(f"has unexpected keys: {', '.join(unexpected)}")
    content = body.get("content")
    if not isinstance(content, dict) or not content:
        problems.append("has no 'content'")
    if problems:
        findings.append(Finding(pointer=node.pointer, params={"problem": "; ".join(problems)}))

    if isinstance(content, dict):
        for media, media_obj in content.items():
            media_pointer = jp.join(node.pointer, "content", media)
            schema = media_obj.get("schema") if isinstance(media_obj, dict) else None
            if schema is None:
                findings.append(
                    Finding(pointer=media_pointer, params={"problem": f"media type '{media}' has no schema"})
                )
            elif not _is_ref(schema):
                findings.append(
                    Finding(
                        pointer=jp.join(media_pointer, "schema"),
                        params={"problem": f"media type '{media}' defines its schema inline instead of a $ref"},
                    )
                )

    return findings


def _expected_key_name(name: str, suffix: str) -> str | None:
    """Return the expected form if `name` breaks the key convention."""
    ok = PASCAL_RE.match(name) is not None
    if suffix:
        ok = ok and name.endswith(suffix) and name != suffix
    if ok:
        return None
    return f"PascalCase ending in '{suffix}'" if suffix else "PascalCase"


def _naming_file(node: Node, ctx: CheckContext) -> list[Finding]:
    if not ctx.graph.in_folder(node.file, COMPONENTS_FOLDER):
        return []

    findings: list[Finding] = []
    if not KEBAB_RE.match(node.file.stem):
        findings.append(
            Finding(
                pointer="",
                params={"subject": f"File name '{node.file.name}'", "expected": "kebab-case"},
            )
        )

    folder = ctx.folder_of(node.file, tuple(FOLDER_KEY_SUFFIXES))
    if folder is None or node.file not in ctx.fragment_targets or not isinstance(node.value, dict):
        return findings
    suffix = FOLDER_KEY_SUFFIXES[folder]
    for key in node.value:
        name = str(key)
        if name.startswith("x-"):
            continue
        expected = _expected_key_name(name, suffix)
        if expected:
            findings.append(
                Finding(
                    pointer=jp.join("", key),
                    params={"subject": f"Definition key '{name}' in {folder}/", "expected": expected},
                )
            )
    return findings


def predicate_naming(node: Node, ctx: CheckContext) -> list[Finding]:
    if node.kind == NodeKind.FILE:
        return _naming_file(node, ctx)

    findings: list[Finding] = []
    for section, suffix in COMPONENT_KEY_SUFFIXES.items():
        file, pointer, entries = ctx.section(node, "components", section)
        if not isinstance(entries, dict):
            continue
        for key in entries:
            name = str(key)
            expected = _expected_key_name(name, suffix)
            if expected:
                findings.append(
                    Finding(
                        pointer=jp.join(pointer, key),
                        params={"subject": f"components.{section} key '{name}'", "expected": expected},
                        file=file,
                    )
                )
    return findings


def predicate_incomplete_operation(node: Node, ctx: CheckContext) -> list[Finding]:
    operation = node.value if isinstance(node.value, dict) else {}
    findings: list[Finding] = []

    for name in OPERATION_REQUIRED_FIELDS:
        value = operation.get(name)
        if name == "tags":
            missing = not isinstance(value, list) or all(_is_blank(t) for t in value)
        elif name == "responses":
            missing = not isinstance(value, dict) or not value
        else:
            missing = not isinstance(value, str) or not value.strip()
        if missing:
            findings.append(Finding(pointer=node.pointer, params={"field": name, "method": node.name or ""}))

    return findings


def _references_error_schema(media_obj: Any, file: Path, pointer: str, ctx: CheckContext) -> bool:
    if not isinstance(media_obj, dict):
        return False
    schema = media_obj.get("schema")
    if not _is_ref(schema):
        return False
    target, _, _ = ctx.graph.dereference(file, jp.join(pointer, "schema"), schema)
    return ctx.document_id(target) == ctx.config.error_schema


def predicate_non_reusable_error(node: Node, ctx: CheckContext) -> list[Finding]:
    operation = node.value if isinstance(node.value, dict) else {}
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return []

    findings: list[Finding] = []
    for status, response in responses.items():
        code = str(status)
        if not ERROR_STATUS_RE.match(code):
            continue
        pointer = jp.join(node.pointer, "responses", code)

        if _is_ref(response):
            target, _, _ = ctx.graph.dereference(node.file, pointer, response)
            if ctx.graph.in_folder(target, RESPONSES_FOLDER):
                continue
            reason = f"references {ctx.graph.relpath(target)} instead of a shared response"
        else:
            content = response.get("content") if isinstance(response, dict) else None
            if isinstance(content, dict) and content and all(
                _references_error_schema(media_obj, node.file, jp.join(pointer, "content", media), ctx)
                for media, media_obj in content.items()
            ):
                continue
            reason = "is defined inline"

        findings.append(Finding(pointer=pointer, params={"status": code, "reason": reason}))

    return findings
