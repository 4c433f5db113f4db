"""Data models for nodes of an OpenAPI document graph."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class NodeKind(str, Enum):
    """OpenAPI object kinds the checker knows how to reach."""

    FILE = "file"  # a candidate file on disk, loaded or not
    ROOT = "root"  # the entry document
    PATH_ITEM = "path_item"
    OPERATION = "operation"
    PARAMETER = "parameter"
    REQUEST_BODY = "request_body"
    RESPONSE = "response"
    MEDIA_TYPE = "media_type"
    SCHEMA = "schema"
    HEADER = "header"
    SECURITY_SCHEME = "security_scheme"


# Operation keys allowed inside a path item
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# components.<section> -> kind of each entry
COMPONENT_SECTIONS = {
    "schemas": NodeKind.SCHEMA,
    "requestBodies": NodeKind.REQUEST_BODY,
    "responses": NodeKind.RESPONSE,
    "parameters": NodeKind.PARAMETER,
    "headers": NodeKind.HEADER,
    "securitySchemes": NodeKind.SECURITY_SCHEME,
}


@dataclass(frozen=True)
class Node:
    """A node reached while walking the graph, tagged with its provenance."""

    kind: NodeKind
    file: Path  # absolute path of the source file
    pointer: str  # RFC 6901 pointer inside `file` ("" = whole document)
    value: Any  # parsed YAML/JSON value (None for unloaded files)
    name: str | None = None  # key the node was reached under, if any
    parent: NodeKind | None = None  # kind of the node it was reached from

    @property
    def is_inline(self) -> bool:
        """True for a mapping body that is not a bare reference."""
        return isinstance(self.value, dict) and "$ref" not in self.value
