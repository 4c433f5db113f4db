"""JSON pointer and $ref string utilities."""

from pathlib import Path
from typing import Any
from urllib.parse import unquote

# A $ref with a scheme (http:, https:, file:, urn:) is never followed
_SCHEME_SEPARATOR = "://"


def escape(token: str) -> str:
    """Escape a single reference token (RFC 6901)."""
    return str(token).replace("~", "~0").replace("/", "~1")


def unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def join(pointer: str, *tokens: Any) -> str:
    """Append tokens to a pointer: join("/paths", "/teams") -> "/paths/~1teams"."""
    for token in tokens:
        pointer = f"{pointer}/{escape(str(token))}"
    return pointer


def split(pointer: str) -> list[str]:
    """Split a pointer into unescaped tokens ("" and "/" address the document)."""
    if pointer in ("", "/"):
        return []
    if not pointer.startswith("/"):
        raise ValueError(f"JSON pointer must start with '/': {pointer!r}")
    return [unescape(t) for t in pointer[1:].split("/")]


def _child(node: Any, token: str) -> Any:
    if isinstance(node, dict):
        if token in node:
            return node[token]
        # YAML loads unquoted `200:` as int; match keys by string form
        for key, value in node.items():
            if str(key) == token:
                return value
        raise KeyError(token)
    if isinstance(node, list):
        if not token.isdigit():
            raise KeyError(token)
        index = int(token)
        if index >= len(node):
            raise KeyError(token)
        return node[index]
    raise KeyError(token)


def resolve(document: Any, pointer: str) -> Any:
    """Return the value addressed by `pointer`. Raises KeyError if absent."""
    node = document
    for token in split(pointer):
        node = _child(node, token)
    return node


def contains(document: Any, pointer: str) -> bool:
    try:
        resolve(document, pointer)
    except (KeyError, ValueError):
        return False
    return True


def is_remote(ref: str) -> bool:
    return _SCHEME_SEPARATOR in ref


def split_ref(source: Path, ref: str) -> tuple[Path, str]:
    """Resolve a $ref string against the file it appears in.

    Returns (absolute target file, pointer). A fragment-only ref ("#/a/b")
    stays in `source`.
    """
    file_part, _, fragment = ref.partition("#")
    pointer = unquote(fragment)
    if pointer and not pointer.startswith("/"):
        pointer = "/" + pointer
    if not file_part:
        return source, pointer
    target = (source.parent / unquote(file_part)).resolve()
    return target, pointer
