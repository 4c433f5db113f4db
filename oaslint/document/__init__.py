"""Document loading and graph utilities."""

from .graph import DocumentGraph, Reference
from .loader import LoadFailure, load_document

__all__ = [
    "DocumentGraph",
    "Reference",
    "LoadFailure",
    "load_document",
]
