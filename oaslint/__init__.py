"""oaslint - conformance checker for modular OpenAPI contracts."""

__version__ = "0.1.0"
