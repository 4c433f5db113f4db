"""Built-in rules of the modular OpenAPI ruleset."""

from ..models import NodeKind
from .checks import (
    predicate_incomplete_operation,
    predicate_inline_in_entrypoint,
    predicate_mislocated_schema,
    predicate_naming,
    predicate_non_reusable_error,
    predicate_orphan_file,
    predicate_request_body_shape,
)
from .schema import RuleSpec

MISLOCATED_SCHEMA = "MISLOCATED_SCHEMA"
INLINE_IN_ENTRYPOINT = "INLINE_IN_ENTRYPOINT"
ORPHAN_FILE = "ORPHAN_FILE"
INVALID_REQUEST_BODY_SHAPE = "INVALID_REQUEST_BODY_SHAPE"
NAMING_VIOLATION = "NAMING_VIOLATION"
INCOMPLETE_OPERATION = "INCOMPLETE_OPERATION"
NON_REUSABLE_ERROR = "NON_REUSABLE_ERROR"


DEFAULT_RULES: tuple[RuleSpec, ...] = (
    RuleSpec(
        id=INLINE_IN_ENTRYPOINT,
        kinds=frozenset({NodeKind.ROOT}),
        predicate=predicate_inline_in_entrypoint,
        message_template="'{name}' in {section} is defined inline; the entry file may only hold $ref entries",
        summary="Entry file paths and components are $ref entries only",
    ),
    RuleSpec(
        id=MISLOCATED_SCHEMA,
        kinds=frozenset({NodeKind.SCHEMA}),
        predicate=predicate_mislocated_schema,
        message_template="Inline schema in a {folder}/ file; define it under components/schemas/ and $ref it",
        summary="Schemas live only in components/schemas/",
    ),
    RuleSpec(
        id=INVALID_REQUEST_BODY_SHAPE,
        kinds=frozenset({NodeKind.REQUEST_BODY}),
        predicate=predicate_request_body_shape,
        message_template="Request body {problem}",
        summary="Request bodies hold only 'required' and 'content' with $ref schemas",
    ),
    RuleSpec(
        id=INCOMPLETE_OPERATION,
        kinds=frozenset({NodeKind.OPERATION}),
        predicate=predicate_incomplete_operation,
        message_template="Operation '{method}' is missing a non-empty '{field}'",
        summary="Operations declare tags, summary, description and responses",
    ),
    RuleSpec(
        id=NON_REUSABLE_ERROR,
        kinds=frozenset({NodeKind.OPERATION}),
        predicate=predicate_non_reusable_error,
        message_template="{status} response {reason}; reference components/responses/ or the shared error schema",
        summary="4xx/5xx responses reuse shared error definitions",
    ),
    RuleSpec(
        id=NAMING_VIOLATION,
        kinds=frozenset({NodeKind.FILE, NodeKind.ROOT}),
        predicate=predicate_naming,
        message_template="{subject} should be {expected}",
        summary="kebab-case file names, PascalCase component keys with kind suffix",
    ),
    RuleSpec(
        id=ORPHAN_FILE,
        kinds=frozenset({NodeKind.FILE}),
        predicate=predicate_orphan_file,
        message_template="File is not reachable from the entry document through $ref",
        summary="Every components/ and paths/ file is referenced",
    ),
)


RULE_EXPLANATIONS: dict[str, str] = {
    MISLOCATED_SCHEMA: """
# MISLOCATED_SCHEMA

Payload schemas are defined once, under `components/schemas/`, and referenced
everywhere else.

**Fires when** a schema (of a media type, parameter, header or component) is
defined inline inside a file under `paths/`, `components/request-bodies/` or
`components/responses/`.

Set `[lint] allow_scalar_parameter_schemas = true` to accept inline scalar
schemas (`type: string`, `type: integer`, ...) on parameters and headers.

**Repair**: move the body into `components/schemas/<name>.yaml` and replace it
with `$ref: ../components/schemas/<name>.yaml`.
""",
    INLINE_IN_ENTRYPOINT: """
# INLINE_IN_ENTRYPOINT

The entry file is an index. Every value under `paths` and under each
`components.<section>` is a `$ref` to a file (`summary` and `description` may
accompany it). A whole section may also be a single `$ref` to an index file.

**Fires once per** inline path item or component entry in the entry file.
""",
    ORPHAN_FILE: """
# ORPHAN_FILE

Every `.yaml`, `.yml` or `.json` file under `components/` and `paths/` (next
to the entry file) is reachable by following `$ref` edges from the entry file.

**Fires once per** unreachable file. Use `[lint] exclude` globs in
`.oaslint.toml` for files kept on purpose.
""",
    INVALID_REQUEST_BODY_SHAPE: """
# INVALID_REQUEST_BODY_SHAPE

A file under `components/request-bodies/` contains only `required` and
`content`. Each media type under `content` has a `schema` that is a `$ref`.

**Fires** once per request body with unexpected keys or no `content`, and
once per media type whose schema is missing or inline.
""",
    NAMING_VIOLATION: """
# NAMING_VIOLATION

- File names under `components/` are kebab-case (`team-member.yaml`).
- `components.schemas` keys are PascalCase (`TeamMember`).
- `components.requestBodies` keys end in `Request` (`CreateTeamRequest`).
- `components.responses` keys end in `Response` (`NotFoundResponse`).
- `components.parameters` keys end in `Param` (`TeamIdParam`).
- Files holding several definitions, referenced by fragment
  (`models.yaml#/TeamModel`), follow the key rule of their folder.
""",
    INCOMPLETE_OPERATION: """
# INCOMPLETE_OPERATION

Every operation declares non-empty `tags`, `summary`, `description` and
`responses`.

**Fires once per** missing or empty field, naming the field.
""",
    NON_REUSABLE_ERROR: """
# NON_REUSABLE_ERROR

`4xx` and `5xx` responses reuse shared definitions: either a `$ref` into
`components/responses/`, or an inline response whose every media-type schema
is a `$ref` to the shared error schema
(`components/schemas/common/error-response` by default, see
`[lint] error_schema`).
""",
}


def get_rule_ids() -> list[str]:
    """Return all known rule IDs."""
    return [rule.id for rule in DEFAULT_RULES]


def get_rule(rule_id: str) -> RuleSpec | None:
    for rule in DEFAULT_RULES:
        if rule.id == rule_id:
            return rule
    return None
