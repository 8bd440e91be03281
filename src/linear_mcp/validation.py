"""Argument validation beyond JSON-schema shape checks.

Each tool declares an ordered list of rules. validate_arguments() runs them
against the raw argument dict and then parses the result into the tool's
pydantic model, so handlers only ever see typed arguments. Messages name the
offending field and, for list fields, include a literal example the caller
can copy on retry.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from . import schemas
from .errors import ValidationError

logger = logging.getLogger("linear-mcp.validation")

_MISSING = object()


def lookup(arguments: dict, path: str) -> Any:
    """Resolve a dotted path like ``project.teamIds``; returns _MISSING if absent."""
    value: Any = arguments
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def is_present(arguments: dict, path: str) -> bool:
    value = lookup(arguments, path)
    return value is not _MISSING and value is not None


def _is_filled(value: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    if isinstance(value, (str, list, dict)):
        return len(value) > 0
    return True


# ============================================================================
# Rules
# ============================================================================

@dataclass(frozen=True)
class Required:
    """Each listed field must be present and not None."""
    fields: tuple[str, ...]

    def check(self, arguments: dict) -> None:
        for name in self.fields:
            if not is_present(arguments, name):
                raise ValidationError(f"missing field {name}", field=name)


@dataclass(frozen=True)
class NonEmptyList:
    """Field must be a list with at least one element."""
    field: str
    description: str
    example: str

    def check(self, arguments: dict) -> None:
        value = lookup(arguments, self.field)
        if not isinstance(value, list) or not value:
            raise ValidationError(
                f"{self.field} must be {self.description} with at least one item.\n"
                f"Example:\n{self.example}",
                field=self.field,
            )


@dataclass(frozen=True)
class ListOf:
    """Field must be a list; empty is allowed."""
    field: str
    description: str
    example: str

    def check(self, arguments: dict) -> None:
        if not isinstance(lookup(arguments, self.field), list):
            raise ValidationError(
                f"{self.field} parameter must be {self.description}.\nExample: {self.example}",
                field=self.field,
            )


@dataclass(frozen=True)
class ItemsRequire:
    """Every object in a list field must carry ``item_field``."""
    field: str
    item_field: str
    label: str = "Item"
    hint: str = ""

    def check(self, arguments: dict) -> None:
        items = lookup(arguments, self.field)
        if not isinstance(items, list):
            return
        for index, item in enumerate(items):
            if not isinstance(item, dict) or not _is_filled(item.get(self.item_field)):
                message = f"{self.label} at index {index} is missing required {self.item_field}"
                if self.hint:
                    message += f".\n{self.hint}"
                raise ValidationError(message, field=f"{self.field}.{index}.{self.item_field}")


@dataclass(frozen=True)
class OneOf:
    """At least one of the fields must be present and non-empty."""
    fields: tuple[str, ...]
    message: str

    def check(self, arguments: dict) -> None:
        if not any(_is_filled(lookup(arguments, name)) for name in self.fields):
            raise ValidationError(self.message, field=" or ".join(self.fields))


@dataclass(frozen=True)
class NonEmptyObject:
    """Field must be an object with at least one non-null entry."""
    field: str
    example: str

    def check(self, arguments: dict) -> None:
        value = lookup(arguments, self.field)
        if not isinstance(value, dict) or not any(v is not None for v in value.values()):
            raise ValidationError(
                f"{self.field} must be an object with at least one field to change.\n"
                f"Example: {self.example}",
                field=self.field,
            )


@dataclass(frozen=True)
class TeamMembership:
    """Advisory: each item's team should be one of the parent's teams.

    Never fails; a mismatch is logged because Linear decides whether a
    project may hold issues from a team it does not list.
    """
    items_field: str
    item_field: str
    parent_field: str

    def check(self, arguments: dict) -> None:
        items = lookup(arguments, self.items_field)
        allowed = lookup(arguments, self.parent_field)
        if not isinstance(items, list) or not isinstance(allowed, list):
            return
        for index, item in enumerate(items):
            if isinstance(item, dict) and item.get(self.item_field) not in allowed:
                logger.warning(
                    f"{self.items_field}[{index}].{self.item_field}={item.get(self.item_field)!r} "
                    f"is not listed in {self.parent_field}"
                )


# ============================================================================
# Per-tool rule sets
# ============================================================================

_PROJECT_EXAMPLE = """{
  project: {
    name: "Project Name",
    teamIds: ["team-id-1"]
  },
  issues: [{ title: "Issue Title", teamId: "team-id-1" }]
}"""

_ISSUES_EXAMPLE = """{
  teamId: "team-id-1",
  issues: [{ title: "First issue" }, { title: "Second issue", priority: 2 }]
}"""

TOOL_RULES: dict[str, tuple[list, type[schemas.ToolArguments]]] = {
    "linear_auth": (
        [Required(("clientId", "clientSecret", "redirectUri"))],
        schemas.AuthArgs,
    ),
    "linear_auth_callback": ([Required(("code",))], schemas.AuthCallbackArgs),
    "linear_create_issue": (
        [Required(("teamId", "title", "description"))],
        schemas.CreateIssueArgs,
    ),
    "linear_create_issues": (
        [
            Required(("teamId", "issues")),
            NonEmptyList("issues", "an array of issue objects", _ISSUES_EXAMPLE),
            ItemsRequire("issues", "title", label="Issue"),
        ],
        schemas.CreateIssuesArgs,
    ),
    "linear_create_project_with_issues": (
        [
            Required(("project", "issues")),
            Required(("project.name",)),
            NonEmptyList("project.teamIds", "an array of team IDs", _PROJECT_EXAMPLE),
            ListOf(
                "issues",
                "an array of issue objects",
                'issues: [{ title: "Issue Title", teamId: "team-id-1" }]',
            ),
            ItemsRequire(
                "issues", "teamId", label="Issue",
                hint="Each issue must have a teamId that matches one of the project teamIds.",
            ),
            ItemsRequire("issues", "title", label="Issue"),
            TeamMembership("issues", "teamId", "project.teamIds"),
        ],
        schemas.CreateProjectWithIssuesArgs,
    ),
    "linear_bulk_update_issues": (
        [
            Required(("issueIds", "update")),
            NonEmptyList(
                "issueIds", "an array of issue IDs",
                '{ issueIds: ["issue-id-1", "issue-id-2"], update: { stateId: "state-id" } }',
            ),
            NonEmptyObject("update", '{ stateId: "state-id", priority: 2 }'),
        ],
        schemas.BulkUpdateIssuesArgs,
    ),
    "linear_search_issues": ([Required(("query",))], schemas.SearchIssuesArgs),
    "linear_get_issue": ([Required(("issueId",))], schemas.GetIssueArgs),
    "linear_delete_issue": ([Required(("id",))], schemas.DeleteIssueArgs),
    "linear_delete_issues": (
        [
            Required(("ids",)),
            NonEmptyList(
                "ids", "an array of issue identifiers",
                '{ ids: ["ABC-123", "ABC-124"] }',
            ),
        ],
        schemas.DeleteIssuesArgs,
    ),
    "linear_get_project": ([Required(("id",))], schemas.GetProjectArgs),
    "linear_search_projects": (
        [
            OneOf(
                ("name", "query", "teamIds"),
                "At least a project name or teamIds must be provided for search",
            ),
        ],
        schemas.SearchProjectsArgs,
    ),
    "linear_get_projects": ([], schemas.GetProjectsArgs),
    "linear_get_teams": ([], schemas.EmptyArgs),
    "linear_get_user": ([], schemas.EmptyArgs),
    "linear_get_team_states": ([Required(("teamId",))], schemas.TeamArgs),
    "linear_get_team_labels": ([Required(("teamId",))], schemas.TeamArgs),
}


def validate(arguments: Any, rules: list) -> None:
    """Run rules in order; the first violation raises ValidationError."""
    if not isinstance(arguments, dict):
        raise ValidationError("Tool arguments must be a JSON object")
    for rule in rules:
        rule.check(arguments)


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "arguments"


def parse_arguments(
    model: type[schemas.ToolArguments], arguments: dict
) -> schemas.ToolArguments:
    """Parse into the typed model, converting pydantic errors to ValidationError."""
    try:
        return model.model_validate(arguments)
    except PydanticValidationError as e:
        error = e.errors()[0]
        path = _field_path(error.get("loc", ()))
        if error.get("type") == "missing":
            raise ValidationError(f"missing field {path}", field=path) from e
        raise ValidationError(f"Invalid value for {path}: {error.get('msg')}", field=path) from e


def validate_arguments(tool_name: str, arguments: Optional[dict]) -> schemas.ToolArguments:
    """Validate raw arguments for a tool and return its typed argument record."""
    rules, model = TOOL_RULES[tool_name]
    arguments = {} if arguments is None else arguments
    validate(arguments, rules)
    return parse_arguments(model, arguments)
