"""Tests for tool argument validation."""
import logging

import pytest

from linear_mcp import schemas
from linear_mcp.errors import ErrorKind, ValidationError
from linear_mcp.validation import (
    ItemsRequire,
    NonEmptyList,
    OneOf,
    Required,
    TOOL_RULES,
    validate,
    validate_arguments,
)
from linear_mcp.dispatcher import HANDLERS


class TestRules:
    """Test individual validation rules."""

    def test_required_names_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate({"title": "x"}, [Required(("teamId", "title"))])

        assert str(exc_info.value) == "missing field teamId"
        assert exc_info.value.field == "teamId"
        assert exc_info.value.kind == ErrorKind.VALIDATION

    def test_required_treats_none_as_missing(self):
        with pytest.raises(ValidationError, match="missing field code"):
            validate({"code": None}, [Required(("code",))])

    def test_required_resolves_dotted_paths(self):
        with pytest.raises(ValidationError, match="missing field project.name"):
            validate({"project": {"teamIds": ["t"]}}, [Required(("project.name",))])

    @pytest.mark.parametrize("value", [None, "team-1", [], {}])
    def test_non_empty_list_rejects_non_lists_and_empty(self, value):
        arguments = {} if value is None else {"ids": value}
        rule = NonEmptyList("ids", "an array of issue identifiers", '{ ids: ["ABC-1"] }')

        with pytest.raises(ValidationError) as exc_info:
            validate(arguments, [rule])

        message = str(exc_info.value)
        assert "ids must be an array of issue identifiers" in message
        assert 'Example:\n{ ids: ["ABC-1"] }' in message

    def test_items_require_reports_zero_based_index(self):
        arguments = {"issues": [{"teamId": "a"}, {"teamId": "b"}, {"title": "no team"}]}

        with pytest.raises(ValidationError) as exc_info:
            validate(arguments, [ItemsRequire("issues", "teamId", label="Issue")])

        assert str(exc_info.value) == "Issue at index 2 is missing required teamId"
        assert exc_info.value.field == "issues.2.teamId"

    def test_one_of_names_every_alternative(self):
        rule = OneOf(("name", "teamIds"), "At least a project name or teamIds must be provided for search")

        with pytest.raises(ValidationError) as exc_info:
            validate({"teamIds": []}, [rule])

        assert "name" in str(exc_info.value)
        assert "teamIds" in str(exc_info.value)

    def test_one_of_accepts_any_member(self):
        rule = OneOf(("name", "teamIds"), "either")
        validate({"teamIds": ["team-1"]}, [rule])  # Should not raise

    def test_non_dict_arguments_rejected(self):
        with pytest.raises(ValidationError, match="JSON object"):
            validate(["not", "an", "object"], [])


class TestToolRules:
    """Test per-tool rule sets and typed parsing."""

    def test_every_dispatched_tool_has_rules(self):
        assert set(TOOL_RULES) == set(HANDLERS)

    def test_create_project_requires_team_ids_with_example(self):
        arguments = {"project": {"name": "Q1", "teamIds": []}, "issues": []}

        with pytest.raises(ValidationError) as exc_info:
            validate_arguments("linear_create_project_with_issues", arguments)

        message = str(exc_info.value)
        assert "project.teamIds" in message
        assert 'teamIds: ["team-id-1"]' in message

    def test_create_project_issue_without_team_fails_with_index(self):
        arguments = {
            "project": {"name": "Q1", "teamIds": ["team-1"]},
            "issues": [{"title": "A", "teamId": "team-1"}, {"title": "B"}],
        }

        with pytest.raises(ValidationError, match="Issue at index 1 is missing required teamId"):
            validate_arguments("linear_create_project_with_issues", arguments)

    def test_issues_must_be_a_list(self):
        arguments = {"project": {"name": "Q1", "teamIds": ["team-1"]}, "issues": {"title": "A"}}

        with pytest.raises(ValidationError, match="issues parameter must be an array"):
            validate_arguments("linear_create_project_with_issues", arguments)

    def test_team_mismatch_is_advisory(self, caplog):
        arguments = {
            "project": {"name": "Q1", "teamIds": ["team-1"]},
            "issues": [{"title": "A", "teamId": "team-2"}],
        }

        with caplog.at_level(logging.WARNING, logger="linear-mcp.validation"):
            args = validate_arguments("linear_create_project_with_issues", arguments)

        assert isinstance(args, schemas.CreateProjectWithIssuesArgs)
        assert args.issues[0].team_id == "team-2"
        assert "not listed in project.teamIds" in caplog.text

    def test_create_issues_only_title_required(self):
        args = validate_arguments(
            "linear_create_issues",
            {"teamId": "team-1", "issues": [{"title": "A"}, {"title": "B", "priority": 2}]},
        )

        assert [issue.title for issue in args.issues] == ["A", "B"]
        assert args.issues[0].to_input() == {"title": "A"}
        assert args.issues[1].to_input() == {"title": "B", "priority": 2}

    def test_create_issues_item_without_title(self):
        with pytest.raises(ValidationError, match="Issue at index 1 is missing required title"):
            validate_arguments("linear_create_issues", {"teamId": "t", "issues": [{"title": "A"}, {}]})

    def test_bulk_update_requires_a_field_to_change(self):
        with pytest.raises(ValidationError, match="update must be an object with at least one field"):
            validate_arguments("linear_bulk_update_issues", {"issueIds": ["a"], "update": {}})

    def test_bulk_update_dumps_camel_case(self):
        args = validate_arguments(
            "linear_bulk_update_issues",
            {"issueIds": ["a", "b"], "update": {"stateId": "done", "priority": 1}},
        )

        assert args.issue_ids == ["a", "b"]
        assert args.update.to_input() == {"stateId": "done", "priority": 1}

    def test_pydantic_type_errors_become_validation_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(
                "linear_create_issue",
                {"teamId": "t", "title": "x", "description": "d", "priority": 9},
            )

        assert exc_info.value.field == "priority"
        assert "Invalid value for priority" in str(exc_info.value)

    def test_search_projects_accepts_query_alias(self):
        args = validate_arguments("linear_search_projects", {"query": "roadmap", "limit": 5})

        assert args.name == "roadmap"
        assert args.first == 5
        assert args.include_archived is False

    def test_none_arguments_treated_as_empty(self):
        args = validate_arguments("linear_get_teams", None)
        assert isinstance(args, schemas.EmptyArgs)
