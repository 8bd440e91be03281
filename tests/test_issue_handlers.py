"""Tests for issue tool handlers."""
import asyncio

import pytest

from linear_mcp import handlers
from linear_mcp.errors import (
    AuthError,
    ErrorKind,
    GatewayError,
    NotFoundError,
    PartialFailureError,
    ToolError,
    UpstreamError,
    ValidationError,
)

from .conftest import make_issue


class TestCreateIssue:
    """Test single and batch issue creation."""

    @pytest.mark.asyncio
    async def test_create_issue_formats_confirmation(self, auth, gateway):
        gateway.create_issue.return_value = {
            "issueCreate": {"success": True, "issue": make_issue("ENG-1", "Fix login")}
        }

        envelope = await handlers.handle_create_issue(
            {"teamId": "team-1", "title": "Fix login", "description": "Broken", "priority": 2}, auth
        )

        gateway.create_issue.assert_awaited_once_with(
            {"teamId": "team-1", "title": "Fix login", "description": "Broken", "priority": 2}
        )
        assert envelope.kind == "text"
        assert "Successfully created issue" in envelope.payload
        assert "Issue: ENG-1" in envelope.payload
        assert "URL: https://linear.app/acme/issue/ENG-1" in envelope.payload

    @pytest.mark.asyncio
    async def test_create_issue_unsuccessful_raises_upstream(self, auth, gateway):
        gateway.create_issue.return_value = {"issueCreate": {"success": False}}

        with pytest.raises(UpstreamError, match="Failed to create issue"):
            await handlers.handle_create_issue({"teamId": "t", "title": "x", "description": "d"}, auth)

    @pytest.mark.asyncio
    async def test_create_issue_missing_field_makes_no_gateway_call(self, auth, gateway):
        with pytest.raises(ValidationError, match="missing field description"):
            await handlers.handle_create_issue({"teamId": "t", "title": "x"}, auth)

        assert gateway.mock_calls == []

    @pytest.mark.asyncio
    async def test_auth_checked_before_arguments(self, anonymous_auth):
        """Missing session wins over missing arguments."""
        with pytest.raises(AuthError):
            await handlers.handle_create_issue({}, anonymous_auth)

    @pytest.mark.asyncio
    async def test_create_issues_single_batched_call(self, auth, gateway):
        gateway.create_issues.return_value = {
            "issueBatchCreate": {
                "success": True,
                "issues": [make_issue("ENG-1", "A"), make_issue("ENG-2", "B")],
            }
        }

        envelope = await handlers.handle_create_issues(
            {"teamId": "team-1", "issues": [{"title": "A"}, {"title": "B", "description": "b"}]}, auth
        )

        gateway.create_issues.assert_awaited_once_with([
            {"title": "A", "teamId": "team-1"},
            {"title": "B", "description": "b", "teamId": "team-1"},
        ])
        lines = envelope.payload.split("\n")
        assert lines[0] == "Successfully created 2 issues"
        assert lines[1] == "- ENG-1: A (https://linear.app/acme/issue/ENG-1)"
        assert lines[2] == "- ENG-2: B (https://linear.app/acme/issue/ENG-2)"


class TestBulkUpdateIssues:
    """Test uniform batch updates."""

    @pytest.mark.asyncio
    async def test_uniform_update_in_one_call(self, auth, gateway):
        gateway.update_issues.return_value = {
            "issueBatchUpdate": {"success": True, "issues": [make_issue("ENG-1"), make_issue("ENG-2")]}
        }

        envelope = await handlers.handle_bulk_update_issues(
            {"issueIds": ["id-1", "id-2"], "update": {"stateId": "done"}}, auth
        )

        gateway.update_issues.assert_awaited_once_with(["id-1", "id-2"], {"stateId": "done"})
        assert "Successfully updated 2 issues" in envelope.payload
        assert "Fields changed: stateId" in envelope.payload

    @pytest.mark.asyncio
    async def test_nonexistent_issue_surfaces_not_found(self, auth, gateway):
        gateway.update_issues.side_effect = GatewayError("Entity not found: Issue")

        with pytest.raises(NotFoundError) as exc_info:
            await handlers.handle_bulk_update_issues(
                {"issueIds": ["id-1", "missing"], "update": {"priority": 1}}, auth
            )

        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert "Failed to update issues" in exc_info.value.message
        assert isinstance(exc_info.value.cause, GatewayError)

    @pytest.mark.asyncio
    async def test_unsuccessful_batch_is_not_reported_as_success(self, auth, gateway):
        gateway.update_issues.return_value = {"issueBatchUpdate": {"success": False, "issues": []}}

        with pytest.raises(UpstreamError):
            await handlers.handle_bulk_update_issues({"issueIds": ["id-1"], "update": {"priority": 1}}, auth)


class TestDeleteIssues:
    """Test single and batch deletion."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [{}, {"ids": []}, {"ids": None}])
    async def test_missing_or_empty_ids_rejected(self, auth, gateway, arguments):
        with pytest.raises(ValidationError):
            await handlers.handle_delete_issues(arguments, auth)

        assert gateway.mock_calls == []

    @pytest.mark.asyncio
    async def test_delete_issues_lists_deleted_ids(self, auth, gateway):
        gateway.delete_issues.return_value = {
            "issueBatchDelete": {"success": True, "results": {"ENG-1": True, "ENG-2": True}}
        }

        envelope = await handlers.handle_delete_issues({"ids": ["ENG-1", "ENG-2"]}, auth)

        assert envelope.payload == "Successfully deleted 2 issues\n- ENG-1\n- ENG-2"

    @pytest.mark.asyncio
    async def test_partial_delete_names_both_sides(self, auth, gateway):
        gateway.delete_issues.return_value = {
            "issueBatchDelete": {"success": False, "results": {"ENG-1": True, "ENG-2": False}}
        }

        with pytest.raises(PartialFailureError) as exc_info:
            await handlers.handle_delete_issues({"ids": ["ENG-1", "ENG-2"]}, auth)

        assert "Deletion failed for:\n- ENG-2" in exc_info.value.message
        assert exc_info.value.completed == {"deleted": ["ENG-1"], "failed": ["ENG-2"]}

    @pytest.mark.asyncio
    async def test_delete_single_issue(self, auth, gateway):
        gateway.delete_issues.return_value = {
            "issueBatchDelete": {"success": True, "results": {"ENG-7": True}}
        }

        envelope = await handlers.handle_delete_issue({"id": "ENG-7"}, auth)

        gateway.delete_issues.assert_awaited_once_with(["ENG-7"])
        assert envelope.payload == "Successfully deleted issue ENG-7"

    @pytest.mark.asyncio
    async def test_delete_of_missing_issue_raises_not_found(self, auth, gateway):
        gateway.delete_issues.side_effect = GatewayError("Entity not found: Issue")

        with pytest.raises(NotFoundError):
            await handlers.handle_delete_issue({"id": "ENG-404"}, auth)


class TestSearchIssues:
    """Test issue search filters and archived exclusion."""

    @pytest.fixture
    def mixed_results(self, gateway):
        gateway.search_issues.return_value = {
            "issues": {
                "nodes": [
                    make_issue("ENG-1", state="Todo", state_type="unstarted"),
                    make_issue("ENG-2", state="Done", state_type="completed"),
                    make_issue("ENG-3", state="Canceled", state_type="canceled"),
                ]
            }
        }

    @pytest.mark.asyncio
    async def test_archived_excluded_by_default(self, auth, gateway, mixed_results):
        envelope = await handlers.handle_search_issues({"query": "login"}, auth)

        assert envelope.kind == "json"
        assert [i["identifier"] for i in envelope.payload["issues"]["nodes"]] == ["ENG-1"]

    @pytest.mark.asyncio
    async def test_include_archived_keeps_everything(self, auth, gateway, mixed_results):
        envelope = await handlers.handle_search_issues({"query": "login", "includeArchived": True}, auth)

        assert len(envelope.payload["issues"]["nodes"]) == 3

    @pytest.mark.asyncio
    async def test_filter_and_default_limit(self, auth, gateway, mixed_results):
        await handlers.handle_search_issues({"query": "login", "teamId": "team-1"}, auth)

        filter, first, include_archived = gateway.search_issues.await_args.args
        assert filter["team"] == {"id": {"eq": "team-1"}}
        assert {"title": {"containsIgnoreCase": "login"}} in filter["or"]
        assert first == handlers.DEFAULT_SEARCH_LIMIT
        assert include_archived is False

    @pytest.mark.asyncio
    async def test_empty_query_omitted_from_filter(self, auth, gateway, mixed_results):
        await handlers.handle_search_issues({"query": "", "teamId": "team-1", "limit": 5}, auth)

        filter, first, _ = gateway.search_issues.await_args.args
        assert "or" not in filter
        assert first == 5

    @pytest.mark.asyncio
    async def test_no_matches_is_text(self, auth, gateway):
        gateway.search_issues.return_value = {
            "issues": {"nodes": [make_issue("ENG-9", state="Done", state_type="completed")]}
        }

        envelope = await handlers.handle_search_issues({"query": "ghost"}, auth)

        assert envelope.kind == "text"
        assert envelope.payload == "No issues found matching the search criteria 'ghost'"


class TestGetIssue:
    """Test issue lookup."""

    @pytest.mark.asyncio
    async def test_get_issue_passthrough(self, auth, gateway):
        gateway.get_issue.return_value = {"issue": make_issue("ENG-1")}

        envelope = await handlers.handle_get_issue({"issueId": "ENG-1"}, auth)

        assert envelope.kind == "json"
        assert envelope.payload["issue"]["identifier"] == "ENG-1"

    @pytest.mark.asyncio
    async def test_missing_issue_is_text(self, auth, gateway):
        gateway.get_issue.side_effect = GatewayError("Entity not found: Issue")

        envelope = await handlers.handle_get_issue({"issueId": "ENG-404"}, auth)

        assert envelope.payload == 'Issue with ID "ENG-404" does not exist'

    @pytest.mark.asyncio
    async def test_other_failures_still_raise(self, auth, gateway):
        gateway.get_issue.side_effect = GatewayError("Rate limit exceeded", status_code=429)

        with pytest.raises(UpstreamError, match="Failed to get issue: Rate limit exceeded"):
            await handlers.handle_get_issue({"issueId": "ENG-1"}, auth)


class TestHandlerBoundary:
    """Test classification at the handler boundary."""

    @pytest.mark.asyncio
    async def test_unexpected_exception_classified(self, auth, gateway):
        gateway.get_teams.side_effect = RuntimeError("socket closed")

        with pytest.raises(ToolError) as exc_info:
            await handlers.handle_get_teams({}, auth)

        assert exc_info.value.kind == ErrorKind.UPSTREAM
        assert exc_info.value.message == "Failed to get teams: socket closed"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, auth, gateway):
        gateway.get_teams.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await handlers.handle_get_teams({}, auth)
