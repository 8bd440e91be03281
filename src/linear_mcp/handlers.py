"""Linear MCP tool handlers.

All handlers follow a consistent pattern:
- Accept: arguments dict and the LinearAuth session provider
- Acquire a gateway client first (AuthError before any argument is read),
  then validate arguments into the tool's typed record
- Call the gateway sequentially, threading ids from earlier calls into later ones
- Return: a ResponseEnvelope built with the formatters module

Any failure is classified at the handler boundary and re-raised as a single
ToolError. Nothing is retried and nothing is rolled back.
"""
import functools
import logging
from typing import Any, Awaitable, Callable, Optional

from . import formatters
from .auth import LinearAuth
from .errors import (
    NotFoundError,
    PartialFailureError,
    ToolError,
    UpstreamError,
    classify_error,
)
from .formatters import ResponseEnvelope, json_response, text_response
from .validation import validate_arguments

logger = logging.getLogger("linear-mcp.handlers")

Handler = Callable[[dict, LinearAuth], Awaitable[ResponseEnvelope]]

DEFAULT_SEARCH_LIMIT = 50

# Entities in these states are hidden from searches unless includeArchived is set
ARCHIVED_STATES = frozenset({"archived", "canceled", "completed"})


def handles(operation: str) -> Callable[[Handler], Handler]:
    """Classify every failure raised by the wrapped handler."""
    def decorator(func: Handler) -> Handler:
        @functools.wraps(func)
        async def wrapper(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
            try:
                return await func(arguments, auth)
            except ToolError:
                raise
            except Exception as exc:
                raise classify_error(exc, operation) from exc
        return wrapper
    return decorator


def _require_success(result: dict, key: str, operation: str) -> dict:
    """Unwrap a mutation payload, failing when Linear reports success=false."""
    payload = result.get(key) or {}
    if not payload.get("success"):
        raise UpstreamError(
            f"Failed to {operation}: Linear reported the {key} mutation as unsuccessful",
            operation=operation,
        )
    return payload


async def _lookup(call: Awaitable[dict], operation: str) -> Optional[dict]:
    """Await a lookup, returning None when the entity does not exist."""
    try:
        return await call
    except Exception as exc:
        error = classify_error(exc, operation)
        if isinstance(error, NotFoundError):
            logger.info(f"{operation}: entity not found ({exc})")
            return None
        raise error from exc


def _state_labels(entity: dict) -> set[str]:
    state = entity.get("state")
    if isinstance(state, str):
        return {state.lower()}
    if isinstance(state, dict):
        return {str(value).lower() for value in (state.get("name"), state.get("type")) if value}
    return set()


def exclude_archived(nodes: list[dict]) -> list[dict]:
    """Drop entities whose state name or type is archived, canceled or completed."""
    return [node for node in nodes if not (_state_labels(node) & ARCHIVED_STATES)]


def _nodes(result: dict, key: str) -> list[dict]:
    return (result.get(key) or {}).get("nodes") or []


# ============================================================================
# Auth Handlers
# ============================================================================

@handles("initialize OAuth flow")
async def handle_auth(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    """Start the OAuth authorization-code flow and return the URL to visit."""
    args = validate_arguments("linear_auth", arguments)
    url = auth.initialize_oauth(args.client_id, args.client_secret, args.redirect_uri)
    return text_response(
        "Please visit the following URL to authorize the application:",
        url,
        "",
        "After authorizing, call linear_auth_callback with the code from the redirect.",
    )


@handles("complete OAuth flow")
async def handle_auth_callback(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    args = validate_arguments("linear_auth_callback", arguments)
    await auth.handle_callback(args.code, args.state)
    return text_response("Successfully authenticated with Linear")


# ============================================================================
# Issue Handlers
# ============================================================================

@handles("create issue")
async def handle_create_issue(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_create_issue", arguments)

    result = await client.create_issue(args.to_input())
    payload = _require_success(result, "issueCreate", "create issue")
    issue = payload.get("issue") or {}
    logger.info(f"Successfully created issue {issue.get('identifier')}")

    return text_response("Successfully created issue", formatters.format_issue(issue))


@handles("create issues")
async def handle_create_issues(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    """Create several issues in one team with a single batched call.

    Only ``title`` is required per issue; every item inherits the top-level teamId.
    """
    client = auth.current_client()
    args = validate_arguments("linear_create_issues", arguments)

    inputs = [{**issue.to_input(), "teamId": args.team_id} for issue in args.issues]
    result = await client.create_issues(inputs)
    payload = _require_success(result, "issueBatchCreate", "create issues")
    issues = payload.get("issues") or []
    logger.info(f"Successfully created {len(issues)} issues in team {args.team_id}")

    return text_response(
        f"Successfully created {len(issues)} issues",
        *[formatters.format_issue_line(issue) for issue in issues],
    )


@handles("update issues")
async def handle_bulk_update_issues(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    """Apply one update payload to every listed issue.

    Linear's batch update succeeds or fails as a whole and reports no
    per-issue outcome, so neither does this handler.
    """
    client = auth.current_client()
    args = validate_arguments("linear_bulk_update_issues", arguments)

    update = args.update.to_input()
    result = await client.update_issues(args.issue_ids, update)
    payload = _require_success(result, "issueBatchUpdate", "update issues")
    issues = payload.get("issues") or []
    logger.info(f"Successfully updated {len(issues)} issues ({', '.join(update)})")

    return text_response(
        f"Successfully updated {len(issues)} issues",
        f"Fields changed: {', '.join(update)}",
        *[formatters.format_issue_line(issue) for issue in issues],
    )


@handles("search issues")
async def handle_search_issues(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_search_issues", arguments)

    filter: dict[str, Any] = {}
    if args.query:
        filter["or"] = [
            {"title": {"containsIgnoreCase": args.query}},
            {"description": {"containsIgnoreCase": args.query}},
        ]
    if args.team_id:
        filter["team"] = {"id": {"eq": args.team_id}}

    first = args.limit or DEFAULT_SEARCH_LIMIT
    result = await client.search_issues(filter, first, args.include_archived)

    nodes = _nodes(result, "issues")
    if not args.include_archived:
        nodes = exclude_archived(nodes)

    if not nodes:
        criteria = f" '{args.query}'" if args.query else ""
        return text_response(f"No issues found matching the search criteria{criteria}")

    return json_response({"issues": {"nodes": nodes}})


@handles("get issue")
async def handle_get_issue(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_get_issue", arguments)

    result = await _lookup(client.get_issue(args.issue_id), "get issue")
    if not result or not result.get("issue"):
        return text_response(f'Issue with ID "{args.issue_id}" does not exist')

    return json_response(result)


async def _delete_issues(client, ids: list[str]) -> list[str]:
    """Delete issues and return the deleted ids; any failed id raises."""
    result = await client.delete_issues(ids)
    batch = result.get("issueBatchDelete") or {}
    outcomes = batch.get("results") or {}
    reasons = batch.get("errors") or {}

    deleted = [issue_id for issue_id in ids if outcomes.get(issue_id)]
    failed = [issue_id for issue_id in ids if not outcomes.get(issue_id)]
    if failed and deleted:
        failed_lines = [
            f"- {issue_id}: {reasons[issue_id]}" if issue_id in reasons else f"- {issue_id}"
            for issue_id in failed
        ]
        raise PartialFailureError(
            "\n".join([
                f"Deleted {len(deleted)} of {len(ids)} issues. Deletion failed for:",
                *failed_lines,
                f"Already deleted (cannot be undone): {', '.join(deleted)}",
            ]),
            failed_step="delete issues",
            completed={"deleted": deleted, "failed": failed},
            operation="delete issues",
        )
    if failed:
        raise UpstreamError(
            f"Failed to delete issues: Linear did not delete {', '.join(failed)}",
            operation="delete issues",
        )

    logger.info(f"Successfully deleted {len(deleted)} issues")
    return deleted


@handles("delete issue")
async def handle_delete_issue(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_delete_issue", arguments)

    await _delete_issues(client, [args.id])
    return text_response(f"Successfully deleted issue {args.id}")


@handles("delete issues")
async def handle_delete_issues(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    """Delete several issues. Irreversible; confirmation is the caller's job."""
    client = auth.current_client()
    args = validate_arguments("linear_delete_issues", arguments)

    deleted = await _delete_issues(client, args.ids)
    return text_response(
        f"Successfully deleted {len(deleted)} issues",
        *[f"- {issue_id}" for issue_id in deleted],
    )


# ============================================================================
# Project Handlers
# ============================================================================

def _project_partial_failure(project: dict, reason: str, cause: Optional[BaseException] = None) -> PartialFailureError:
    return PartialFailureError(
        "Project was created but its issues were not.\n"
        f"Failed step: create issues ({reason})\n"
        f"Project ID: {project.get('id')}\n"
        f"{formatters.format_project(project)}\n"
        "The project was not deleted. Retry with linear_create_issues, "
        f"setting projectId to \"{project.get('id')}\" on each issue.",
        failed_step="create issues",
        completed={"project": {key: project.get(key) for key in ("id", "name", "url")}},
        cause=cause,
        operation="create project with issues",
    )


@handles("create project with issues")
async def handle_create_project_with_issues(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    """Create a project, then batch-create its issues scoped to it.

    If the project step fails no issue call is made. If the issue step fails
    the project stays in place and the error carries its id and URL.
    """
    client = auth.current_client()
    args = validate_arguments("linear_create_project_with_issues", arguments)

    project_result = await client.create_project(args.project.to_input())
    project_payload = project_result.get("projectCreate") or {}
    project = project_payload.get("project")
    if not project_payload.get("success") or not project:
        raise UpstreamError(
            "Failed to create project with issues: project creation was unsuccessful, "
            "no issues were created",
            operation="create project with issues",
        )
    logger.info(f"Successfully created project {project.get('name')} (ID: {project.get('id')})")

    created_issues: list[dict] = []
    if args.issues:
        inputs = [{**issue.to_input(), "projectId": project["id"]} for issue in args.issues]
        try:
            batch = await client.create_issues(inputs)
        except Exception as exc:
            reason = classify_error(exc, "create issues").message
            raise _project_partial_failure(project, reason, cause=exc) from exc

        batch_payload = batch.get("issueBatchCreate") or {}
        if not batch_payload.get("success"):
            raise _project_partial_failure(project, "Linear reported the issue batch as unsuccessful")
        created_issues = batch_payload.get("issues") or []
        logger.info(f"Successfully created {len(created_issues)} issues in project {project.get('id')}")

    lines = ["Successfully created project with issues", formatters.format_project(project)]
    if created_issues:
        lines.append(f"Issues created: {len(created_issues)}")
        lines.extend(formatters.format_issue_line(issue) for issue in created_issues)

    return text_response(*lines)


@handles("get project info")
async def handle_get_project(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_get_project", arguments)

    result = await _lookup(client.get_project(args.id), "get project info")
    if not result or not result.get("project"):
        return text_response(f'Project with ID "{args.id}" does not exist')

    project = result["project"]
    if args.include_issues:
        # Projects come back without issues; fetch them filtered by project id
        issues_result = await client.search_issues({"project": {"id": {"eq": args.id}}})
        project = {**project, "issues": _nodes(issues_result, "issues")}

    return json_response({"project": project})


async def _search_projects(client, filter: dict, first: int, include_archived: bool) -> list[dict]:
    result = await client.search_projects(filter, first, include_archived)
    nodes = _nodes(result, "projects")
    return nodes if include_archived else exclude_archived(nodes)


@handles("search projects")
async def handle_search_projects(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    """Search projects by name and/or team. One of the two is required."""
    client = auth.current_client()
    args = validate_arguments("linear_search_projects", arguments)

    filter: dict[str, Any] = {}
    if args.name:
        filter["name"] = {"containsIgnoreCase": args.name}
    if args.team_ids:
        filter["accessibleTeams"] = {"some": {"id": {"in": args.team_ids}}}

    nodes = await _search_projects(client, filter, args.first or DEFAULT_SEARCH_LIMIT, args.include_archived)
    if not nodes:
        criteria = f" '{args.name}'" if args.name else ""
        return text_response(f"No projects found matching the search criteria{criteria}")

    return json_response({"projects": {"nodes": nodes}})


@handles("get projects")
async def handle_get_projects(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_get_projects", arguments)

    filter: dict[str, Any] = {}
    if args.filter:
        filter["name"] = {"containsIgnoreCase": args.filter}
    if args.team_id:
        filter["accessibleTeams"] = {"some": {"id": {"eq": args.team_id}}}

    nodes = await _search_projects(client, filter, DEFAULT_SEARCH_LIMIT, args.include_archived)
    if not nodes:
        return text_response("No projects found")

    return json_response({"projects": {"nodes": nodes}})


# ============================================================================
# Team Handlers
# ============================================================================

@handles("get teams")
async def handle_get_teams(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    validate_arguments("linear_get_teams", arguments)
    return json_response(await client.get_teams())


@handles("get team states")
async def handle_get_team_states(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_get_team_states", arguments)

    result = await _lookup(client.get_team_states(args.team_id), "get team states")
    if not result or not result.get("team"):
        return text_response(f'Team with ID "{args.team_id}" does not exist')
    return json_response(result)


@handles("get team labels")
async def handle_get_team_labels(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    args = validate_arguments("linear_get_team_labels", arguments)

    result = await _lookup(client.get_team_labels(args.team_id), "get team labels")
    if not result or not result.get("team"):
        return text_response(f'Team with ID "{args.team_id}" does not exist')
    return json_response(result)


# ============================================================================
# User Handlers
# ============================================================================

@handles("get user info")
async def handle_get_user(arguments: dict, auth: LinearAuth) -> ResponseEnvelope:
    client = auth.current_client()
    validate_arguments("linear_get_user", arguments)
    return json_response(await client.get_user())
