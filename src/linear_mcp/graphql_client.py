"""Async GraphQL client for the Linear API.

Each method sends one GraphQL document and returns the ``data`` payload
unchanged: mutations return a ``{success, <entity>}`` wrapper, queries return
the plain query result. Transport, HTTP and GraphQL errors are raised as
GatewayError; nothing is retried here.
"""
import logging
from typing import Any, Optional

import httpx

from .errors import GatewayError

logger = logging.getLogger("linear-mcp.graphql")

LINEAR_API_URL = "https://api.linear.app/graphql"


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------

_ISSUE_FIELDS = """
  id
  identifier
  title
  description
  priority
  url
  createdAt
  updatedAt
  state { id name type }
  team { id name key }
  assignee { id name email }
  project { id name }
  labels { nodes { id name } }
"""

_PROJECT_FIELDS = """
  id
  name
  description
  state
  url
  progress
  startDate
  targetDate
  createdAt
  updatedAt
  teams { nodes { id name key } }
  lead { id name email }
"""

# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

_CREATE_ISSUE_MUTATION = """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue { %s }
  }
}
""" % _ISSUE_FIELDS

_CREATE_ISSUES_MUTATION = """
mutation CreateIssues($input: IssueBatchCreateInput!) {
  issueBatchCreate(input: $input) {
    success
    issues { %s }
  }
}
""" % _ISSUE_FIELDS

_CREATE_PROJECT_MUTATION = """
mutation CreateProject($input: ProjectCreateInput!) {
  projectCreate(input: $input) {
    success
    project { %s }
  }
}
""" % _PROJECT_FIELDS

_UPDATE_ISSUES_MUTATION = """
mutation UpdateIssues($ids: [UUID!]!, $input: IssueUpdateInput!) {
  issueBatchUpdate(ids: $ids, input: $input) {
    success
    issues { %s }
  }
}
""" % _ISSUE_FIELDS

# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

_SEARCH_ISSUES_QUERY = """
query SearchIssues($filter: IssueFilter, $first: Int, $includeArchived: Boolean) {
  issues(filter: $filter, first: $first, includeArchived: $includeArchived) {
    nodes { %s }
  }
}
""" % _ISSUE_FIELDS

_SEARCH_PROJECTS_QUERY = """
query SearchProjects($filter: ProjectFilter, $first: Int, $includeArchived: Boolean) {
  projects(filter: $filter, first: $first, includeArchived: $includeArchived) {
    nodes { %s }
  }
}
""" % _PROJECT_FIELDS

_GET_ISSUE_QUERY = """
query GetIssue($id: String!) {
  issue(id: $id) { %s }
}
""" % _ISSUE_FIELDS

_GET_PROJECT_QUERY = """
query GetProject($id: String!) {
  project(id: $id) {
    %s
    members { nodes { id name email } }
  }
}
""" % _PROJECT_FIELDS

_GET_TEAMS_QUERY = """
query GetTeams {
  teams {
    nodes { id name key description }
  }
}
"""

_GET_TEAM_STATES_QUERY = """
query GetTeamStates($id: String!) {
  team(id: $id) {
    id
    name
    states { nodes { id name type color position } }
  }
}
"""

_GET_TEAM_LABELS_QUERY = """
query GetTeamLabels($id: String!) {
  team(id: $id) {
    id
    name
    labels { nodes { id name color description } }
  }
}
"""

_GET_USER_QUERY = """
query GetViewer {
  viewer { id name email displayName active admin }
}
"""


def graphql_error(errors: list[dict[str, Any]], status_code: Optional[int] = None) -> GatewayError:
    """Collapse a GraphQL ``errors`` array into one GatewayError."""
    messages = [e.get("message", str(e)) for e in errors]
    extensions = errors[0].get("extensions") or {}
    return GatewayError("; ".join(messages), code=extensions.get("code"), status_code=status_code)


def _build_delete_mutation(count: int) -> str:
    """One aliased issueDelete per id, so a single request deletes the batch."""
    params = ", ".join(f"$id{i}: String!" for i in range(count))
    fields = "\n".join(f"  d{i}: issueDelete(id: $id{i}) {{ success }}" for i in range(count))
    return f"mutation DeleteIssues({params}) {{\n{fields}\n}}"


class LinearGraphQLClient:
    """Thin async wrapper around Linear's GraphQL endpoint."""

    def __init__(
        self,
        access_token: str,
        *,
        bearer: bool = False,
        api_url: str = LINEAR_API_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        # Personal API keys go in the header as-is, OAuth tokens need the Bearer prefix
        self._authorization = f"Bearer {access_token}" if bearer else access_token
        self._api_url = api_url
        self._timeout = timeout
        self._http_client = http_client

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._authorization,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Send one GraphQL document and return its data payload."""
        data, _ = await self.execute_partial(query, variables, allow_partial=False)
        return data

    async def execute_partial(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        *,
        allow_partial: bool = True,
    ) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        """Send one GraphQL document and return ``(data, errors)``.

        With ``allow_partial`` a response carrying both ``data`` and ``errors``
        is returned as-is instead of raising, so callers batching independent
        fields can tell which of them succeeded.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self._api_url, json=payload, headers=self._headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._api_url, json=payload, headers=self._headers)
        except httpx.TimeoutException as e:
            raise GatewayError(f"Request to Linear timed out: {e}") from e
        except httpx.RequestError as e:
            raise GatewayError(f"Connection to Linear failed: {e}") from e

        return self._handle_response(response, allow_partial)

    def _handle_response(
        self, response: httpx.Response, allow_partial: bool = False
    ) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        try:
            body = response.json()
        except ValueError:
            body = None

        # Linear reports GraphQL errors with HTTP 200 or 400 depending on the error
        if isinstance(body, dict) and body.get("errors"):
            errors = body["errors"]
            error = graphql_error(errors, response.status_code)
            logger.warning(f"GraphQL error (HTTP {response.status_code}): {error.message}")
            if allow_partial and isinstance(body.get("data"), dict):
                return body["data"], errors
            raise error

        if response.status_code >= 400:
            detail = response.text or response.reason_phrase
            raise GatewayError(
                f"Linear API error (HTTP {response.status_code}): {detail}",
                status_code=response.status_code,
            )

        if not isinstance(body, dict) or "data" not in body:
            raise GatewayError("Linear API returned a response without data", status_code=response.status_code)

        return body["data"], []

    # --- Issues ---

    async def create_issue(self, issue: dict[str, Any]) -> dict[str, Any]:
        return await self.execute(_CREATE_ISSUE_MUTATION, {"input": issue})

    async def create_issues(self, issues: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.execute(_CREATE_ISSUES_MUTATION, {"input": {"issues": issues}})

    async def update_issues(self, ids: list[str], update: dict[str, Any]) -> dict[str, Any]:
        return await self.execute(_UPDATE_ISSUES_MUTATION, {"ids": ids, "input": update})

    async def delete_issues(self, ids: list[str]) -> dict[str, Any]:
        """Delete every issue in one request.

        Returns ``{"issueBatchDelete": {"success": bool, "results": {id: bool},
        "errors": {id: message}}}`` so callers can name the ids that were not
        deleted. Each alias is its own mutation, so a failed id does not undo
        the others; when nothing was deleted the GraphQL error is raised.
        """
        variables = {f"id{i}": issue_id for i, issue_id in enumerate(ids)}
        data, errors = await self.execute_partial(_build_delete_mutation(len(ids)), variables)

        aliases = {f"d{i}": issue_id for i, issue_id in enumerate(ids)}
        results = {
            issue_id: bool((data.get(alias) or {}).get("success"))
            for alias, issue_id in aliases.items()
        }
        if errors and not any(results.values()):
            raise graphql_error(errors)

        failures: dict[str, str] = {}
        for error in errors:
            path = error.get("path") or []
            issue_id = aliases.get(path[0]) if path else None
            if issue_id is not None:
                failures[issue_id] = error.get("message", "unknown error")

        return {
            "issueBatchDelete": {
                "success": all(results.values()),
                "results": results,
                "errors": failures,
            }
        }

    async def search_issues(
        self,
        filter: dict[str, Any],
        first: int = 50,
        include_archived: bool = False,
    ) -> dict[str, Any]:
        variables = {"filter": filter, "first": first, "includeArchived": include_archived}
        return await self.execute(_SEARCH_ISSUES_QUERY, variables)

    async def get_issue(self, issue_id: str) -> dict[str, Any]:
        return await self.execute(_GET_ISSUE_QUERY, {"id": issue_id})

    # --- Projects ---

    async def create_project(self, project: dict[str, Any]) -> dict[str, Any]:
        return await self.execute(_CREATE_PROJECT_MUTATION, {"input": project})

    async def search_projects(
        self,
        filter: dict[str, Any],
        first: int = 50,
        include_archived: bool = False,
    ) -> dict[str, Any]:
        variables = {"filter": filter, "first": first, "includeArchived": include_archived}
        return await self.execute(_SEARCH_PROJECTS_QUERY, variables)

    async def get_project(self, project_id: str) -> dict[str, Any]:
        return await self.execute(_GET_PROJECT_QUERY, {"id": project_id})

    # --- Teams & users ---

    async def get_teams(self) -> dict[str, Any]:
        return await self.execute(_GET_TEAMS_QUERY)

    async def get_team_states(self, team_id: str) -> dict[str, Any]:
        return await self.execute(_GET_TEAM_STATES_QUERY, {"id": team_id})

    async def get_team_labels(self, team_id: str) -> dict[str, Any]:
        return await self.execute(_GET_TEAM_LABELS_QUERY, {"id": team_id})

    async def get_user(self) -> dict[str, Any]:
        return await self.execute(_GET_USER_QUERY)
