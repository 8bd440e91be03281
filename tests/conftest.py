"""Shared fixtures: a fake gateway client and session providers."""
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure tests never pick up a real Linear token
os.environ.pop("LINEAR_ACCESS_TOKEN", None)

from linear_mcp.auth import LinearAuth
from linear_mcp.errors import AuthError
from linear_mcp.graphql_client import LinearGraphQLClient


@pytest.fixture
def gateway():
    """AsyncMock standing in for the Linear GraphQL client."""
    return AsyncMock(spec=LinearGraphQLClient)


@pytest.fixture
def auth(gateway):
    """Authenticated session whose client is the fake gateway."""
    session = MagicMock(spec=LinearAuth)
    session.current_client.return_value = gateway
    return session


@pytest.fixture
def anonymous_auth():
    """Session with no token."""
    session = MagicMock(spec=LinearAuth)
    session.current_client.side_effect = AuthError("Not authenticated with Linear.")
    return session


def make_issue(identifier: str, title: str = "Issue", state: str = "Todo", state_type: str = "unstarted") -> dict:
    return {
        "id": f"uuid-{identifier}",
        "identifier": identifier,
        "title": title,
        "url": f"https://linear.app/acme/issue/{identifier}",
        "state": {"id": f"state-{state}", "name": state, "type": state_type},
    }


def make_project(project_id: str = "project-1", name: str = "Q1 Planning", state: str = "planned") -> dict:
    return {
        "id": project_id,
        "name": name,
        "state": state,
        "url": f"https://linear.app/acme/project/{project_id}",
    }
