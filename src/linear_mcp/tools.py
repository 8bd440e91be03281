"""Linear MCP tool definitions.

The definitive list of tools exposed by the server. Names here must match the
dispatcher's handler map; argument names follow Linear's camelCase fields.
"""

from mcp.types import Tool


_PRIORITY_DESCRIPTION = (
    "Priority of the issue (0-4, where 0 is no priority, 1 is urgent, 2 is high, "
    "3 is medium, 4 is low) (optional)"
)

_ISSUE_ITEM_PROPERTIES = {
    "title": {"type": "string", "description": "Title of the issue"},
    "description": {"type": "string", "description": "Description of the issue in markdown format (optional)"},
    "assigneeId": {"type": "string", "description": "ID of the user to assign the issue to (optional)"},
    "stateId": {"type": "string", "description": "ID of the issue state (optional)"},
    "priority": {"type": "number", "description": _PRIORITY_DESCRIPTION},
    "labelIds": {
        "type": "array",
        "items": {"type": "string"},
        "description": "List of label IDs to apply to the issue (optional)"
    },
    "projectId": {"type": "string", "description": "ID of the project the issue belongs to (optional)"},
}


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for Linear."""
    return [
        # ============================================================================
        # Auth Tools
        # ============================================================================
        Tool(
            name="linear_auth",
            description="Initialize OAuth authentication flow with Linear. "
                        "This is the first step in connecting to a Linear workspace.",
            inputSchema={
                "type": "object",
                "properties": {
                    "clientId": {
                        "type": "string",
                        "description": "Your Linear OAuth client ID from the Linear developer settings"
                    },
                    "clientSecret": {
                        "type": "string",
                        "description": "Your Linear OAuth client secret from the Linear developer settings"
                    },
                    "redirectUri": {
                        "type": "string",
                        "description": "The URI where Linear should redirect after authentication"
                    }
                },
                "required": ["clientId", "clientSecret", "redirectUri"]
            }
        ),
        Tool(
            name="linear_auth_callback",
            description="Complete the OAuth flow by handling the callback from Linear with the authorization code.",
            inputSchema={
                "type": "object",
                "properties": {
                    "code": {
                        "type": "string",
                        "description": "The authorization code received from Linear after user authorization"
                    },
                    "state": {
                        "type": "string",
                        "description": "The state parameter returned in the redirect (optional)"
                    }
                },
                "required": ["code"]
            }
        ),
        # ============================================================================
        # Issue Tools
        # ============================================================================
        Tool(
            name="linear_create_issue",
            description="Create a new issue in a specified team with title, description, and optional parameters.",
            inputSchema={
                "type": "object",
                "properties": {
                    "teamId": {
                        "type": "string",
                        "description": "ID of the team where the issue will be created"
                    },
                    **_ISSUE_ITEM_PROPERTIES,
                    "description": {
                        "type": "string",
                        "description": "Description of the issue in markdown format"
                    }
                },
                "required": ["teamId", "title", "description"]
            }
        ),
        Tool(
            name="linear_create_issues",
            description="Create multiple issues at once in a single team. "
                        "More efficient than making separate calls for each issue.",
            inputSchema={
                "type": "object",
                "properties": {
                    "teamId": {
                        "type": "string",
                        "description": "ID of the team where all issues will be created"
                    },
                    "issues": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": _ISSUE_ITEM_PROPERTIES,
                            "required": ["title"]
                        },
                        "description": "List of issues to create, each with its own properties",
                        "minItems": 1
                    }
                },
                "required": ["teamId", "issues"]
            }
        ),
        Tool(
            name="linear_bulk_update_issues",
            description="Update multiple issues at once with the same field changes. "
                        "The update is applied uniformly; Linear reports no per-issue outcome.",
            inputSchema={
                "type": "object",
                "properties": {
                    "issueIds": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of issue IDs to update",
                        "minItems": 1
                    },
                    "update": {
                        "type": "object",
                        "properties": {
                            "stateId": {
                                "type": "string",
                                "description": "ID of the workflow state to set for all issues (optional)"
                            },
                            "assigneeId": {
                                "type": "string",
                                "description": "ID of the user to assign all issues to (optional)"
                            },
                            "priority": {
                                "type": "number",
                                "description": "Priority level to set for all issues (0-4) (optional)"
                            },
                            "labelIds": {
                                "type": "array",
                                "items": {"type": "string"},
                                "description": "List of label IDs to apply to all issues (optional)"
                            },
                            "title": {
                                "type": "string",
                                "description": "New title to set for all issues (optional)"
                            },
                            "description": {
                                "type": "string",
                                "description": "New description in markdown format to set for all issues (optional)"
                            },
                            "projectId": {
                                "type": "string",
                                "description": "ID of the project to move all issues to (optional)"
                            }
                        }
                    }
                },
                "required": ["issueIds", "update"]
            }
        ),
        Tool(
            name="linear_search_issues",
            description="Search for issues by title or description. Canceled and completed issues are "
                        "excluded unless includeArchived is true.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Text to search for in issue titles and descriptions"
                    },
                    "teamId": {
                        "type": "string",
                        "description": "Filter issues to a specific team (optional)"
                    },
                    "limit": {
                        "type": "number",
                        "description": "Maximum number of issues to return (default: 50)"
                    },
                    "includeArchived": {
                        "type": "boolean",
                        "description": "Whether to include archived, canceled and completed issues (default: false)"
                    }
                },
                "required": ["query"]
            }
        ),
        Tool(
            name="linear_get_issue",
            description="Get detailed information about a specific issue including its description, "
                        "assignee, status, and more.",
            inputSchema={
                "type": "object",
                "properties": {
                    "issueId": {
                        "type": "string",
                        "description": "ID of the issue to retrieve (either the UUID or the identifier like \"ABC-123\")"
                    }
                },
                "required": ["issueId"]
            }
        ),
        Tool(
            name="linear_delete_issue",
            description="Delete a specific issue from Linear. This action is permanent and cannot be undone.",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "Issue identifier (e.g., \"ABC-123\") to delete"
                    }
                },
                "required": ["id"]
            }
        ),
        Tool(
            name="linear_delete_issues",
            description="Delete multiple issues at once. This action is permanent; "
                        "confirm with the user before calling.",
            inputSchema={
                "type": "object",
                "properties": {
                    "ids": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of issue identifiers (e.g., [\"ABC-123\", \"ABC-124\"]) to delete",
                        "minItems": 1
                    }
                },
                "required": ["ids"]
            }
        ),
        # ============================================================================
        # Project Tools
        # ============================================================================
        Tool(
            name="linear_create_project_with_issues",
            description="Create a new project and associated issues in one operation. "
                        "Projects can span multiple teams. If the issues cannot be created, "
                        "the project is kept and its ID is returned so issue creation can be retried.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": {
                        "type": "object",
                        "properties": {
                            "name": {
                                "type": "string",
                                "description": "Name of the project"
                            },
                            "description": {
                                "type": "string",
                                "description": "Description of the project in markdown format (optional)"
                            },
                            "teamIds": {
                                "type": "array",
                                "items": {"type": "string"},
                                "description": "List of team IDs this project belongs to (required)",
                                "minItems": 1
                            }
                        },
                        "required": ["name", "teamIds"]
                    },
                    "issues": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "title": {
                                    "type": "string",
                                    "description": "Title of the issue"
                                },
                                "description": {
                                    "type": "string",
                                    "description": "Description of the issue in markdown format"
                                },
                                "teamId": {
                                    "type": "string",
                                    "description": "ID of the team where the issue will be created "
                                                   "(must match one of the project teamIds)"
                                }
                            },
                            "required": ["title", "teamId"]
                        },
                        "description": "List of issues to create with this project"
                    }
                },
                "required": ["project", "issues"]
            }
        ),
        Tool(
            name="linear_get_project",
            description="Get detailed information about a specific project, including its members, "
                        "status, and optionally its issues.",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "ID of the project to retrieve"
                    },
                    "includeIssues": {
                        "type": "boolean",
                        "description": "Whether to fetch the project's issues as well (default: false)"
                    }
                },
                "required": ["id"]
            }
        ),
        Tool(
            name="linear_search_projects",
            description="Search for projects by name and/or team. At least a name or teamIds must be provided.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Text to search for in project names"
                    },
                    "teamIds": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Only return projects belonging to these teams"
                    },
                    "first": {
                        "type": "number",
                        "description": "Maximum number of projects to return (default: 50)"
                    },
                    "includeArchived": {
                        "type": "boolean",
                        "description": "Whether to include archived, canceled and completed projects (default: false)"
                    }
                }
            }
        ),
        Tool(
            name="linear_get_projects",
            description="Get a list of projects with optional filtering by name or team.",
            inputSchema={
                "type": "object",
                "properties": {
                    "teamId": {
                        "type": "string",
                        "description": "ID of the team to filter projects by (optional)"
                    },
                    "filter": {
                        "type": "string",
                        "description": "Text to search for in project names (optional)"
                    },
                    "includeArchived": {
                        "type": "boolean",
                        "description": "Whether to include archived projects in the results (default: false)"
                    }
                }
            }
        ),
        # ============================================================================
        # Team Tools
        # ============================================================================
        Tool(
            name="linear_get_teams",
            description="Get a list of all teams in the Linear workspace accessible to the authenticated user.",
            inputSchema={"type": "object", "properties": {}}
        ),
        Tool(
            name="linear_get_team_states",
            description="Get all workflow states for a specific team (e.g., \"Todo\", \"In Progress\", \"Done\").",
            inputSchema={
                "type": "object",
                "properties": {
                    "teamId": {
                        "type": "string",
                        "description": "ID of the team to get workflow states for"
                    }
                },
                "required": ["teamId"]
            }
        ),
        Tool(
            name="linear_get_team_labels",
            description="Get all labels for a specific team that can be applied to issues.",
            inputSchema={
                "type": "object",
                "properties": {
                    "teamId": {
                        "type": "string",
                        "description": "ID of the team to get labels for"
                    }
                },
                "required": ["teamId"]
            }
        ),
        # ============================================================================
        # User Tools
        # ============================================================================
        Tool(
            name="linear_get_user",
            description="Get information about the currently authenticated user, including their name and email.",
            inputSchema={"type": "object", "properties": {}}
        ),
    ]
