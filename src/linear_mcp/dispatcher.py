"""Tool dispatch: explicit routing from tool name to handler.

Every tool -> handler mapping is listed in one dict; adding a tool means
editing it. Unknown names raise UnknownToolError before authentication or
argument validation happen.
"""
import logging
from typing import Optional

from . import handlers
from .auth import LinearAuth
from .errors import UnknownToolError
from .formatters import ResponseEnvelope

logger = logging.getLogger("linear-mcp.dispatcher")


HANDLERS: dict[str, handlers.Handler] = {
    # Auth
    "linear_auth": handlers.handle_auth,
    "linear_auth_callback": handlers.handle_auth_callback,
    # Issues
    "linear_create_issue": handlers.handle_create_issue,
    "linear_create_issues": handlers.handle_create_issues,
    "linear_bulk_update_issues": handlers.handle_bulk_update_issues,
    "linear_search_issues": handlers.handle_search_issues,
    "linear_get_issue": handlers.handle_get_issue,
    "linear_delete_issue": handlers.handle_delete_issue,
    "linear_delete_issues": handlers.handle_delete_issues,
    # Projects
    "linear_create_project_with_issues": handlers.handle_create_project_with_issues,
    "linear_get_project": handlers.handle_get_project,
    "linear_search_projects": handlers.handle_search_projects,
    "linear_get_projects": handlers.handle_get_projects,
    # Teams
    "linear_get_teams": handlers.handle_get_teams,
    "linear_get_team_states": handlers.handle_get_team_states,
    "linear_get_team_labels": handlers.handle_get_team_labels,
    # Users
    "linear_get_user": handlers.handle_get_user,
}


class ToolDispatcher:
    """Routes a tool invocation to exactly one handler."""

    def __init__(self, auth: LinearAuth, handler_map: Optional[dict[str, handlers.Handler]] = None):
        self._auth = auth
        self._handlers = dict(HANDLERS if handler_map is None else handler_map)

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, name: str, arguments: Optional[dict]) -> ResponseEnvelope:
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(f"Unknown tool requested: {name}")
            raise UnknownToolError(name)

        logger.info(f"Dispatching {name} with arguments: {sorted((arguments or {}).keys())}")
        return await handler(arguments if arguments is not None else {}, self._auth)
