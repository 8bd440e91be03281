"""Shared formatting functions for Linear MCP responses.

Confirmations and batch summaries are rendered as multi-line text; reads,
searches and lookups pass the upstream payload through as JSON. The shape is
fixed per tool.
"""
import json
from dataclasses import dataclass
from typing import Any, Literal

from mcp.types import TextContent


@dataclass(frozen=True)
class ResponseEnvelope:
    """The only value a handler returns on success."""
    kind: Literal["text", "json"]
    payload: Any

    def to_content(self) -> list[TextContent]:
        if self.kind == "json":
            text = json.dumps(self.payload, indent=2, default=str)
        else:
            text = self.payload
        return [TextContent(type="text", text=text)]


def text_response(*lines: str) -> ResponseEnvelope:
    return ResponseEnvelope(kind="text", payload="\n".join(lines))


def json_response(payload: Any) -> ResponseEnvelope:
    return ResponseEnvelope(kind="json", payload=payload)


def format_issue_line(issue: dict) -> str:
    """Format an issue as a one-liner for batch summaries."""
    identifier = issue.get('identifier') or issue.get('id', 'NO-ID')
    title = issue.get('title', '(untitled)')
    url = issue.get('url')
    return f"- {identifier}: {title} ({url})" if url else f"- {identifier}: {title}"


def format_issue(issue: dict) -> str:
    """Format a single created issue."""
    state = issue.get('state') or {}
    state_info = f"\nState: {state['name']}" if state.get('name') else ""
    return f"""Issue: {issue.get('identifier', issue.get('id'))}
Title: {issue.get('title', '(untitled)')}{state_info}
URL: {issue.get('url')}"""


def format_project(project: dict) -> str:
    """Format a project header for batch summaries."""
    return f"""Project: {project.get('name')}
Project URL: {project.get('url')}"""
