"""Linear MCP Server - Model Context Protocol integration for Linear.

This package exposes Linear teams, issues, projects, workflow states and
labels to AI assistants as MCP tools.

Modules:
- server: stdio MCP server implementation
- dispatcher: tool name -> handler routing
- handlers: tool implementation handlers
- validation: argument rules and typed argument parsing
- formatters: response envelopes and text formatting
- errors: error taxonomy and classification
- tools: MCP tool definitions
"""

__version__ = "1.0.0"

from . import errors
from . import formatters
from . import tools
from . import handlers

__all__ = ["errors", "formatters", "tools", "handlers", "__version__"]
