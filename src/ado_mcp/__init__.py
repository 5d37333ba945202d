"""Azure DevOps MCP Server - Model Context Protocol integration.

This package exposes Azure DevOps REST APIs to AI assistants as MCP tools,
grouped into domains that can be enabled individually.

Modules:
- server: stdio MCP server implementation
- domains: Domain gating for tool groups
- enums: Selector name to API enum code translation
- batch: Work item batch request building and submission
- steps: Test case step script to XML compilation
- tools: MCP tool definitions
- handlers: Tool implementation handlers
"""

__version__ = "1.0.0"

from . import formatters
from . import tools
from . import handlers

__all__ = ["formatters", "tools", "handlers", "__version__"]
