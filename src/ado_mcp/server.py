"""Azure DevOps MCP Server - Expose Azure DevOps to AI assistants."""
import sys
import asyncio
import logging
import traceback
from typing import Any, Optional

import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    Tool,
    TextContent,
    ImageContent,
    EmbeddedResource,
)

from . import __version__
from . import handlers
from . import prompts
from . import tools
from .batch import BatchRequestError
from .config import ServerConfig
from .domains import DomainsManager
from .useragent import UserAgentComposer


# Configure logging to stderr (stdout carries the stdio transport)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
    force=True
)
logger = logging.getLogger("ado-mcp")


# MCP Server instance
app = Server("ado-mcp")

# Set once by configure() at startup, read-only afterwards
_config: Optional[ServerConfig] = None
_tools: list[Tool] = []
_enabled_tool_names: frozenset[str] = frozenset()
_user_agent = UserAgentComposer(__version__)


def configure(config: ServerConfig, domains: Optional[DomainsManager] = None) -> None:
    """Install the server configuration, the enabled domain set and its tools.

    Raises:
        ValueError: If a tool or parameter name is not a valid MCP name
    """
    global _config, _tools, _enabled_tool_names
    enabled = domains if domains is not None else DomainsManager(config.domains)
    enabled_tools = tools.get_tools(enabled)
    errors = tools.validate_tools(enabled_tools)
    if errors:
        raise ValueError(f"Invalid tool definitions: {'; '.join(errors)}")

    _config = config
    _tools = enabled_tools
    _enabled_tool_names = frozenset(tool.name for tool in enabled_tools)
    logger.info(f"Enabled domains: {', '.join(sorted(enabled.get_enabled_domains()))}")
    logger.info(f"Registered {len(enabled_tools)} tools")


def _create_client(config: ServerConfig, user_agent: str) -> httpx.AsyncClient:
    headers = {"User-Agent": user_agent, **config.auth_headers()}
    return httpx.AsyncClient(
        base_url=config.org_url,
        timeout=config.timeout,
        headers=headers,
        auth=config.auth()
    )


def _record_client_info() -> None:
    """Append the connected MCP client's name/version to the User-Agent, once known."""
    try:
        client_params = app.request_context.session.client_params
    except LookupError:
        return
    if client_params is not None:
        info = client_params.clientInfo
        _user_agent.append_mcp_client_info(info.name, info.version)


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List the tools of every enabled domain."""
    return list(_tools)


@app.list_prompts()
async def list_prompts() -> list[Prompt]:
    return prompts.get_prompts()


@app.get_prompt()
async def get_prompt(name: str, arguments: Optional[dict[str, str]] = None) -> GetPromptResult:
    return prompts.get_prompt_messages(name, arguments)


# ============================================================================
# Tool Handlers
# ============================================================================


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent | ImageContent | EmbeddedResource]:
    """Handle MCP tool calls by delegating to the handler of an enabled tool."""
    logger.info(f"Tool call: {name} with arguments: {arguments}")

    if _config is None:
        return [TextContent(type="text", text="Error: Server is not configured")]

    handler = handlers.HANDLERS.get(name)
    if handler is None or name not in _enabled_tool_names:
        logger.warning(f"Unknown tool requested: {name}")
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    _record_client_info()

    async with _create_client(_config, _user_agent.user_agent) as client:
        try:
            return await handler(dict(arguments or {}), client, _config)

        except httpx.HTTPStatusError as e:
            # Log detailed HTTP error information
            logger.error(f"HTTP error during {name} call:")
            logger.error(f"  Status: {e.response.status_code}")
            logger.error(f"  URL: {e.request.url}")
            try:
                response_body = e.response.json()
                logger.error(f"  Response body: {response_body}")
                error_detail = response_body.get("message", str(e))
            except Exception:
                response_text = e.response.text
                logger.error(f"  Response text: {response_text}")
                error_detail = response_text or str(e)
            logger.error(f"  Traceback: {traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: {error_detail}")]

        except BatchRequestError as e:
            logger.error(f"Batch request failed during {name} call: {e} (status {e.status_code})")
            return [TextContent(type="text", text=f"Error: {e}")]

        except httpx.RequestError as e:
            # Network/connection errors
            logger.error(f"Request error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Traceback: {traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: Connection failed - {str(e)}")]

        except Exception as e:
            # Catch-all for unexpected errors
            logger.error(f"Unexpected error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Arguments: {arguments}")
            logger.error(f"  Traceback:\n{traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: {type(e).__name__}: {str(e)}")]


async def main():
    """Run the MCP server."""
    config = ServerConfig.load()
    configure(config)
    logger.info(f"MCP Server starting for organization: {config.organization}")
    if config.token:
        logger.info("MCP Server configured with bearer token authentication")
    elif config.pat:
        logger.info("MCP Server configured with Personal Access Token authentication")
    else:
        logger.info("MCP Server running without credentials")

    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
