"""Tests for the MCP server's tool dispatch and error mapping."""
import httpx
import pytest
from mcp.types import Tool

from ado_mcp import server
from ado_mcp.config import ServerConfig
from ado_mcp.domains import DomainsManager


@pytest.fixture
def fake_api(monkeypatch):
    """Route every client the server creates through a handler set by the test."""
    state = {"respond": lambda request: httpx.Response(200, json={"value": []}), "requests": []}

    def handle(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["respond"](request)

    def create_client(config, user_agent):
        return httpx.AsyncClient(
            base_url=config.org_url,
            headers={"User-Agent": user_agent, **config.auth_headers()},
            transport=httpx.MockTransport(handle)
        )

    monkeypatch.setattr(server, "_create_client", create_client)
    monkeypatch.setattr(server, "_config", None)
    monkeypatch.setattr(server, "_tools", [])
    monkeypatch.setattr(server, "_enabled_tool_names", frozenset())
    return state


def configure(domains=None, **kwargs):
    server.configure(ServerConfig(organization="org", domains=domains, **kwargs))


class TestListTools:
    """Test the advertised tool list."""

    @pytest.mark.asyncio
    async def test_filtered_by_domain(self, fake_api):
        configure("wiki")
        names = {tool.name for tool in await server.list_tools()}
        assert names == {"wiki_list_wikis", "wiki_get_page_content"}

    @pytest.mark.asyncio
    async def test_configure_with_explicit_manager(self, fake_api):
        server.configure(ServerConfig(organization="org"), DomainsManager("search"))
        assert [tool.name for tool in await server.list_tools()] == ["search_code"]

    @pytest.mark.asyncio
    async def test_invalid_tool_definitions_are_rejected(self, fake_api, monkeypatch):
        bad_tool = Tool(
            name="bad tool",
            description="Tool with an invalid name",
            inputSchema={"type": "object", "properties": {"ok_param": {"type": "string"}}}
        )
        monkeypatch.setattr(server.tools, "get_tools", lambda domains=None: [bad_tool])

        with pytest.raises(ValueError, match="Tool name 'bad tool' contains invalid characters"):
            configure()
        assert await server.list_tools() == []

    @pytest.mark.asyncio
    async def test_tool_set_is_computed_once(self, fake_api, monkeypatch):
        configure("wiki")

        def fail(domains=None):
            raise AssertionError("tools rebuilt after configure")

        monkeypatch.setattr(server.tools, "get_tools", fail)

        assert len(await server.list_tools()) == 2
        content = await server.call_tool("wiki_list_wikis", {})
        assert content[0].text == "No wikis found."


class TestCallTool:
    """Test dispatching tool calls."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, fake_api):
        configure()
        content = await server.call_tool("nope", {})
        assert content[0].text == "Unknown tool: nope"

    @pytest.mark.asyncio
    async def test_disabled_domain_tool_is_unknown(self, fake_api):
        configure("core")
        content = await server.call_tool("search_code", {"search_text": "x"})

        assert content[0].text == "Unknown tool: search_code"
        assert fake_api["requests"] == []

    @pytest.mark.asyncio
    async def test_success_sends_user_agent_and_token(self, fake_api):
        configure(token="secret-token")
        fake_api["respond"] = lambda request: httpx.Response(200, json={"value": [{"id": "1", "name": "Proj"}]})

        content = await server.call_tool("core_list_projects", {})

        request = fake_api["requests"][0]
        assert request.headers["User-Agent"].startswith("AzureDevOps.MCP/")
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert "Proj" in content[0].text

    @pytest.mark.asyncio
    async def test_http_error_uses_message(self, fake_api):
        configure()
        fake_api["respond"] = lambda request: httpx.Response(404, json={"message": "Project not found"})

        content = await server.call_tool("core_list_project_teams", {"project": "missing"})

        assert content[0].text == "Error: Project not found"

    @pytest.mark.asyncio
    async def test_http_error_falls_back_to_text(self, fake_api):
        configure()
        fake_api["respond"] = lambda request: httpx.Response(500, text="boom")

        content = await server.call_tool("core_list_projects", {})

        assert content[0].text == "Error: boom"

    @pytest.mark.asyncio
    async def test_batch_error(self, fake_api):
        configure()
        fake_api["respond"] = lambda request: httpx.Response(400, json={"message": "hidden"})

        content = await server.call_tool(
            "wit_update_work_items_batch",
            {"updates": [{"id": 1, "path": "/fields/System.Title", "value": "x"}]}
        )

        assert content[0].text == "Error: Failed to update work items in batch: Bad Request"

    @pytest.mark.asyncio
    async def test_connection_error(self, fake_api):
        configure()

        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        fake_api["respond"] = refuse

        content = await server.call_tool("wiki_list_wikis", {})

        assert content[0].text == "Error: Connection failed - refused"

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, fake_api):
        configure()

        content = await server.call_tool(
            "wit_work_items_link",
            {"project": "p", "updates": [{"id": 1, "link_to_id": 2, "type": "cousin"}]}
        )

        assert content[0].text.startswith("Error: ValidationError")
        assert fake_api["requests"] == []

    @pytest.mark.asyncio
    async def test_not_configured(self, fake_api):
        content = await server.call_tool("core_list_projects", {})
        assert content[0].text == "Error: Server is not configured"


class TestPrompts:
    """Test prompt endpoints."""

    @pytest.mark.asyncio
    async def test_list_prompts(self):
        assert len(await server.list_prompts()) == 3

    @pytest.mark.asyncio
    async def test_get_prompt(self):
        result = await server.get_prompt("listTeams", {"project": "Fabrikam"})
        assert "Fabrikam" in result.messages[0].content.text
