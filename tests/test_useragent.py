"""Tests for the User-Agent header."""
from ado_mcp.useragent import UserAgentComposer


class TestUserAgentComposer:
    """Test composing the User-Agent."""

    def test_base(self):
        assert UserAgentComposer("1.2.3").user_agent == "AzureDevOps.MCP/1.2.3 (local)"

    def test_client_info_is_appended_once(self):
        composer = UserAgentComposer("1.0.0")
        composer.append_mcp_client_info("claude-desktop", "0.9")
        composer.append_mcp_client_info("other", "2.0")

        assert composer.user_agent == "AzureDevOps.MCP/1.0.0 (local) claude-desktop/0.9"

    def test_incomplete_client_info_is_ignored(self):
        composer = UserAgentComposer("1.0.0")
        composer.append_mcp_client_info("client", None)
        composer.append_mcp_client_info(None, "1.0")
        assert composer.user_agent == "AzureDevOps.MCP/1.0.0 (local)"

        composer.append_mcp_client_info("client", "1.0")
        assert composer.user_agent == "AzureDevOps.MCP/1.0.0 (local) client/1.0"
