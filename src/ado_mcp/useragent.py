"""User-Agent header for outgoing REST calls."""
from typing import Optional


class UserAgentComposer:
    """Builds the User-Agent, appending the MCP client's name/version once it is known."""

    def __init__(self, package_version: str):
        self._user_agent = f"AzureDevOps.MCP/{package_version} (local)"
        self._client_info_appended = False

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def append_mcp_client_info(self, name: Optional[str], version: Optional[str]) -> None:
        """Append ``name/version`` of the MCP client. Later calls are ignored."""
        if self._client_info_appended or not name or not version:
            return
        self._user_agent += f" {name}/{version}"
        self._client_info_appended = True
