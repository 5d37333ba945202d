"""Server configuration.

Loads settings from an optional YAML file, then lets environment variables
override individual values:

- ADO_MCP_CONFIG: path to the YAML file
- ADO_ORGANIZATION: Azure DevOps organization name (required)
- ADO_MCP_DOMAINS: comma-separated domains to enable (default: all)
- ADO_TOKEN: bearer token (e.g. from `az account get-access-token`)
- ADO_PAT: personal access token, used when no bearer token is set
- ADO_MCP_TIMEOUT: HTTP timeout in seconds
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger("ado-mcp.config")

DEFAULT_TIMEOUT = 30.0

_ENV_OVERRIDES = {
    "ADO_ORGANIZATION": "organization",
    "ADO_MCP_DOMAINS": "domains",
    "ADO_TOKEN": "token",
    "ADO_PAT": "pat",
    "ADO_MCP_TIMEOUT": "timeout",
}


@dataclass
class ServerConfig:
    """
    Configuration for the Azure DevOps MCP server.

    Attributes:
        organization: Azure DevOps organization name
        domains: Domains to enable (string, list, or None for all)
        token: Bearer token for the REST API
        pat: Personal access token (basic auth), used if token is not set
        timeout: HTTP timeout in seconds
    """

    organization: str
    domains: Optional[Union[str, list[str]]] = None
    token: Optional[str] = None
    pat: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "ServerConfig":
        """
        Load configuration from YAML (if any) and environment variables.

        Args:
            config_path: YAML file to read (default: $ADO_MCP_CONFIG, if set)

        Returns:
            ServerConfig instance

        Raises:
            ValueError: If the file is not valid YAML, the timeout is not a
                number, or no organization is configured
        """
        if config_path is None and os.environ.get("ADO_MCP_CONFIG"):
            config_path = Path(os.environ["ADO_MCP_CONFIG"])

        config_dict = {}
        if config_path is not None and config_path.exists():
            try:
                with open(config_path) as f:
                    config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid config file {config_path}: {e}") from e
            if not isinstance(config_dict, dict):
                raise ValueError(f"Invalid config file {config_path}: expected a mapping")
            logger.info(f"Loaded configuration from {config_path}")

        # Environment variables override config file
        for env_var, key in _ENV_OVERRIDES.items():
            if os.environ.get(env_var):
                config_dict[key] = os.environ[env_var]

        if "timeout" in config_dict:
            try:
                config_dict["timeout"] = float(config_dict["timeout"])
            except (TypeError, ValueError):
                raise ValueError(
                    f"Invalid timeout: {config_dict['timeout']}. Must be a number of seconds."
                ) from None

        if not config_dict.get("organization"):
            raise ValueError(
                "No Azure DevOps organization configured. "
                "Set ADO_ORGANIZATION or 'organization' in the config file."
            )

        return cls(**{k: v for k, v in config_dict.items() if k in cls.__annotations__})

    @property
    def org_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}"

    def service_url(self, prefix: str) -> str:
        """URL of a service hosted on its own subdomain (vsrm, almsearch, advsec)."""
        return f"https://{prefix}.dev.azure.com/{self.organization}"

    def auth_headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def auth(self) -> Optional[tuple[str, str]]:
        """Basic auth credentials for a personal access token, if one is used."""
        if not self.token and self.pat:
            return ("", self.pat)
        return None
