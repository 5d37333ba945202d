"""Tests for server configuration loading."""
import pytest

from ado_mcp.config import DEFAULT_TIMEOUT, ServerConfig
from ado_mcp.domains import AVAILABLE_DOMAINS, DomainsManager

ENV_VARS = ["ADO_MCP_CONFIG", "ADO_ORGANIZATION", "ADO_MCP_DOMAINS", "ADO_TOKEN", "ADO_PAT", "ADO_MCP_TIMEOUT"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestServerConfigLoad:
    """Test YAML and environment configuration."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ADO_ORGANIZATION", "contoso")
        monkeypatch.setenv("ADO_MCP_DOMAINS", "core,builds")

        config = ServerConfig.load()

        assert config.organization == "contoso"
        assert config.domains == "core,builds"
        assert config.timeout == DEFAULT_TIMEOUT

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "ado.yaml"
        path.write_text("organization: fabrikam\ndomains:\n  - core\n  - wiki\ntimeout: 10\nunused: 1\n")

        config = ServerConfig.load(path)

        assert config.organization == "fabrikam"
        assert config.domains == ["core", "wiki"]
        assert config.timeout == 10.0

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "ado.yaml"
        path.write_text("organization: fabrikam\n")
        monkeypatch.setenv("ADO_MCP_CONFIG", str(path))

        assert ServerConfig.load().organization == "fabrikam"

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "ado.yaml"
        path.write_text("organization: fabrikam\ntimeout: 10\n")
        monkeypatch.setenv("ADO_ORGANIZATION", "contoso")
        monkeypatch.setenv("ADO_MCP_TIMEOUT", "5")

        config = ServerConfig.load(path)

        assert config.organization == "contoso"
        assert config.timeout == 5.0

    def test_missing_organization(self):
        with pytest.raises(ValueError, match="organization"):
            ServerConfig.load()

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("ADO_ORGANIZATION", "contoso")
        monkeypatch.setenv("ADO_MCP_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="Invalid timeout"):
            ServerConfig.load()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "ado.yaml"
        path.write_text("organization: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid config file"):
            ServerConfig.load(path)

    def test_yaml_must_be_mapping(self, tmp_path):
        path = tmp_path / "ado.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="expected a mapping"):
            ServerConfig.load(path)


class TestServerConfigUrlsAndAuth:
    """Test derived URLs and credentials."""

    def test_urls(self):
        config = ServerConfig(organization="contoso")
        assert config.org_url == "https://dev.azure.com/contoso"
        assert config.service_url("vsrm") == "https://vsrm.dev.azure.com/contoso"

    def test_bearer_token_wins(self):
        config = ServerConfig(organization="contoso", token="t", pat="p")
        assert config.auth_headers() == {"Authorization": "Bearer t"}
        assert config.auth() is None

    def test_pat_uses_basic_auth(self):
        config = ServerConfig(organization="contoso", pat="p")
        assert config.auth_headers() == {}
        assert config.auth() == ("", "p")


class TestDomainsFromYaml:
    """YAML domain values of any type yield a usable domain set."""

    @pytest.mark.parametrize("yaml_domains, expected", [
        ("[core, 5]", {"core"}),
        ("yes", set(AVAILABLE_DOMAINS)),
        ("7", set(AVAILABLE_DOMAINS)),
    ])
    def test_domains_manager_accepts_loaded_value(self, tmp_path, yaml_domains, expected):
        path = tmp_path / "ado.yaml"
        path.write_text(f"organization: org\ndomains: {yaml_domains}\n")

        config = ServerConfig.load(path)
        manager = DomainsManager(config.domains, warn=lambda message: None)

        assert manager.get_enabled_domains() == expected
