"""Tests for domain gating."""
import logging

import pytest

from ado_mcp.domains import (
    AVAILABLE_DOMAINS,
    Domain,
    DomainsManager,
    build_enabled_domains,
)


class TestBuildEnabledDomains:
    """Test resolution of domain names to the enabled set."""

    def test_empty_list_enables_all(self):
        """No names means every domain."""
        assert build_enabled_domains([]) == frozenset(AVAILABLE_DOMAINS)

    def test_all_anywhere_enables_all(self):
        """'all' wins over any other name in the list."""
        assert build_enabled_domains(["core", "all"]) == frozenset(AVAILABLE_DOMAINS)
        assert build_enabled_domains(["  ALL "]) == frozenset(AVAILABLE_DOMAINS)

    def test_names_are_trimmed_and_lowercased(self):
        assert build_enabled_domains([" Core", "WORK-ITEMS "]) == {"core", "work-items"}

    def test_invalid_names_are_reported_and_dropped(self):
        """Unknown names go to the warn sink; valid names survive."""
        messages = []
        enabled = build_enabled_domains(["core", "bogus"], warn=messages.append)

        assert enabled == {"core"}
        assert len(messages) == 1
        assert "'bogus'" in messages[0]
        assert messages[0].startswith("Error: Specified invalid domain")
        assert "advanced-security" in messages[0]

    def test_only_invalid_names_fall_back_to_all(self):
        messages = []
        enabled = build_enabled_domains(["nope", "also-nope"], warn=messages.append)

        assert enabled == frozenset(AVAILABLE_DOMAINS)
        assert len(messages) == 2

    def test_duplicates_collapse(self):
        assert build_enabled_domains(["core", "CORE", " core "]) == {"core"}

    def test_custom_catalog(self):
        assert build_enabled_domains(["a", "c"], available_domains=("a", "b")) == {"a"}
        assert build_enabled_domains([], available_domains=("a", "b")) == {"a", "b"}

    def test_default_sink_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ado-mcp.domains"):
            build_enabled_domains(["bogus"])
        assert "Specified invalid domain 'bogus'" in caplog.text


class TestParseDomainsInput:
    """Test normalization of the loosely typed configuration value."""

    @pytest.mark.parametrize("value", [None, "", []])
    def test_missing_input(self, value):
        assert DomainsManager.parse_domains_input(value) == []

    def test_string_is_split_on_commas(self):
        assert DomainsManager.parse_domains_input("Core, builds ,WIKI") == ["core", "builds", "wiki"]

    def test_list_elements_are_not_split(self):
        assert DomainsManager.parse_domains_input(["core,builds", " Wiki "]) == ["core,builds", "wiki"]


class TestDomainsManager:
    """Test the enabled domain set held by the manager."""

    def test_default_enables_everything(self):
        manager = DomainsManager()
        assert manager.get_enabled_domains() == set(AVAILABLE_DOMAINS)
        assert len(manager.get_enabled_domains()) == 10

    def test_comma_string(self):
        manager = DomainsManager("core,work-items")
        assert manager.is_domain_enabled("core")
        assert manager.is_domain_enabled(Domain.WORK_ITEMS)
        assert not manager.is_domain_enabled(Domain.BUILDS)

    def test_unknown_query_is_false(self):
        assert not DomainsManager("core").is_domain_enabled("not-a-domain")

    def test_list_element_with_comma_is_invalid(self):
        """A list element containing a comma is one (invalid) name."""
        messages = []
        manager = DomainsManager(["core,builds"], warn=messages.append)

        assert manager.get_enabled_domains() == set(AVAILABLE_DOMAINS)
        assert messages

    def test_enabled_domains_is_a_copy(self):
        manager = DomainsManager("core")
        manager.get_enabled_domains().add("builds")
        assert not manager.is_domain_enabled("builds")

    def test_available_domains(self):
        assert DomainsManager().get_available_domains() == list(AVAILABLE_DOMAINS)


class TestDomainGateProperties:
    """Properties of the enabled set for representative inputs."""

    @pytest.mark.parametrize("names", [["all"], ["all", "builds"], ["a", "all", "wiki"], ["bogus", "ALL"]])
    def test_all_sentinel(self, names):
        assert build_enabled_domains(names, warn=lambda message: None) == frozenset(AVAILABLE_DOMAINS)

    def test_case_and_whitespace_insensitive(self):
        assert build_enabled_domains(["REPOSITORIES", " Builds "]) == build_enabled_domains(["repositories", "builds"])

    def test_empty_input_enables_wiki(self):
        assert DomainsManager([]).is_domain_enabled("wiki")


class TestNonStringDomainsInput:
    """Configuration values that are not strings never stop the gate."""

    def test_non_string_list_element(self):
        messages = []
        manager = DomainsManager(["core", 5], warn=messages.append)

        assert manager.get_enabled_domains() == {"core"}
        assert "'5'" in messages[0]

    @pytest.mark.parametrize("value", [True, 5, 2.5])
    def test_non_string_scalar_falls_back_to_all(self, value):
        messages = []
        manager = DomainsManager(value, warn=messages.append)

        assert manager.get_enabled_domains() == set(AVAILABLE_DOMAINS)
        assert len(messages) == 1

    def test_domain_members_in_list(self):
        manager = DomainsManager([Domain.WIKI, Domain.SEARCH])
        assert manager.get_enabled_domains() == {"wiki", "search"}

    def test_parse_non_strings(self):
        assert DomainsManager.parse_domains_input(["Core", 5, None]) == ["core", "5", "none"]
        assert DomainsManager.parse_domains_input(True) == ["true"]
