"""Domain gating for Azure DevOps MCP tool groups.

Tools are registered in groups ("domains"). The set of enabled domains is
computed once at startup from a loosely-typed configuration value and is
read-only afterwards:

- No value, an empty list, or "all" anywhere in the list enables every domain
- Unknown names are reported and dropped, never fatal
- A selection that leaves nothing enabled falls back to every domain
"""
import enum
import logging
from collections.abc import Callable, Iterable
from typing import Any, Optional, Union

logger = logging.getLogger("ado-mcp.domains")


class Domain(str, enum.Enum):
    """Available Azure DevOps MCP domains."""

    ADVANCED_SECURITY = "advanced-security"
    BUILDS = "builds"
    CORE = "core"
    RELEASES = "releases"
    REPOSITORIES = "repositories"
    SEARCH = "search"
    TEST_PLANS = "test-plans"
    WIKI = "wiki"
    WORK = "work"
    WORK_ITEMS = "work-items"


# Wildcard selector, not a domain itself
ALL_DOMAINS = "all"

AVAILABLE_DOMAINS: tuple[str, ...] = tuple(domain.value for domain in Domain)

DomainsInput = Optional[Union[str, list[str]]]


def _warn_invalid_domain(message: str) -> None:
    logger.warning(message)


def build_enabled_domains(
    domains: Iterable[str],
    available_domains: tuple[str, ...] = AVAILABLE_DOMAINS,
    warn: Callable[[str], None] = _warn_invalid_domain
) -> frozenset[str]:
    """Resolve a list of domain names to the set of enabled domains.

    Args:
        domains: Domain names (case and surrounding whitespace are ignored)
        available_domains: The closed catalog of domains
        warn: Sink for diagnostics about unknown names

    Returns:
        Frozen set of enabled domain names, never empty
    """
    requested = [domain.strip().lower() for domain in domains]

    if not requested or ALL_DOMAINS in requested:
        return frozenset(available_domains)

    enabled = set()
    for domain in requested:
        if domain in available_domains:
            enabled.add(domain)
        else:
            warn(
                f"Error: Specified invalid domain '{domain}'. "
                f"Please specify exactly as available domains: {', '.join(available_domains)}"
            )

    if not enabled:
        logger.info("No valid domains selected, enabling all domains")
        return frozenset(available_domains)

    return frozenset(enabled)


def _domain_name(value: Any) -> str:
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)


class DomainsManager:
    """Holds the enabled domain set for the lifetime of the server process."""

    def __init__(
        self,
        domains_input: DomainsInput = None,
        available_domains: tuple[str, ...] = AVAILABLE_DOMAINS,
        warn: Callable[[str], None] = _warn_invalid_domain
    ):
        """
        Initialize the manager from a configuration value.

        Args:
            domains_input: Comma-separated string, list of names, or None for all domains
            available_domains: The closed catalog of domains
            warn: Sink for diagnostics about unknown names (default: logger warning)
        """
        self._available_domains = available_domains
        self._enabled_domains = build_enabled_domains(
            self.parse_domains_input(domains_input),
            available_domains,
            warn
        )

    @staticmethod
    def parse_domains_input(domains_input: Any = None) -> list[str]:
        """
        Normalize a domains configuration value to a list of names.

        A string is split on commas; list elements are never split. Any other
        scalar (a YAML ``yes`` or ``5``) and any non-string list element is
        taken as one name via ``str()``, so it is reported as unknown rather
        than rejected. Every name is trimmed and lower-cased. Missing input
        yields an empty list.
        """
        if not domains_input:
            return []

        if isinstance(domains_input, str):
            return [domain.strip().lower() for domain in domains_input.split(",")]

        if not isinstance(domains_input, (list, tuple, set, frozenset)):
            domains_input = [domains_input]

        return [_domain_name(domain).strip().lower() for domain in domains_input]

    def is_domain_enabled(self, domain: Union[Domain, str]) -> bool:
        """Check if a specific domain is enabled."""
        name = domain.value if isinstance(domain, Domain) else domain
        return name in self._enabled_domains

    def get_enabled_domains(self) -> set[str]:
        """Return a copy of the enabled domain names."""
        return set(self._enabled_domains)

    def get_available_domains(self) -> list[str]:
        """Return the catalog this manager was built from."""
        return list(self._available_domains)

    def __repr__(self) -> str:
        return f"DomainsManager(enabled={sorted(self._enabled_domains)})"
