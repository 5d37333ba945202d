"""MCP tool definitions for Azure DevOps.

Tools are declared per domain. ``get_tools()`` returns only the tools of the
domains enabled in a ``DomainsManager``; a disabled domain contributes nothing
to the server's tool list.

Enum-like parameters list the accepted selector names from ``ado_mcp.models``
so the client can only offer values that translate to an API code.
"""
import re
from dataclasses import dataclass
from typing import Optional

from mcp.types import Tool

from .domains import Domain, DomainsManager
from .enums import get_enum_keys
from .models import (
    LINK_TYPES,
    AlertType,
    AlertValidityStatus,
    BuildQueryOrder,
    Confidence,
    DefinitionQueryOrder,
    PullRequestStatus,
    QueryExpand,
    ReleaseDefinitionExpands,
    ReleaseDefinitionQueryOrder,
    ReleaseExpands,
    ReleaseQueryOrder,
    ReleaseStatus,
    Severity,
    StageUpdateType,
    State,
    WorkItemExpand,
)

PROJECT = {"type": "string", "description": "The name or ID of the Azure DevOps project."}

_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")
MAX_NAME_LENGTH = 64


@dataclass
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


def validate_name(name: str, kind: str = "Name") -> ValidationResult:
    """Check a tool or parameter name against ``^[a-zA-Z0-9_.-]{1,64}$``."""
    if not name:
        return ValidationResult(False, f"{kind} cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        return ValidationResult(
            False,
            f"{kind} '{name}' is {len(name)} characters long, maximum allowed is {MAX_NAME_LENGTH}"
        )
    if not _NAME_PATTERN.fullmatch(name):
        return ValidationResult(
            False,
            f"{kind} '{name}' contains invalid characters. "
            "Only alphanumeric characters, underscores, dots, and hyphens are allowed"
        )
    return ValidationResult(True)


def validate_tool_name(name: str) -> ValidationResult:
    return validate_name(name, "Tool name")


def validate_parameter_name(name: str) -> ValidationResult:
    return validate_name(name, "Parameter name")


def _parameter_names(schema: dict):
    for name, prop in schema.get("properties", {}).items():
        yield name
        items = prop.get("items")
        if isinstance(items, dict) and items.get("type") == "object":
            yield from _parameter_names(items)


def validate_tools(tool_list: list[Tool]) -> list[str]:
    """Return the validation errors of every tool name and (nested) parameter name."""
    errors = []
    for tool in tool_list:
        result = validate_tool_name(tool.name)
        if not result.is_valid:
            errors.append(result.error)
        for parameter in _parameter_names(tool.inputSchema):
            result = validate_parameter_name(parameter)
            if not result.is_valid:
                errors.append(f"{tool.name}: {result.error}")
    return errors


def _enum_param(enum_object, description: str, default: Optional[str] = None) -> dict:
    schema = {"type": "string", "enum": get_enum_keys(enum_object), "description": description}
    if default is not None:
        schema["default"] = default
    return schema


def _enum_array_param(enum_object, description: str) -> dict:
    return {
        "type": "array",
        "items": {"type": "string", "enum": get_enum_keys(enum_object)},
        "description": description,
    }


# ============================================================================
# Core Tools
# ============================================================================

def _core_tools() -> list[Tool]:
    return [
        Tool(
            name="core_list_projects",
            description="Retrieve a list of projects in your Azure DevOps organization. "
                        "Common pattern: core_list_projects() → pick one → core_list_project_teams(project=...).",
            inputSchema={
                "type": "object",
                "properties": {
                    "state_filter": {
                        "type": "string",
                        "enum": ["all", "wellFormed", "createPending", "deleted"],
                        "description": "Filter projects by their state (default: wellFormed)"
                    },
                    "top": {"type": "integer", "description": "Maximum number of projects to return"},
                    "skip": {"type": "integer", "description": "Number of projects to skip for pagination"},
                    "project_name_filter": {
                        "type": "string",
                        "description": "Only return projects whose name contains this text (case-insensitive)"
                    }
                }
            }
        ),
        Tool(
            name="core_list_project_teams",
            description="Retrieve a list of teams for an Azure DevOps project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "mine": {"type": "boolean", "description": "Only return teams the caller is a member of"},
                    "top": {"type": "integer", "description": "Maximum number of teams to return"},
                    "skip": {"type": "integer", "description": "Number of teams to skip for pagination"}
                },
                "required": ["project"]
            }
        ),
    ]


# ============================================================================
# Work Tools
# ============================================================================

def _work_tools() -> list[Tool]:
    return [
        Tool(
            name="work_list_team_iterations",
            description="Retrieve the iterations of a team.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "team": {"type": "string", "description": "The name or ID of the team"},
                    "timeframe": {
                        "type": "string",
                        "enum": ["current"],
                        "description": "Only return the current iteration"
                    }
                },
                "required": ["project", "team"]
            }
        ),
    ]


# ============================================================================
# Build Tools
# ============================================================================

def _build_tools() -> list[Tool]:
    return [
        Tool(
            name="build_get_definitions",
            description="Retrieve a list of build definitions for a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "name": {"type": "string", "description": "Only return definitions with this name"},
                    "path": {"type": "string", "description": "Only return definitions under this folder path"},
                    "query_order": _enum_param(DefinitionQueryOrder, "Order in which definitions are returned"),
                    "top": {"type": "integer", "description": "Maximum number of definitions to return"}
                },
                "required": ["project"]
            }
        ),
        Tool(
            name="build_get_builds",
            description="Retrieve a list of builds for a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "definitions": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Only return builds of these definition IDs"
                    },
                    "branch_name": {"type": "string", "description": "Only return builds of this branch"},
                    "query_order": _enum_param(
                        BuildQueryOrder, "Order in which builds are returned", "queue_time_descending"
                    ),
                    "top": {"type": "integer", "description": "Maximum number of builds to return"}
                },
                "required": ["project"]
            }
        ),
        Tool(
            name="build_update_build_stage",
            description="Retry or cancel a stage of a build.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "build_id": {"type": "integer", "description": "ID of the build"},
                    "stage_name": {"type": "string", "description": "Reference name of the stage"},
                    "status": _enum_param(StageUpdateType, "Action to apply to the stage"),
                    "force_retry_all_jobs": {
                        "type": "boolean",
                        "description": "Retry all jobs of the stage, not only the failed ones (default: false)"
                    }
                },
                "required": ["project", "build_id", "stage_name", "status"]
            }
        ),
    ]


# ============================================================================
# Repository Tools
# ============================================================================

def _repository_tools() -> list[Tool]:
    return [
        Tool(
            name="repo_list_repos_by_project",
            description="Retrieve the Git repositories of a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "repo_name_filter": {
                        "type": "string",
                        "description": "Only return repositories whose name contains this text"
                    },
                    "top": {"type": "integer", "description": "Maximum number of repositories to return"}
                },
                "required": ["project"]
            }
        ),
        Tool(
            name="repo_list_pull_requests_by_repo",
            description="Retrieve pull requests of a repository.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "repository_id": {"type": "string", "description": "The name or ID of the repository"},
                    "status": _enum_param(PullRequestStatus, "Filter pull requests by status", "active"),
                    "creator_id": {"type": "string", "description": "Only return pull requests created by this user ID"},
                    "reviewer_id": {"type": "string", "description": "Only return pull requests reviewed by this user ID"},
                    "top": {"type": "integer", "description": "Maximum number of pull requests to return"}
                },
                "required": ["project", "repository_id"]
            }
        ),
    ]


# ============================================================================
# Work Item Tools
# ============================================================================

def _work_item_tools() -> list[Tool]:
    return [
        Tool(
            name="wit_get_work_item",
            description="Get a single work item by ID.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "id": {"type": "integer", "description": "ID of the work item"},
                    "fields": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Only return these fields"
                    },
                    "as_of": {"type": "string", "description": "Return the work item as of this ISO date"},
                    "expand": _enum_param(WorkItemExpand, "Additional data to include in the response")
                },
                "required": ["project", "id"]
            }
        ),
        Tool(
            name="wit_create_work_item",
            description="Create a new work item of the given type. "
                        "Long text values can be sent as Markdown by setting format='Markdown' on the field.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "work_item_type": {"type": "string", "description": "Work item type, e.g. 'Task' or 'Bug'"},
                    "fields": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "name": {"type": "string", "description": "Field reference name, e.g. 'System.Title'"},
                                "value": {"type": "string", "description": "Field value"},
                                "format": {"type": "string", "enum": ["Markdown", "Html"]}
                            },
                            "required": ["name", "value"]
                        },
                        "description": "Fields to set on the new work item"
                    }
                },
                "required": ["project", "work_item_type", "fields"]
            }
        ),
        Tool(
            name="wit_update_work_items_batch",
            description="Update fields of one or more work items in a single batch request. "
                        "Updates are grouped per work item; long text fields are rendered as Markdown "
                        "unless a format is given.",
            inputSchema={
                "type": "object",
                "properties": {
                    "updates": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "id": {"type": "integer", "description": "ID of the work item to update"},
                                "op": {
                                    "type": "string",
                                    "description": "Operation: 'add', 'replace' or 'remove' (default: add)"
                                },
                                "path": {"type": "string", "description": "Field path, e.g. '/fields/System.Title'"},
                                "value": {
                                    "type": "string",
                                    "description": "New value; omit for 'remove'"
                                },
                                "format": {"type": "string", "enum": ["Markdown", "Html"]}
                            },
                            "required": ["id", "path"]
                        },
                        "description": "Field updates to apply"
                    }
                },
                "required": ["updates"]
            }
        ),
        Tool(
            name="wit_work_items_link",
            description="Link work items together in a single batch request.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "updates": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "id": {"type": "integer", "description": "ID of the work item to update"},
                                "link_to_id": {"type": "integer", "description": "ID of the work item to link to"},
                                "type": {
                                    "type": "string",
                                    "enum": [name for name in LINK_TYPES if name != "artifact"],
                                    "description": "Link type (default: related)"
                                },
                                "comment": {"type": "string", "description": "Optional comment on the link"}
                            },
                            "required": ["id", "link_to_id"]
                        },
                        "description": "Links to create"
                    }
                },
                "required": ["project", "updates"]
            }
        ),
        Tool(
            name="wit_get_query",
            description="Get a saved work item query by its ID or path.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "query": {"type": "string", "description": "ID or path of the query"},
                    "expand": _enum_param(QueryExpand, "Additional query details to include"),
                    "depth": {"type": "integer", "description": "Folder depth to expand (default: 0)"},
                    "include_deleted": {"type": "boolean", "description": "Include deleted queries"},
                    "use_iso_date_format": {"type": "boolean", "description": "Return dates in ISO format"}
                },
                "required": ["project", "query"]
            }
        ),
    ]


# ============================================================================
# Release Tools
# ============================================================================

def _release_tools() -> list[Tool]:
    return [
        Tool(
            name="release_get_definitions",
            description="Retrieve release definitions of a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "search_text": {"type": "string", "description": "Only return definitions whose name contains this text"},
                    "expand": _enum_param(ReleaseDefinitionExpands, "Additional data to include", "none"),
                    "query_order": _enum_param(
                        ReleaseDefinitionQueryOrder, "Order in which definitions are returned", "name_ascending"
                    ),
                    "top": {"type": "integer", "description": "Maximum number of definitions to return"}
                },
                "required": ["project"]
            }
        ),
        Tool(
            name="release_get_releases",
            description="Retrieve releases of a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "definition_id": {"type": "integer", "description": "Only return releases of this definition"},
                    "status_filter": _enum_param(ReleaseStatus, "Only return releases with this status"),
                    "query_order": _enum_param(ReleaseQueryOrder, "Order in which releases are returned", "descending"),
                    "expand": _enum_param(ReleaseExpands, "Additional data to include", "none"),
                    "top": {"type": "integer", "description": "Maximum number of releases to return"}
                },
                "required": ["project"]
            }
        ),
    ]


# ============================================================================
# Wiki Tools
# ============================================================================

def _wiki_tools() -> list[Tool]:
    return [
        Tool(
            name="wiki_list_wikis",
            description="Retrieve the wikis of an organization or project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": {
                        "type": "string",
                        "description": "The name or ID of the project. Omit to list wikis of the whole organization."
                    }
                }
            }
        ),
        Tool(
            name="wiki_get_page_content",
            description="Retrieve the content of a wiki page.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "wiki_identifier": {"type": "string", "description": "The name or ID of the wiki"},
                    "path": {"type": "string", "description": "Path of the page, e.g. '/Home'"}
                },
                "required": ["project", "wiki_identifier", "path"]
            }
        ),
    ]


# ============================================================================
# Test Plan Tools
# ============================================================================

def _test_plan_tools() -> list[Tool]:
    return [
        Tool(
            name="testplan_list_test_plans",
            description="Retrieve the test plans of a project.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "filter_active_plans": {"type": "boolean", "description": "Only return active plans (default: true)"},
                    "include_plan_details": {"type": "boolean", "description": "Include plan details (default: false)"}
                },
                "required": ["project"]
            }
        ),
        Tool(
            name="testplan_create_test_case",
            description="Create a new test case work item.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "title": {"type": "string", "description": "Title of the test case"},
                    "steps": {
                        "type": "string",
                        "description": "Test steps, one per line, formatted as "
                                       "'1. Step one|Expected result one\\n2. Step two|Expected result two'"
                    },
                    "priority": {"type": "integer", "description": "Priority of the test case"},
                    "area_path": {"type": "string", "description": "Area path of the test case"},
                    "iteration_path": {"type": "string", "description": "Iteration path of the test case"}
                },
                "required": ["project", "title"]
            }
        ),
    ]


# ============================================================================
# Search Tools
# ============================================================================

def _search_tools() -> list[Tool]:
    return [
        Tool(
            name="search_code",
            description="Search source code across the organization's repositories.",
            inputSchema={
                "type": "object",
                "properties": {
                    "search_text": {"type": "string", "description": "Text to search for"},
                    "project": {"type": "array", "items": {"type": "string"}, "description": "Filter by project names"},
                    "repository": {"type": "array", "items": {"type": "string"}, "description": "Filter by repository names"},
                    "branch": {"type": "array", "items": {"type": "string"}, "description": "Filter by branch names"},
                    "top": {"type": "integer", "description": "Maximum number of results (default: 5)"},
                    "skip": {"type": "integer", "description": "Number of results to skip"}
                },
                "required": ["search_text"]
            }
        ),
    ]


# ============================================================================
# Advanced Security Tools
# ============================================================================

def _advanced_security_tools() -> list[Tool]:
    return [
        Tool(
            name="advsec_get_alerts",
            description="Retrieve Advanced Security alerts for a repository. "
                        "Confidence and validity filters only apply to secret alerts.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "repository": {"type": "string", "description": "The name or ID of the repository"},
                    "alert_type": _enum_param(AlertType, "Filter alerts by type (default: all types)"),
                    "states": _enum_array_param(State, "Filter alerts by state"),
                    "severities": _enum_array_param(Severity, "Filter alerts by severity"),
                    "rule_id": {"type": "string", "description": "Filter alerts by rule ID"},
                    "rule_name": {"type": "string", "description": "Filter alerts by rule name"},
                    "tool_name": {"type": "string", "description": "Filter alerts by tool name"},
                    "ref": {"type": "string", "description": "Filter alerts by git reference (branch)"},
                    "only_default_branch": {
                        "type": "boolean",
                        "description": "Only return alerts found on the default branch (default: true)"
                    },
                    "confidence_levels": _enum_array_param(
                        Confidence, "Filter secret alerts by confidence (default: high, other)"
                    ),
                    "validity": _enum_array_param(AlertValidityStatus, "Filter secret alerts by validity"),
                    "top": {"type": "integer", "description": "Maximum number of alerts (default: 100)"},
                    "order_by": {
                        "type": "string",
                        "enum": ["id", "firstSeen", "lastSeen", "fixedOn", "severity"],
                        "description": "Order results by this field (default: severity)"
                    },
                    "continuation_token": {"type": "string", "description": "Continuation token for pagination"}
                },
                "required": ["project", "repository"]
            }
        ),
        Tool(
            name="advsec_get_alert_details",
            description="Get detailed information about a specific Advanced Security alert.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT,
                    "repository": {"type": "string", "description": "The name or ID of the repository"},
                    "alert_id": {"type": "integer", "description": "ID of the alert"},
                    "ref": {"type": "string", "description": "Git reference (branch) of the alert"}
                },
                "required": ["project", "repository", "alert_id"]
            }
        ),
    ]


DOMAIN_TOOLS = {
    Domain.CORE: _core_tools,
    Domain.WORK: _work_tools,
    Domain.BUILDS: _build_tools,
    Domain.REPOSITORIES: _repository_tools,
    Domain.WORK_ITEMS: _work_item_tools,
    Domain.RELEASES: _release_tools,
    Domain.WIKI: _wiki_tools,
    Domain.TEST_PLANS: _test_plan_tools,
    Domain.SEARCH: _search_tools,
    Domain.ADVANCED_SECURITY: _advanced_security_tools,
}


def get_tools(domains: Optional[DomainsManager] = None) -> list[Tool]:
    """Get the MCP tools of every enabled domain (all domains if no manager is given)."""
    tools = []
    for domain, domain_tools in DOMAIN_TOOLS.items():
        if domains is None or domains.is_domain_enabled(domain):
            tools.extend(domain_tools())
    return tools
