"""MCP tool handlers for Azure DevOps.

All handlers follow a consistent pattern:
- Accept: arguments dict, httpx.AsyncClient bound to the organization URL, and the ServerConfig
- Return: list[TextContent]
- Translate enum-like selector names to API codes with ``ado_mcp.enums``
- Call ``response.raise_for_status()``; errors are mapped to text by the server
- Log one line per successful call
"""
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from mcp.types import TextContent

from . import formatters
from .batch import add_format_operations, build_batch_request, build_link_batch_request, submit_batch
from .config import ServerConfig
from .enums import map_string_array_to_enum, map_string_to_enum, safe_enum_convert
from .models import (
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
from .schemas import WorkItemField, WorkItemLink, WorkItemUpdate
from .steps import convert_steps_to_xml

logger = logging.getLogger("ado-mcp.handlers")

API_VERSION = "7.1"
PREVIEW_API_VERSION = "7.2-preview.1"

MAX_BATCH_UPDATES = 200

JSON_PATCH_HEADERS = {"Content-Type": "application/json-patch+json"}


def _params(api_version: str = API_VERSION, **params: Any) -> dict[str, Any]:
    """Build query parameters, dropping unset values."""
    query = {k: v for k, v in params.items() if v is not None}
    query["api-version"] = api_version
    return query


def _code(value: Optional[str], enum_object, default: Optional[int] = None) -> Optional[int]:
    code = map_string_to_enum(value, enum_object, default)
    return int(code) if code is not None else None


def _choice(value: Optional[str], enum_object, default: Optional[int] = None) -> Optional[int]:
    """Code of a selector already constrained to the schema's ``enum`` choices."""
    code = safe_enum_convert(enum_object, value)
    if code is None:
        code = default
    return int(code) if code is not None else None


def _codes(values: Optional[list[str]], enum_object) -> Optional[str]:
    """Comma-joined codes for a list filter, or None if nothing matched."""
    codes = map_string_array_to_enum(values, enum_object)
    return ",".join(str(int(code)) for code in codes) if codes else None


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


# ============================================================================
# Core Handlers
# ============================================================================

async def handle_list_projects(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """List projects of the organization, optionally filtered by name."""
    params = _params(
        stateFilter=arguments.get("state_filter", "wellFormed"),
        **{"$top": arguments.get("top"), "$skip": arguments.get("skip")}
    )
    response = await client.get("/_apis/projects", params=params)
    response.raise_for_status()
    projects = response.json().get("value", [])

    name_filter = arguments.get("project_name_filter")
    if name_filter:
        projects = [p for p in projects if name_filter.lower() in p["name"].lower()]

    logger.info(f"Successfully listed {len(projects)} projects")
    if not projects:
        return _text("No projects found.")

    items_text = "\n\n".join(formatters.format_project(p) for p in projects)
    return _text(f"Found {len(projects)} projects\n\n{items_text}")


async def handle_list_project_teams(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """List the teams of a project."""
    project = arguments["project"]
    params = _params(**{
        "$mine": arguments.get("mine"),
        "$top": arguments.get("top"),
        "$skip": arguments.get("skip"),
    })
    response = await client.get(f"/_apis/projects/{_segment(project)}/teams", params=params)
    response.raise_for_status()
    teams = response.json().get("value", [])
    logger.info(f"Successfully listed {len(teams)} teams for project {project}")

    items_text = "\n".join(formatters.format_team(t) for t in teams)
    return _text(f"Found {len(teams)} teams in {project}\n\n{items_text}")


# ============================================================================
# Work Handlers
# ============================================================================

async def handle_list_team_iterations(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    team = arguments["team"]
    params = _params(**{"$timeframe": arguments.get("timeframe")})
    response = await client.get(
        f"/{_segment(project)}/{_segment(team)}/_apis/work/teamsettings/iterations",
        params=params
    )
    response.raise_for_status()
    iterations = response.json().get("value", [])
    logger.info(f"Successfully listed {len(iterations)} iterations for team {team}")

    return _text(formatters.format_json(iterations))


# ============================================================================
# Build Handlers
# ============================================================================

async def handle_get_build_definitions(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    params = _params(
        name=arguments.get("name"),
        path=arguments.get("path"),
        queryOrder=_choice(arguments.get("query_order"), DefinitionQueryOrder),
        **{"$top": arguments.get("top")}
    )
    response = await client.get(f"/{_segment(project)}/_apis/build/definitions", params=params)
    response.raise_for_status()
    definitions = response.json().get("value", [])
    logger.info(f"Successfully listed {len(definitions)} build definitions for project {project}")

    return _text(formatters.format_json(definitions))


async def handle_get_builds(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """List builds of a project, newest queued first unless another order is given."""
    project = arguments["project"]
    definitions = arguments.get("definitions")
    params = _params(
        definitions=",".join(str(d) for d in definitions) if definitions else None,
        branchName=arguments.get("branch_name"),
        queryOrder=_choice(
            arguments.get("query_order"), BuildQueryOrder, BuildQueryOrder.QUEUE_TIME_DESCENDING
        ),
        **{"$top": arguments.get("top")}
    )
    response = await client.get(f"/{_segment(project)}/_apis/build/builds", params=params)
    response.raise_for_status()
    builds = response.json().get("value", [])
    logger.info(f"Successfully listed {len(builds)} builds for project {project}")
    if not builds:
        return _text("No builds found.")

    items_text = "\n\n".join(formatters.format_build(b) for b in builds)
    return _text(f"Found {len(builds)} builds\n\n{items_text}")


async def handle_update_build_stage(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """Retry or cancel a build stage.

    Raises:
        ValueError: If ``status`` is not a known stage update type
    """
    project = arguments["project"]
    build_id = arguments["build_id"]
    stage_name = arguments["stage_name"]
    state = _choice(arguments.get("status"), StageUpdateType)
    if state is None:
        raise ValueError(f"Invalid stage update status: {arguments.get('status')}")

    response = await client.patch(
        f"/{_segment(project)}/_apis/build/builds/{build_id}/stages/{_segment(stage_name)}",
        params=_params(),
        json={
            "forceRetryAllJobs": arguments.get("force_retry_all_jobs", False),
            "state": state,
        }
    )
    response.raise_for_status()
    logger.info(f"Successfully updated stage {stage_name} of build {build_id}")

    return _text(f"Updated stage '{stage_name}' of build {build_id} ({arguments['status']})")


# ============================================================================
# Repository Handlers
# ============================================================================

async def handle_list_repos_by_project(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    response = await client.get(f"/{_segment(project)}/_apis/git/repositories", params=_params())
    response.raise_for_status()
    repos = response.json().get("value", [])

    name_filter = arguments.get("repo_name_filter")
    if name_filter:
        repos = [r for r in repos if name_filter.lower() in r["name"].lower()]
    repos = sorted(repos, key=lambda r: r["name"].lower())
    if arguments.get("top"):
        repos = repos[:arguments["top"]]

    logger.info(f"Successfully listed {len(repos)} repositories for project {project}")
    summary = [
        {"id": r["id"], "name": r["name"], "isDisabled": r.get("isDisabled"), "webUrl": r.get("webUrl")}
        for r in repos
    ]
    return _text(formatters.format_json(summary))


async def handle_list_pull_requests_by_repo(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    repository_id = arguments["repository_id"]
    params = _params(**{
        "searchCriteria.status": _code(
            arguments.get("status"), PullRequestStatus, PullRequestStatus.ACTIVE
        ),
        "searchCriteria.creatorId": arguments.get("creator_id"),
        "searchCriteria.reviewerId": arguments.get("reviewer_id"),
        "$top": arguments.get("top"),
    })
    response = await client.get(
        f"/{_segment(project)}/_apis/git/repositories/{_segment(repository_id)}/pullrequests",
        params=params
    )
    response.raise_for_status()
    pull_requests = response.json().get("value", [])
    logger.info(f"Successfully listed {len(pull_requests)} pull requests for {repository_id}")
    if not pull_requests:
        return _text("No pull requests found.")

    items_text = "\n\n".join(formatters.format_pull_request(pr) for pr in pull_requests)
    return _text(f"Found {len(pull_requests)} pull requests\n\n{items_text}")


# ============================================================================
# Work Item Handlers
# ============================================================================

async def handle_get_work_item(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    work_item_id = arguments["id"]
    fields = arguments.get("fields")
    params = _params(
        fields=",".join(fields) if fields else None,
        asOf=arguments.get("as_of"),
        **{"$expand": _code(arguments.get("expand"), WorkItemExpand)}
    )
    response = await client.get(f"/{_segment(project)}/_apis/wit/workitems/{work_item_id}", params=params)
    response.raise_for_status()
    result = response.json()
    logger.info(f"Successfully retrieved work item {work_item_id}")

    return _text(f"{formatters.format_work_item(result)}\n\n{formatters.format_json(result)}")


async def handle_create_work_item(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """Create a work item from a list of field values.

    Fields flagged Markdown (or long text fields) get the same format
    directives as batch updates.
    """
    project = arguments["project"]
    work_item_type = arguments["work_item_type"]
    fields = [WorkItemField.model_validate(f) for f in arguments["fields"]]

    # New work items have no ID yet; the patch body is built the same way
    operations = add_format_operations(
        WorkItemUpdate(id=0, op="add", path=f"/fields/{f.name}", value=f.value, format=f.format)
        for f in fields
    )
    response = await client.post(
        f"/{_segment(project)}/_apis/wit/workitems/${_segment(work_item_type)}",
        params=_params(),
        json=operations,
        headers=JSON_PATCH_HEADERS
    )
    response.raise_for_status()
    result = response.json()
    logger.info(f"Successfully created {work_item_type} {result['id']}")

    return _text(f"Created work item {result['id']}\n\n{formatters.format_work_item(result)}")


async def handle_update_work_items_batch(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """Apply field updates to several work items with one ``$batch`` request."""
    raw_updates = arguments["updates"]
    if len(raw_updates) > MAX_BATCH_UPDATES:
        return _text(f"Error: Too many updates ({len(raw_updates)}). Maximum is {MAX_BATCH_UPDATES} per call.")

    updates = [WorkItemUpdate.model_validate(u) for u in raw_updates]
    result = await submit_batch(client, build_batch_request(updates))
    logger.info(f"Successfully applied {len(updates)} work item updates")

    return _text(formatters.format_json(result))


async def handle_work_items_link(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    raw_links = arguments["updates"]
    if len(raw_links) > MAX_BATCH_UPDATES:
        return _text(f"Error: Too many updates ({len(raw_links)}). Maximum is {MAX_BATCH_UPDATES} per call.")

    links = [WorkItemLink.model_validate(link) for link in raw_links]
    result = await submit_batch(client, build_link_batch_request(project, config.org_url, links))
    logger.info(f"Successfully linked {len(links)} work items")

    return _text(formatters.format_json(result))


async def handle_get_query(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    query = arguments["query"]
    params = _params(**{
        "$expand": _choice(arguments.get("expand"), QueryExpand),
        "$depth": arguments.get("depth", 0),
        "$includeDeleted": arguments.get("include_deleted"),
        "$useIsoDateFormat": arguments.get("use_iso_date_format"),
    })
    response = await client.get(
        f"/{_segment(project)}/_apis/wit/queries/{quote(query, safe='/')}",
        params=params
    )
    response.raise_for_status()
    logger.info(f"Successfully retrieved query {query}")

    return _text(formatters.format_json(response.json()))


# ============================================================================
# Release Handlers
# ============================================================================

async def handle_get_release_definitions(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    params = _params(
        searchText=arguments.get("search_text"),
        queryOrder=_choice(
            arguments.get("query_order"),
            ReleaseDefinitionQueryOrder,
            ReleaseDefinitionQueryOrder.NAME_ASCENDING
        ),
        **{
            "$expand": _choice(arguments.get("expand"), ReleaseDefinitionExpands, ReleaseDefinitionExpands.NONE),
            "$top": arguments.get("top"),
        }
    )
    response = await client.get(
        f"{config.service_url('vsrm')}/{_segment(project)}/_apis/release/definitions",
        params=params
    )
    response.raise_for_status()
    definitions = response.json().get("value", [])
    logger.info(f"Successfully listed {len(definitions)} release definitions for project {project}")

    return _text(formatters.format_json(definitions))


async def handle_get_releases(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    params = _params(
        definitionId=arguments.get("definition_id"),
        statusFilter=_choice(arguments.get("status_filter"), ReleaseStatus),
        queryOrder=_choice(arguments.get("query_order"), ReleaseQueryOrder, ReleaseQueryOrder.DESCENDING),
        **{
            "$expand": _choice(arguments.get("expand"), ReleaseExpands, ReleaseExpands.NONE),
            "$top": arguments.get("top"),
        }
    )
    response = await client.get(
        f"{config.service_url('vsrm')}/{_segment(project)}/_apis/release/releases",
        params=params
    )
    response.raise_for_status()
    releases = response.json().get("value", [])
    logger.info(f"Successfully listed {len(releases)} releases for project {project}")

    return _text(formatters.format_json(releases))


# ============================================================================
# Wiki Handlers
# ============================================================================

async def handle_list_wikis(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments.get("project")
    path = f"/{_segment(project)}/_apis/wiki/wikis" if project else "/_apis/wiki/wikis"
    response = await client.get(path, params=_params())
    response.raise_for_status()
    wikis = response.json().get("value", [])
    logger.info(f"Successfully listed {len(wikis)} wikis")
    if not wikis:
        return _text("No wikis found.")

    return _text(formatters.format_json(wikis))


async def handle_get_page_content(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    wiki = arguments["wiki_identifier"]
    page_path = arguments["path"]
    response = await client.get(
        f"/{_segment(project)}/_apis/wiki/wikis/{_segment(wiki)}/pages",
        params=_params(path=page_path, includeContent="true")
    )
    response.raise_for_status()
    logger.info(f"Successfully retrieved wiki page {page_path} from {wiki}")

    return _text(response.json().get("content") or "")


# ============================================================================
# Test Plan Handlers
# ============================================================================

async def handle_list_test_plans(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    params = _params(
        filterActivePlans=str(arguments.get("filter_active_plans", True)).lower(),
        includePlanDetails=str(arguments.get("include_plan_details", False)).lower()
    )
    response = await client.get(f"/{_segment(project)}/_apis/testplan/plans", params=params)
    response.raise_for_status()
    plans = response.json().get("value", [])
    logger.info(f"Successfully listed {len(plans)} test plans for project {project}")

    return _text(formatters.format_json(plans))


async def handle_create_test_case(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    """Create a Test Case work item; ``steps`` is compiled to steps XML."""
    project = arguments["project"]
    operations = [{"op": "add", "path": "/fields/System.Title", "value": arguments["title"]}]

    if arguments.get("steps"):
        operations.append({
            "op": "add",
            "path": "/fields/Microsoft.VSTS.TCM.Steps",
            "value": convert_steps_to_xml(arguments["steps"]),
        })
    if arguments.get("priority") is not None:
        operations.append({
            "op": "add",
            "path": "/fields/Microsoft.VSTS.Common.Priority",
            "value": arguments["priority"],
        })
    if arguments.get("area_path"):
        operations.append({"op": "add", "path": "/fields/System.AreaPath", "value": arguments["area_path"]})
    if arguments.get("iteration_path"):
        operations.append({
            "op": "add",
            "path": "/fields/System.IterationPath",
            "value": arguments["iteration_path"],
        })

    response = await client.post(
        f"/{_segment(project)}/_apis/wit/workitems/$Test%20Case",
        params=_params(),
        json=operations,
        headers=JSON_PATCH_HEADERS
    )
    response.raise_for_status()
    result = response.json()
    logger.info(f"Successfully created test case {result['id']}")

    return _text(f"Created test case {result['id']}\n\n{formatters.format_work_item(result)}")


# ============================================================================
# Search Handlers
# ============================================================================

async def handle_search_code(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    filters = {
        key: arguments[arg]
        for key, arg in (("Project", "project"), ("Repository", "repository"), ("Branch", "branch"))
        if arguments.get(arg)
    }
    body = {
        "searchText": arguments["search_text"],
        "$skip": arguments.get("skip", 0),
        "$top": arguments.get("top", 5),
        "includeFacets": False,
    }
    if filters:
        body["filters"] = filters

    response = await client.post(
        f"{config.service_url('almsearch')}/_apis/search/codesearchresults",
        params=_params(),
        json=body
    )
    response.raise_for_status()
    result = response.json()
    logger.info(f"Code search for '{arguments['search_text']}' returned {result.get('count', 0)} results")

    return _text(formatters.format_json(result))


# ============================================================================
# Advanced Security Handlers
# ============================================================================

def build_alert_criteria(arguments: dict) -> dict[str, Any]:
    """Build the ``criteria.*`` query parameters of an alert search.

    Confidence and validity filters only exist for secret alerts, so they are
    sent when no alert type is given or the type is ``secret``.
    """
    alert_type = _code(arguments.get("alert_type"), AlertType)
    criteria = {
        "criteria.alertType": alert_type,
        "criteria.states": _codes(arguments.get("states"), State),
        "criteria.severities": _codes(arguments.get("severities"), Severity),
        "criteria.ruleId": arguments.get("rule_id"),
        "criteria.ruleName": arguments.get("rule_name"),
        "criteria.toolName": arguments.get("tool_name"),
        "criteria.ref": arguments.get("ref"),
        "criteria.onlyDefaultBranch": str(arguments.get("only_default_branch", True)).lower(),
    }
    if alert_type is None or alert_type == AlertType.SECRET:
        criteria["criteria.confidenceLevels"] = _codes(
            arguments.get("confidence_levels", ["high", "other"]), Confidence
        )
        criteria["criteria.validity"] = _codes(arguments.get("validity"), AlertValidityStatus)
    return criteria


async def handle_get_alerts(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    repository = arguments["repository"]
    params = _params(
        PREVIEW_API_VERSION,
        top=arguments.get("top", 100),
        orderBy=arguments.get("order_by", "severity"),
        continuationToken=arguments.get("continuation_token"),
        **build_alert_criteria(arguments)
    )
    response = await client.get(
        f"{config.service_url('advsec')}/{_segment(project)}/_apis/alert/repositories/{_segment(repository)}/alerts",
        params=params
    )
    response.raise_for_status()
    alerts = response.json().get("value", [])
    logger.info(f"Successfully listed {len(alerts)} alerts for repository {repository}")
    if not alerts:
        return _text("No alerts found.")

    items_text = "\n".join(formatters.format_alert(a) for a in alerts)
    return _text(f"Found {len(alerts)} alerts\n\n{items_text}\n\n{formatters.format_json(alerts)}")


async def handle_get_alert_details(
    arguments: dict,
    client: httpx.AsyncClient,
    config: ServerConfig
) -> list[TextContent]:
    project = arguments["project"]
    repository = arguments["repository"]
    alert_id = arguments["alert_id"]
    response = await client.get(
        f"{config.service_url('advsec')}/{_segment(project)}/_apis/alert/repositories/"
        f"{_segment(repository)}/alerts/{alert_id}",
        params=_params(PREVIEW_API_VERSION, ref=arguments.get("ref"))
    )
    response.raise_for_status()
    logger.info(f"Successfully retrieved alert {alert_id}")

    return _text(formatters.format_json(response.json()))


HANDLERS = {
    # Core
    "core_list_projects": handle_list_projects,
    "core_list_project_teams": handle_list_project_teams,
    # Work
    "work_list_team_iterations": handle_list_team_iterations,
    # Builds
    "build_get_definitions": handle_get_build_definitions,
    "build_get_builds": handle_get_builds,
    "build_update_build_stage": handle_update_build_stage,
    # Repositories
    "repo_list_repos_by_project": handle_list_repos_by_project,
    "repo_list_pull_requests_by_repo": handle_list_pull_requests_by_repo,
    # Work items
    "wit_get_work_item": handle_get_work_item,
    "wit_create_work_item": handle_create_work_item,
    "wit_update_work_items_batch": handle_update_work_items_batch,
    "wit_work_items_link": handle_work_items_link,
    "wit_get_query": handle_get_query,
    # Releases
    "release_get_definitions": handle_get_release_definitions,
    "release_get_releases": handle_get_releases,
    # Wiki
    "wiki_list_wikis": handle_list_wikis,
    "wiki_get_page_content": handle_get_page_content,
    # Test plans
    "testplan_list_test_plans": handle_list_test_plans,
    "testplan_create_test_case": handle_create_test_case,
    # Search
    "search_code": handle_search_code,
    # Advanced security
    "advsec_get_alerts": handle_get_alerts,
    "advsec_get_alert_details": handle_get_alert_details,
}
