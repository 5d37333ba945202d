"""Shared formatting functions for MCP responses.

List tools answer with a count and a short summary per item; single-item and
write tools answer with the JSON payload.
"""
import json
from typing import Any


def format_json(data: Any) -> str:
    """Pretty-print an API payload."""
    return json.dumps(data, indent=2, default=str)


def _display_name(identity: Any) -> str:
    if isinstance(identity, dict):
        return identity.get("displayName") or identity.get("uniqueName") or "unknown"
    return str(identity) if identity else "unassigned"


def format_project(project: dict) -> str:
    """Format a project for display."""
    desc_info = f"\nDescription: {project['description']}" if project.get('description') else ""
    return f"""**{project['name']}**
ID: {project['id']}
State: {project.get('state', 'unknown')}
Visibility: {project.get('visibility', 'unknown')}{desc_info}"""


def format_team(team: dict) -> str:
    """Format a team for display."""
    desc_info = f" - {team['description']}" if team.get('description') else ""
    return f"- **{team['name']}** ({team['id']}){desc_info}"


def format_build(build: dict) -> str:
    """Format a build for display."""
    definition = build.get('definition') or {}
    result_info = f" / {build['result']}" if build.get('result') else ""
    return f"""**{build.get('buildNumber', build['id'])}** ({definition.get('name', 'unknown definition')})
ID: {build['id']}
Status: {build.get('status', 'unknown')}{result_info}
Branch: {build.get('sourceBranch', 'unknown')}"""


def format_pull_request(pr: dict) -> str:
    """Format a pull request for display."""
    return f"""**!{pr['pullRequestId']} {pr.get('title', '')}**
Status: {pr.get('status', 'unknown')}
Author: {_display_name(pr.get('createdBy'))}
{pr.get('sourceRefName', '?')} -> {pr.get('targetRefName', '?')}"""


def format_work_item(work_item: dict) -> str:
    """Format a work item for display."""
    fields = work_item.get('fields') or {}
    return f"""**{fields.get('System.WorkItemType', 'Work Item')} {work_item['id']}: {fields.get('System.Title', '')}**
State: {fields.get('System.State', 'unknown')}
Assigned To: {_display_name(fields.get('System.AssignedTo'))}"""


def format_alert(alert: dict) -> str:
    """Format an Advanced Security alert for display."""
    return f"- #{alert.get('alertId')} [{alert.get('severity', 'unknown')}] {alert.get('title', '')} ({alert.get('state', 'unknown')})"
