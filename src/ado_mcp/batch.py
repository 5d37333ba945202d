"""Work item batch requests.

Builds the body of a ``$batch`` call from a flat list of per-work-item field
updates and submits it as a single request:

- Updates are grouped by work item ID in first-seen order
- Within a work item, operations keep their original order
- Long-text fields get one ``/multilineFieldsFormat/<Field>`` operation,
  appended after the data operations of that work item
"""
import logging
from collections.abc import Iterable
from typing import Any, Optional

import httpx

from .models import LINK_TYPES
from .schemas import WorkItemLink, WorkItemUpdate

logger = logging.getLogger("ado-mcp.batch")

BATCH_API_VERSION = "5.0"

JSON_PATCH_HEADERS = {"Content-Type": "application/json-patch+json"}

FIELDS_PREFIX = "/fields/"
FORMAT_PREFIX = "/multilineFieldsFormat/"

# Values longer than this on a long-text field are rendered as Markdown
MARKDOWN_LENGTH_THRESHOLD = 50

LONG_TEXT_FIELDS = frozenset({
    "System.Description",
    "Microsoft.VSTS.TCM.ReproSteps",
    "Microsoft.VSTS.Common.AcceptanceCriteria",
    "Microsoft.VSTS.TCM.SystemInfo",
    "Microsoft.VSTS.Common.Resolution",
})


class BatchRequestError(Exception):
    """Raised when the batch endpoint answers with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


def get_link_type_from_name(name: str) -> str:
    """Map a friendly link name ("parent", "tested by", ...) to its relation type.

    Raises:
        ValueError: If the name is not a known link type
    """
    try:
        return LINK_TYPES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown link type: {name}") from None


def group_updates(updates: Iterable[WorkItemUpdate]) -> dict[int, list[WorkItemUpdate]]:
    """Partition updates by work item ID, preserving first-seen ID order."""
    groups: dict[int, list[WorkItemUpdate]] = {}
    for update in updates:
        groups.setdefault(update.id, []).append(update)
    return groups


def _field_name(path: str) -> Optional[str]:
    if path.startswith(FIELDS_PREFIX) and len(path) > len(FIELDS_PREFIX):
        return path[len(FIELDS_PREFIX):]
    return None


def _needs_format(field: str, update: WorkItemUpdate) -> bool:
    if update.format:
        return True
    return (
        field in LONG_TEXT_FIELDS
        and update.value is not None
        and len(update.value) > MARKDOWN_LENGTH_THRESHOLD
    )


def add_format_operations(updates: Iterable[WorkItemUpdate]) -> list[dict[str, Any]]:
    """Turn one work item's updates into JSON-Patch operations.

    Data operations come first, in their original order. Each field that
    needs a format directive then gets exactly one format operation; if the
    field qualified more than once, the last qualifying update decides its op
    and format.
    """
    operations = []
    formats: dict[str, tuple[str, str]] = {}

    for update in updates:
        operation: dict[str, Any] = {"op": update.op, "path": update.path}
        if update.value is not None or update.op != "remove":
            operation["value"] = update.value
        operations.append(operation)

        field = _field_name(update.path)
        if field and _needs_format(field, update):
            formats[field] = (update.op, update.format or "Markdown")

    for field, (op, value) in formats.items():
        operations.append({"op": op, "path": f"{FORMAT_PREFIX}{field}", "value": value})

    return operations


def _work_item_uri(work_item_id: int) -> str:
    return f"/_apis/wit/workitems/{work_item_id}?api-version={BATCH_API_VERSION}"


def build_batch_request(updates: Iterable[WorkItemUpdate]) -> list[dict[str, Any]]:
    """Build the ``$batch`` body for a list of field updates (one PATCH per work item)."""
    return [
        {
            "method": "PATCH",
            "uri": _work_item_uri(work_item_id),
            "headers": dict(JSON_PATCH_HEADERS),
            "body": add_format_operations(group),
        }
        for work_item_id, group in group_updates(updates).items()
    ]


def build_link_batch_request(
    project: str,
    org_url: str,
    links: Iterable[WorkItemLink]
) -> list[dict[str, Any]]:
    """Build the ``$batch`` body that adds relations between work items."""
    groups: dict[int, list[WorkItemLink]] = {}
    for link in links:
        groups.setdefault(link.id, []).append(link)

    return [
        {
            "method": "PATCH",
            "uri": _work_item_uri(work_item_id),
            "headers": dict(JSON_PATCH_HEADERS),
            "body": [
                {
                    "op": "add",
                    "path": "/relations/-",
                    "value": {
                        "rel": get_link_type_from_name(link.type),
                        "url": f"{org_url}/{project}/_apis/wit/workItems/{link.link_to_id}",
                        "attributes": {"comment": link.comment or ""},
                    },
                }
                for link in group
            ],
        }
        for work_item_id, group in groups.items()
    ]


async def submit_batch(client: httpx.AsyncClient, body: list[dict[str, Any]]) -> Any:
    """Send a batch body to the ``$batch`` endpoint.

    Returns:
        The decoded JSON response

    Raises:
        BatchRequestError: If the service answers with a non-success status
    """
    response = await client.patch(
        "/_apis/wit/$batch",
        params={"api-version": BATCH_API_VERSION},
        json=body,
        headers={"Content-Type": "application/json"},
    )
    if not response.is_success:
        logger.error(f"Batch request failed: {response.status_code} {response.reason_phrase}")
        raise BatchRequestError(
            f"Failed to update work items in batch: {response.reason_phrase}",
            response.status_code
        )

    logger.info(f"Batch request with {len(body)} sub-requests succeeded")
    return response.json()
