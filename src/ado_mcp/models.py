"""Enumerations of the Azure DevOps REST API.

The remote API expects integer codes for its filter and ordering parameters.
Each table below lists the forward ``name -> code`` pairs exactly as the
service defines them; tool handlers translate caller-supplied names into
these codes through ``ado_mcp.enums``.
"""
import enum


# ============================================================================
# Advanced Security
# ============================================================================

class AlertType(enum.IntEnum):
    """Advanced Security alert type."""

    UNKNOWN = 0
    DEPENDENCY = 1
    SECRET = 2
    CODE = 3


class State(enum.IntEnum):
    """Advanced Security alert state (flags)."""

    UNKNOWN = 0
    ACTIVE = 1
    DISMISSED = 2
    FIXED = 4
    AUTO_DISMISSED = 8


class Severity(enum.IntEnum):
    """Advanced Security alert severity."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3
    NOTE = 4
    WARNING = 5
    ERROR = 6
    UNDEFINED = 7


class Confidence(enum.IntEnum):
    """Confidence level of a secret-scanning alert."""

    HIGH = 0
    OTHER = 1


class AlertValidityStatus(enum.IntEnum):
    """Validity of a leaked secret."""

    NONE = 0
    UNKNOWN = 1
    ACTIVE = 2
    INACTIVE = 3


# ============================================================================
# Repositories
# ============================================================================

class PullRequestStatus(enum.IntEnum):
    """Pull request status filter."""

    NOT_SET = 0
    ACTIVE = 1
    ABANDONED = 2
    COMPLETED = 3
    ALL = 4


# ============================================================================
# Work Items
# ============================================================================

class QueryExpand(enum.IntEnum):
    """Expand options for saved work item queries."""

    NONE = 0
    WIQL = 1
    CLAUSES = 2
    ALL = 3
    MINIMAL = 4


class WorkItemExpand(enum.IntEnum):
    """Expand options for work item retrieval."""

    NONE = 0
    RELATIONS = 1
    FIELDS = 2
    LINKS = 3
    ALL = 4


# Friendly link names -> work item relation types
LINK_TYPES: dict[str, str] = {
    "parent": "System.LinkTypes.Hierarchy-Reverse",
    "child": "System.LinkTypes.Hierarchy-Forward",
    "duplicate": "System.LinkTypes.Duplicate-Forward",
    "duplicate of": "System.LinkTypes.Duplicate-Reverse",
    "related": "System.LinkTypes.Related",
    "successor": "System.LinkTypes.Dependency-Forward",
    "predecessor": "System.LinkTypes.Dependency-Reverse",
    "tested by": "Microsoft.VSTS.Common.TestedBy-Forward",
    "tests": "Microsoft.VSTS.Common.TestedBy-Reverse",
    "affects": "Microsoft.VSTS.Common.Affects-Forward",
    "affected by": "Microsoft.VSTS.Common.Affects-Reverse",
    "artifact": "ArtifactLink",
}


# ============================================================================
# Builds
# ============================================================================

class BuildQueryOrder(enum.IntEnum):
    """Sort order for build queries."""

    FINISH_TIME_ASCENDING = 2
    FINISH_TIME_DESCENDING = 3
    QUEUE_TIME_DESCENDING = 4
    QUEUE_TIME_ASCENDING = 5
    START_TIME_DESCENDING = 6
    START_TIME_ASCENDING = 7


class DefinitionQueryOrder(enum.IntEnum):
    """Sort order for build definition queries."""

    NONE = 0
    LAST_MODIFIED_ASCENDING = 1
    LAST_MODIFIED_DESCENDING = 2
    DEFINITION_NAME_ASCENDING = 3
    DEFINITION_NAME_DESCENDING = 4


class StageUpdateType(enum.IntEnum):
    """Action to apply to a build stage."""

    CANCEL = 0
    RETRY = 1


# ============================================================================
# Releases
# ============================================================================

class ReleaseStatus(enum.IntEnum):
    """Release status filter."""

    UNDEFINED = 0
    DRAFT = 1
    ACTIVE = 2
    ABANDONED = 4


class ReleaseQueryOrder(enum.IntEnum):
    DESCENDING = 0
    ASCENDING = 1


class ReleaseExpands(enum.IntEnum):
    """Expand options for release queries (flags)."""

    NONE = 0
    ENVIRONMENTS = 2
    ARTIFACTS = 4
    APPROVALS = 8
    MANUAL_INTERVENTIONS = 16
    VARIABLES = 32
    TAGS = 64


class ReleaseDefinitionExpands(enum.IntEnum):
    """Expand options for release definition queries (flags)."""

    NONE = 0
    ENVIRONMENTS = 2
    ARTIFACTS = 4
    TRIGGERS = 8
    VARIABLES = 16
    TAGS = 32
    LAST_RELEASE = 64


class ReleaseDefinitionQueryOrder(enum.IntEnum):
    ID_ASCENDING = 0
    ID_DESCENDING = 1
    NAME_ASCENDING = 2
    NAME_DESCENDING = 3
