"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Entity ids are opaque strings wrapped in NewTypes — never mix a ClientId with a ConnectionId
    - All valid states encoded as Enums — no raw string matching
    - Code alphabets and limits are declared once here

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON documents without custom encoders
    - String ids (not UUID): workspaces, clients and connections may be created
      with caller-chosen ids, UUIDs are only the default
"""

import string
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

WorkspaceId = NewType("WorkspaceId", str)
PipelineId = NewType("PipelineId", str)
ClientId = NewType("ClientId", str)
ConnectionId = NewType("ConnectionId", str)


# ─── Enums ───────────────────────────────────────────────────────

class WorkspaceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PipelineStatus(str, Enum):
    """Pipeline lifecycle — every pipeline starts in DRAFT."""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    FAILED = "failed"


class StreamVariant(str, Enum):
    """Role tag of a stream; last segment of its wire name."""
    SOURCE = "source"
    SINK = "sink"
    DLQ = "dlq"
    REPLAY = "replay"


class ConnectorType(str, Enum):
    HTTP = "HTTP"
    S3 = "S3"


class TransformType(str, Enum):
    JSONATA = "jsonata"


class ReferenceStatus(str, Enum):
    """Status shared by clients and connections."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class CodeKind(str, Enum):
    """Entity kinds that carry a generated short code."""
    WORKSPACE = "workspace"
    PIPELINE = "pipeline"


# ─── Identifier Codes ────────────────────────────────────────────

CODE_LENGTH = 4
MAX_CODE_ATTEMPTS = 10

# Workspace codes: 26^4 = 456,976. Pipeline codes: 36^4 = 1,679,616.
CODE_ALPHABETS: dict[CodeKind, str] = {
    CodeKind.WORKSPACE: string.ascii_lowercase,
    CodeKind.PIPELINE: string.ascii_uppercase + string.digits,
}


# ─── Stream Names ────────────────────────────────────────────────

STREAM_NAME_PATTERN = r"^[a-z0-9._-]+$"
MAX_STREAM_NAME_LENGTH = 100

TOPIC_SEPARATOR = "."
MIN_TOPIC_SEGMENTS = 5
