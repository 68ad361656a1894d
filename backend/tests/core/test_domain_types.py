"""Domain Types — verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Stream variants are exactly the four wire suffixes
    - Code alphabets differ per entity kind
"""

import string

from control_plane.core.domain_types import (
    CODE_ALPHABETS, CODE_LENGTH, ClientId, CodeKind, ConnectionId, PipelineId,
    PipelineStatus, StreamVariant, WorkspaceId,
)


def test_identity_types_wrap_str():
    assert WorkspaceId("ws-1") == "ws-1"
    assert PipelineId("p-1") == "p-1"
    assert ClientId("c-1") == "c-1"
    assert ConnectionId("k-1") == "k-1"


def test_stream_variant_has_four_members():
    assert {v.value for v in StreamVariant} == {"source", "sink", "dlq", "replay"}


def test_pipeline_status_starts_with_draft():
    assert PipelineStatus("draft") is PipelineStatus.DRAFT
    assert len(PipelineStatus) == 4


def test_enums_serialize_to_string():
    assert StreamVariant.SINK == "sink"
    assert PipelineStatus.ACTIVE.value == "active"


def test_code_alphabets_per_kind():
    assert CODE_ALPHABETS[CodeKind.WORKSPACE] == string.ascii_lowercase
    assert set(CODE_ALPHABETS[CodeKind.PIPELINE]) == set(
        string.ascii_uppercase + string.digits,
    )
    assert CODE_LENGTH == 4
