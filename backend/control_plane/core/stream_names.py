"""Stream Names — normalization of user-typed names and the stream-name rule.

Invariants:
    - normalize_stream_name is applied by callers BEFORE validation, never by the validator
    - is_valid_stream_name is the single definition of a legal stream name

Design Decisions:
    - Normalization lowercases, turns whitespace runs into '-', then drops anything
      outside [a-z0-9._-] — the same steps operators see in the add-stream dialog
"""

import re

from control_plane.core.domain_types import MAX_STREAM_NAME_LENGTH, STREAM_NAME_PATTERN

_STREAM_NAME_RE = re.compile(STREAM_NAME_PATTERN)
_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9._-]")


def normalize_stream_name(raw: str) -> str:
    """'Orders Raw!' -> 'orders-raw'."""
    name = raw.strip().lower()
    name = _WHITESPACE_RE.sub("-", name)
    return _DISALLOWED_RE.sub("", name)


def is_valid_stream_name(name: str) -> bool:
    return (
        0 < len(name) <= MAX_STREAM_NAME_LENGTH
        and _STREAM_NAME_RE.fullmatch(name) is not None
    )
