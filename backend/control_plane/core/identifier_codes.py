"""Identifier Codes — drawing short public codes for workspaces and pipelines.

Invariants:
    - Codes are exactly CODE_LENGTH characters from the entity kind's alphabet
    - Characters come from the OS CSPRNG via secrets.choice (uniform, no modulo bias)

Design Decisions:
    - Only the draw lives in core; the uniqueness retry loop needs the store and
      lives in services/code_generator.py
"""

import secrets

from control_plane.core.domain_types import CODE_ALPHABETS, CODE_LENGTH, CodeKind


def alphabet_for(kind: CodeKind) -> str:
    return CODE_ALPHABETS[kind]


def draw_code(alphabet: str, length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def is_well_formed_code(code: str, kind: CodeKind) -> bool:
    alphabet = alphabet_for(kind)
    return len(code) == CODE_LENGTH and all(ch in alphabet for ch in code)
