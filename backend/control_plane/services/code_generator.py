"""Identifier Generator — collision-free short codes for workspaces and pipelines.

Invariants:
    - Returned code never reported as existing by `exists`
    - At most `max_attempts` draws; exhaustion raises CodeGenerationExhaustedError
    - Codes are generated once, at creation; nothing here regenerates a code

Design Decisions:
    - Bounded retries: the space is small (26^4 / 36^4) and each check is a round
      trip to the store, so unbounded retry could livelock under contention
    - `exists` is injected (a store's code_exists), making the loop testable
      with a plain async function
"""

import logging
from collections.abc import Awaitable, Callable

from control_plane.core.domain_types import CODE_LENGTH, MAX_CODE_ATTEMPTS, CodeKind
from control_plane.core.errors import CodeGenerationExhaustedError
from control_plane.core.identifier_codes import alphabet_for, draw_code

logger = logging.getLogger(__name__)

CodeExists = Callable[[str], Awaitable[bool]]


async def generate_unique_code(
    exists: CodeExists,
    kind: CodeKind,
    max_attempts: int = MAX_CODE_ATTEMPTS,
) -> str:
    alphabet = alphabet_for(kind)
    for attempt in range(1, max_attempts + 1):
        code = draw_code(alphabet, CODE_LENGTH)
        if not await exists(code):
            return code
        logger.debug(
            f"{kind.value} code collision, retrying",
            extra={"attempt": attempt, "code": code, "kind": kind.value},
        )
    logger.error(
        f"Exhausted {max_attempts} attempts generating a {kind.value} code",
        extra={"error_code": "CODE_GENERATION_EXHAUSTED", "kind": kind.value},
    )
    raise CodeGenerationExhaustedError(kind.value, max_attempts)
