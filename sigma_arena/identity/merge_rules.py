from __future__ import annotations

from enum import Enum
from uuid import UUID

from sigma_arena.core.errors import MergeInconsistencyError


class MergeAction(str, Enum):
    PROCEED = "PROCEED"
    NOOP = "NOOP"


def plan_merge(
    *,
    source_id: UUID,
    source_status: str,
    source_merged_into: UUID | None,
    source_auth_id: str | None,
    target_id: UUID,
    target_status: str,
    target_auth_id: str | None,
) -> MergeAction:
    """Decides whether a device account may be folded into an auth account.

    A source already merged into the same target is a no-op so retries are safe.
    """
    if source_id == target_id:
        return MergeAction.NOOP
    if source_status == "MERGED":
        if source_merged_into == target_id:
            return MergeAction.NOOP
        raise MergeInconsistencyError("source already merged into another account")
    if target_status != "ACTIVE":
        raise MergeInconsistencyError("target account is not active")
    if source_auth_id is not None:
        raise MergeInconsistencyError("source account is linked to an auth identity")
    if target_auth_id is None:
        raise MergeInconsistencyError("target account has no auth identity")
    return MergeAction.PROCEED
