"""Policy store interface and the save rules shared by every backend."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from syncops_lifecycle.exceptions import PolicyValidationError
from syncops_lifecycle.models import PolicyExecutionLog, PolicySchedule, StorageLifecyclePolicy
from syncops_lifecycle.validation import validate_policy_set, validate_storage_policy


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PolicyStore(Protocol):
    """Repository for lifecycle policies and their execution logs.

    Deleted policies are soft-deleted: they stay in storage but ``get`` and
    ``list`` no longer return them.
    """

    def list(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = True,
    ) -> list[StorageLifecyclePolicy]: ...

    def get(self, policy_id: str) -> StorageLifecyclePolicy | None: ...

    def save(self, policy: StorageLifecyclePolicy, *, validate: bool = True) -> StorageLifecyclePolicy: ...

    def delete(self, policy_id: str) -> None: ...

    def set_active(self, policy_id: str, active: bool) -> StorageLifecyclePolicy: ...

    def update_schedule(self, policy_id: str, schedule: PolicySchedule) -> StorageLifecyclePolicy: ...

    def append_log(self, log: PolicyExecutionLog) -> None: ...

    def list_logs(self, policy_id: str | None = None, limit: int = 50) -> list[PolicyExecutionLog]: ...


def check_policy(
    policy: StorageLifecyclePolicy,
    siblings: list[StorageLifecyclePolicy],
    *,
    enforce_priority_rules: bool,
) -> None:
    """Raise PolicyValidationError if ``policy`` may not be saved.

    Args:
        policy: The policy about to be written.
        siblings: Other stored policies of the same organization.
        enforce_priority_rules: Also check priority uniqueness and legal hold
            precedence across the organization's active policies.
    """

    result = validate_storage_policy(policy)
    errors = list(result.errors)

    if enforce_priority_rules and policy.is_active:
        others = [p for p in siblings if p.id != policy.id]
        errors.extend(validate_policy_set([*others, policy]).errors)

    if errors:
        raise PolicyValidationError(errors)


def stamp_for_save(
    policy: StorageLifecyclePolicy,
    existing: StorageLifecyclePolicy | None,
) -> StorageLifecyclePolicy:
    """Apply versioning and timestamps. Edits bump the version by one."""

    now = _now()
    if existing is None:
        return policy.model_copy(
            update={
                "version": max(policy.version, 1),
                "created_at": policy.created_at or now,
                "updated_at": now,
            }
        )
    return policy.model_copy(
        update={
            "version": existing.version + 1,
            "created_at": existing.created_at or policy.created_at or now,
            "created_by": existing.created_by or policy.created_by,
            "updated_at": now,
        }
    )


def soft_deleted(policy: StorageLifecyclePolicy) -> StorageLifecyclePolicy:
    now = _now()
    return policy.model_copy(update={"is_active": False, "deleted_at": now, "updated_at": now})
