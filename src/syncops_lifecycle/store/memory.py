"""In-process policy store.

Used by tests, simulations and the CLI's ``memory`` backend. Records are copied
on the way in and out so callers never share mutable state with the store.
"""

from __future__ import annotations

import threading

import structlog

from syncops_lifecycle.exceptions import PolicyNotFoundError
from syncops_lifecycle.models import PolicyExecutionLog, PolicySchedule, StorageLifecyclePolicy
from syncops_lifecycle.store.base import check_policy, soft_deleted, stamp_for_save

logger = structlog.get_logger()


class InMemoryPolicyStore:
    """Dict-backed implementation of the PolicyStore protocol."""

    def __init__(
        self,
        policies: list[StorageLifecyclePolicy] | None = None,
        *,
        enforce_priority_rules: bool = True,
    ) -> None:
        self._enforce_priority_rules = enforce_priority_rules
        self._lock = threading.Lock()
        # Insertion order is the tie-break order for equal priorities.
        self._policies: dict[str, StorageLifecyclePolicy] = {}
        self._logs: list[PolicyExecutionLog] = []
        for policy in policies or []:
            self._policies[policy.id] = policy.model_copy(deep=True)

    def list(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = True,
    ) -> list[StorageLifecyclePolicy]:
        with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._policies.values()
                if not p.is_deleted
                and (organization_id is None or p.organization_id == organization_id)
                and (include_inactive or p.is_active)
            ]

    def get(self, policy_id: str) -> StorageLifecyclePolicy | None:
        with self._lock:
            policy = self._policies.get(policy_id)
        if policy is None or policy.is_deleted:
            return None
        return policy.model_copy(deep=True)

    def save(self, policy: StorageLifecyclePolicy, *, validate: bool = True) -> StorageLifecyclePolicy:
        with self._lock:
            existing = self._policies.get(policy.id)
            if existing is not None and existing.is_deleted:
                raise PolicyNotFoundError(f"Policy {policy.id} has been deleted")

            if validate:
                siblings = [
                    p
                    for p in self._policies.values()
                    if p.organization_id == policy.organization_id and not p.is_deleted
                ]
                check_policy(policy, siblings, enforce_priority_rules=self._enforce_priority_rules)

            stored = stamp_for_save(policy, existing)
            self._policies[stored.id] = stored

        logger.info("policy_saved", policy_id=stored.id, version=stored.version, active=stored.is_active)
        return stored.model_copy(deep=True)

    def delete(self, policy_id: str) -> None:
        with self._lock:
            policy = self._policies.get(policy_id)
            if policy is None or policy.is_deleted:
                raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")
            self._policies[policy_id] = soft_deleted(policy)
        logger.info("policy_deleted", policy_id=policy_id)

    def set_active(self, policy_id: str, active: bool) -> StorageLifecyclePolicy:
        policy = self.get(policy_id)
        if policy is None:
            raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")
        # Deactivating is always allowed, even for a policy that no longer validates.
        return self.save(policy.model_copy(update={"is_active": active}), validate=active)

    def update_schedule(self, policy_id: str, schedule: PolicySchedule) -> StorageLifecyclePolicy:
        with self._lock:
            policy = self._policies.get(policy_id)
            if policy is None or policy.is_deleted:
                raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")
            updated = policy.model_copy(update={"schedule": schedule.model_copy()})
            self._policies[policy_id] = updated
        return updated.model_copy(deep=True)

    def append_log(self, log: PolicyExecutionLog) -> None:
        with self._lock:
            self._logs.append(log.model_copy(deep=True))

    def list_logs(self, policy_id: str | None = None, limit: int = 50) -> list[PolicyExecutionLog]:
        with self._lock:
            logs = [entry for entry in self._logs if policy_id is None or entry.policy_id == policy_id]
        logs.sort(key=lambda entry: entry.executed_at, reverse=True)
        return [entry.model_copy(deep=True) for entry in logs[:limit]]
