"""Structural validation of lifecycle policies.

Validation never raises: problems come back as human-readable strings that
block activation or saving. Logical contradictions between conditions of one
policy (``tier equals HOT`` and ``tier equals COLD``) are not detected.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from syncops_lifecycle.conditions import (
    FIELD_KINDS,
    KNOWN_OPERATORS,
    MEMBERSHIP_OPERATORS,
    NUMERIC_OPERATORS,
    ValueKind,
    is_coercible,
    split_members,
)
from syncops_lifecycle.models import (
    ConditionField,
    ConditionOperator,
    PolicyActionConfig,
    PolicyActionType,
    PolicyCondition,
    RunFrequency,
    StorageLifecyclePolicy,
    StoragePolicyType,
    StorageTier,
    ValidationResult,
)

logger = structlog.get_logger()

_ACTION_TYPES = frozenset(a.value for a in PolicyActionType)
_TIERS = frozenset(t.value for t in StorageTier)
_FREQUENCIES = frozenset(f.value for f in RunFrequency)
_POLICY_TYPES = frozenset(t.value for t in StoragePolicyType)


def _format_pydantic_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "policy"
    return f"{location}: {error.get('msg', 'invalid value')}"


def _condition_errors(index: int, condition: PolicyCondition) -> list[str]:
    label = f"Condition {index + 1}"
    errors: list[str] = []

    kind = FIELD_KINDS.get(condition.field)
    if kind is None:
        errors.append(f"{label}: unknown field '{condition.field}'")
    if condition.operator not in KNOWN_OPERATORS:
        errors.append(f"{label}: unknown operator '{condition.operator}'")
    if kind is None or errors:
        return errors

    operator = condition.operator
    value = condition.value
    if value is None:
        return [f"{label}: a value is required"]

    if operator in NUMERIC_OPERATORS:
        if kind is not ValueKind.NUMBER:
            errors.append(f"{label}: '{operator}' needs a numeric field, '{condition.field}' is {kind.value}")
        elif not is_coercible(ValueKind.NUMBER, value):
            errors.append(f"{label}: '{value}' is not a number")
    elif operator in MEMBERSHIP_OPERATORS:
        members = split_members(value)
        if not members:
            errors.append(f"{label}: '{operator}' needs at least one value")
        bad = [str(m) for m in members if not is_coercible(kind, m)]
        if bad:
            errors.append(f"{label}: {', '.join(bad)} not valid for {kind.value} field '{condition.field}'")
    elif operator == ConditionOperator.CONTAINS.value:
        if not is_coercible(kind, value) and not isinstance(value, str):
            errors.append(f"{label}: '{value}' not valid for {kind.value} field '{condition.field}'")
    elif not is_coercible(kind, value):
        errors.append(f"{label}: '{value}' not valid for {kind.value} field '{condition.field}'")

    is_tier_field = condition.field == ConditionField.CURRENT_STORAGE_TIER.value
    if is_tier_field and operator != ConditionOperator.CONTAINS.value and not errors:
        candidates = split_members(value) if operator in MEMBERSHIP_OPERATORS else [value]
        unknown = [str(c) for c in candidates if str(c) not in _TIERS]
        if unknown:
            errors.append(f"{label}: unknown storage tier {', '.join(unknown)}")

    return errors


def _action_errors(index: int, action: PolicyActionConfig) -> list[str]:
    label = f"Action {index + 1}"
    if action.type not in _ACTION_TYPES:
        return [f"{label}: unknown action type '{action.type}'"]

    if action.type == PolicyActionType.TRANSITION.value:
        if not action.target_tier:
            return [f"{label}: TRANSITION requires a target tier"]
        if action.target_tier not in _TIERS:
            return [f"{label}: unknown target tier '{action.target_tier}'"]
    if action.type == PolicyActionType.NOTIFY.value:
        if not [r for r in action.notify_roles if r and r.strip()]:
            return [f"{label}: NOTIFY requires at least one role"]
    return []


def validate_storage_policy(
    policy: StorageLifecyclePolicy | Mapping[str, Any],
) -> ValidationResult:
    """Check a single policy's structure before it is saved or scheduled.

    Args:
        policy: A policy model or a raw camelCase record.

    Returns:
        ValidationResult with every problem found.
    """

    if not isinstance(policy, StorageLifecyclePolicy):
        try:
            policy = StorageLifecyclePolicy.model_validate(policy)
        except ValidationError as exc:
            errors = [_format_pydantic_error(e) for e in exc.errors()]
            return ValidationResult(valid=False, errors=errors)

    errors: list[str] = []

    if not policy.name.strip():
        errors.append("Policy name is required")
    if policy.type not in _POLICY_TYPES:
        errors.append(f"Unknown policy type '{policy.type}'")

    if not policy.conditions and not policy.unconditional:
        errors.append("At least one condition is required (or mark the policy unconditional)")
    for i, condition in enumerate(policy.conditions):
        errors.extend(_condition_errors(i, condition))

    if not policy.actions:
        errors.append("At least one action is required")
    for i, action in enumerate(policy.actions):
        errors.extend(_action_errors(i, action))

    if policy.priority < 0:
        errors.append("Priority must be a non-negative integer")

    if policy.schedule.run_frequency not in _FREQUENCIES:
        errors.append(
            f"Schedule frequency must be one of {', '.join(f.value for f in RunFrequency)}"
        )

    if errors:
        logger.debug("policy_validation_failed", policy_id=policy.id, error_count=len(errors))
    return ValidationResult(valid=not errors, errors=errors)


def _is_legal_hold_lock(policy: StorageLifecyclePolicy) -> bool:
    return policy.type == StoragePolicyType.LEGAL_HOLD.value and policy.has_action(PolicyActionType.LOCK)


def validate_policy_set(policies: Iterable[StorageLifecyclePolicy]) -> ValidationResult:
    """Check precedence rules across the active policies of one organization.

    - no two active policies share a priority number;
    - every legal hold LOCK policy sits strictly below (i.e. ahead of) every
      other active policy, so no transition or delete can bypass it.
    """

    active = [p for p in policies if p.is_active and not p.is_deleted]
    errors: list[str] = []

    by_priority: dict[int, list[str]] = defaultdict(list)
    for p in active:
        by_priority[p.priority].append(p.name or p.id)
    for priority in sorted(by_priority):
        names = by_priority[priority]
        if len(names) > 1:
            errors.append(f"Priority {priority} is shared by active policies: {', '.join(names)}")

    holds = [p for p in active if _is_legal_hold_lock(p)]
    others = [p for p in active if not _is_legal_hold_lock(p)]
    if holds and others:
        first_other = min(others, key=lambda p: p.priority)
        for hold in holds:
            if hold.priority >= first_other.priority:
                errors.append(
                    f"Legal hold policy '{hold.name or hold.id}' (priority {hold.priority}) must be "
                    f"evaluated before '{first_other.name or first_other.id}' "
                    f"(priority {first_other.priority})"
                )

    return ValidationResult(valid=not errors, errors=errors)
