"""Policy evaluation with ordered rule-list semantics.

A policy set is evaluated the way an ordered ACL is: policies are sorted by
priority (lower number first, ties keep their original order) and the first
policy that matches an asset decides what happens to it. Later matching
policies are ignored; actions of different policies are never merged. This is
what lets a priority-1 legal hold LOCK pre-empt a broader archival policy.

Everything here is pure: no I/O, no shared state, no exceptions for malformed
input. Assets can therefore be evaluated in parallel in any order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from syncops_lifecycle.conditions import condition_values, evaluate_condition
from syncops_lifecycle.models import AssetContext, PolicyActionConfig, StorageLifecyclePolicy

T = TypeVar("T")

AssetLike = AssetContext | Mapping[str, Any]


def resolve_first_match(
    rules: Iterable[T],
    key: Callable[[T], Any],
    predicate: Callable[[T], bool],
) -> T | None:
    """Return the first rule, in ascending ``key`` order, that satisfies ``predicate``.

    The sort is stable, so rules with equal keys are tried in the order given.
    Evaluation stops at the first hit.
    """

    for rule in sorted(rules, key=key):
        if predicate(rule):
            return rule
    return None


def _scope_value(asset: AssetLike, attribute: str, alias: str) -> Any:
    if isinstance(asset, AssetContext):
        return getattr(asset, attribute)
    if isinstance(asset, Mapping):
        return asset.get(alias)
    return None


def passes_scope(policy: StorageLifecyclePolicy, asset: AssetLike) -> bool:
    """Check the policy's scope filter. Empty filters admit every asset."""

    scope = policy.scope
    if scope.asset_types:
        asset_type = _scope_value(asset, "asset_type", "assetType")
        if asset_type not in scope.asset_types:
            return False
    if scope.project_ids:
        project_id = _scope_value(asset, "project_id", "projectId")
        if project_id not in scope.project_ids:
            return False
    return True


def evaluate_policy(policy: StorageLifecyclePolicy, asset: AssetLike) -> bool:
    """Return True iff an active policy's scope and all of its conditions hold.

    Inactive and soft-deleted policies never match. A policy without conditions
    matches every in-scope asset.
    """

    if not policy.is_active or policy.is_deleted:
        return False
    if not passes_scope(policy, asset):
        return False
    values = condition_values(asset)
    return all(evaluate_condition(condition, values) for condition in policy.conditions)


def _priority(policy: StorageLifecyclePolicy) -> int:
    return policy.priority


def match_policy_for_asset(
    asset: AssetLike,
    policies: Iterable[StorageLifecyclePolicy],
) -> StorageLifecyclePolicy | None:
    """Return the highest-precedence policy that matches the asset, if any."""

    return resolve_first_match(policies, _priority, lambda p: evaluate_policy(p, asset))


def evaluate_asset_against_policy_set(
    asset: AssetLike,
    policies: Iterable[StorageLifecyclePolicy],
) -> list[PolicyActionConfig] | None:
    """Return the actions of the first matching policy, or None when nothing matches."""

    winner = match_policy_for_asset(asset, policies)
    if winner is None:
        return None
    return list(winner.actions)
