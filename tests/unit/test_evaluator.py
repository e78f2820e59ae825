"""Unit tests for first-match policy evaluation."""

from datetime import datetime, timezone

import pytest

from syncops_lifecycle.evaluator import (
    evaluate_asset_against_policy_set,
    evaluate_policy,
    match_policy_for_asset,
    resolve_first_match,
)
from syncops_lifecycle.models import AssetContext, StorageLifecyclePolicy


def make_policy(policy_id: str, priority: int, conditions: list[dict], actions: list[dict], **extra):
    record = {
        "id": policy_id,
        "organizationId": "org-1",
        "name": policy_id,
        "isActive": True,
        "priority": priority,
        "conditions": conditions,
        "actions": actions,
    }
    record.update(extra)
    return StorageLifecyclePolicy.model_validate(record)


STALE = [{"field": "daysSinceLastAccess", "operator": "greaterThan", "value": 90}]


class TestEvaluatePolicy:
    """Test suite for evaluate_policy."""

    def test_inactive_policy_never_matches(self) -> None:
        policy = make_policy("p", 1, [], [{"type": "LOCK"}], isActive=False)

        assert evaluate_policy(policy, {"daysSinceLastAccess": 500}) is False

    def test_deleted_policy_never_matches(self) -> None:
        policy = make_policy("p", 1, [], [{"type": "LOCK"}])
        policy = policy.model_copy(update={"deleted_at": datetime.now(timezone.utc)})

        assert evaluate_policy(policy, {}) is False

    def test_no_conditions_matches_everything_in_scope(self) -> None:
        policy = make_policy("p", 1, [], [{"type": "LOCK"}], unconditional=True)

        assert evaluate_policy(policy, {}) is True

    def test_all_conditions_must_hold(self) -> None:
        policy = make_policy(
            "p",
            1,
            [*STALE, {"field": "currentStorageTier", "operator": "equals", "value": "HOT"}],
            [{"type": "TRANSITION", "targetTier": "COLD"}],
        )

        assert evaluate_policy(policy, {"daysSinceLastAccess": 120, "currentStorageTier": "HOT"}) is True
        assert evaluate_policy(policy, {"daysSinceLastAccess": 120, "currentStorageTier": "WARM"}) is False

    def test_missing_field_blocks_policy(self) -> None:
        policy = make_policy(
            "p",
            1,
            [*STALE, {"field": "currentStorageTier", "operator": "equals", "value": "HOT"}],
            [{"type": "TRANSITION", "targetTier": "COLD"}],
        )

        assert evaluate_policy(policy, {"currentStorageTier": "HOT"}) is False

    def test_scope_asset_types(self) -> None:
        policy = make_policy(
            "p", 1, STALE, [{"type": "ARCHIVE"}], scope={"assetTypes": ["video", "audio"]}
        )

        video = AssetContext(asset_id="a", asset_type="video", days_since_last_access=100)
        image = AssetContext(asset_id="b", asset_type="image", days_since_last_access=100)
        untyped = AssetContext(asset_id="c", days_since_last_access=100)

        assert evaluate_policy(policy, video) is True
        assert evaluate_policy(policy, image) is False
        assert evaluate_policy(policy, untyped) is False
        assert evaluate_policy(policy, {"assetType": "audio", "daysSinceLastAccess": 100}) is True

    def test_scope_project_ids(self) -> None:
        policy = make_policy("p", 1, STALE, [{"type": "ARCHIVE"}], scope={"projectIds": ["proj-1"]})

        assert evaluate_policy(policy, {"projectId": "proj-1", "daysSinceLastAccess": 100}) is True
        assert evaluate_policy(policy, {"projectId": "proj-2", "daysSinceLastAccess": 100}) is False


class TestPolicySet:
    """Test suite for first-match resolution across a policy set."""

    def test_lowest_priority_number_wins_regardless_of_order(self) -> None:
        p1 = make_policy("p1", 1, STALE, [{"type": "LOCK"}])
        p2 = make_policy("p2", 2, STALE, [{"type": "DELETE"}])
        asset = {"daysSinceLastAccess": 100}

        actions = evaluate_asset_against_policy_set(asset, [p2, p1])

        assert actions == p1.actions

    def test_equal_priorities_keep_list_order(self) -> None:
        first = make_policy("first", 5, STALE, [{"type": "ARCHIVE"}])
        second = make_policy("second", 5, STALE, [{"type": "DELETE"}])
        asset = {"daysSinceLastAccess": 100}

        assert match_policy_for_asset(asset, [first, second]).id == "first"
        assert match_policy_for_asset(asset, [second, first]).id == "second"

    def test_no_match_returns_none(self) -> None:
        policy = make_policy("p", 1, STALE, [{"type": "ARCHIVE"}])

        assert evaluate_asset_against_policy_set({"daysSinceLastAccess": 10}, [policy]) is None
        assert evaluate_asset_against_policy_set({"daysSinceLastAccess": 10}, []) is None

    def test_skips_non_matching_higher_precedence_policy(self) -> None:
        hold = make_policy(
            "hold", 1, [{"field": "isLegalHold", "operator": "equals", "value": True}], [{"type": "LOCK"}]
        )
        archive = make_policy("archive", 100, STALE, [{"type": "TRANSITION", "targetTier": "COLD"}])

        actions = evaluate_asset_against_policy_set(
            {"isLegalHold": False, "daysSinceLastAccess": 120}, [hold, archive]
        )

        assert [a.type for a in actions] == ["TRANSITION"]

    def test_legal_hold_preempts_archival(
        self,
        legal_hold_policy: StorageLifecyclePolicy,
        archive_policy: StorageLifecyclePolicy,
    ) -> None:
        asset = AssetContext(
            asset_id="a",
            asset_type="video",
            is_legal_hold=True,
            days_since_last_access=120,
            current_storage_tier="HOT",
        )

        actions = evaluate_asset_against_policy_set(asset, [archive_policy, legal_hold_policy])

        assert [a.type for a in actions] == ["LOCK"]

    @pytest.mark.parametrize("asset", [None, 42, "asset-1", ["isLegalHold"]])
    def test_malformed_asset_fails_closed(self, asset) -> None:
        hold = make_policy(
            "hold", 1, [{"field": "isLegalHold", "operator": "equals", "value": True}], [{"type": "LOCK"}]
        )
        scoped = make_policy(
            "scoped", 2, STALE, [{"type": "ARCHIVE"}], scope={"assetTypes": ["video"], "projectIds": ["p1"]}
        )

        assert evaluate_asset_against_policy_set(asset, [hold, scoped]) is None

    def test_returned_actions_are_a_copy(self) -> None:
        policy = make_policy("p", 1, STALE, [{"type": "ARCHIVE"}])

        actions = evaluate_asset_against_policy_set({"daysSinceLastAccess": 100}, [policy])
        actions.clear()

        assert len(policy.actions) == 1


def test_resolve_first_match_is_generic_and_stable() -> None:
    rules = [("b", 2), ("a", 1), ("c", 1)]

    hit = resolve_first_match(rules, key=lambda r: r[1], predicate=lambda r: r[0] != "a")

    assert hit == ("c", 1)
    assert resolve_first_match(rules, key=lambda r: r[1], predicate=lambda r: False) is None
