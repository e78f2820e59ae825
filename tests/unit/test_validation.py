"""Unit tests for policy validation."""

import pytest

from syncops_lifecycle.models import StorageLifecyclePolicy
from syncops_lifecycle.templates import STORAGE_POLICY_TEMPLATES
from syncops_lifecycle.validation import validate_policy_set, validate_storage_policy


def valid_record(**overrides) -> dict:
    record = {
        "name": "Archive stale footage",
        "type": "TIME_BASED",
        "priority": 100,
        "conditions": [{"field": "daysSinceLastAccess", "operator": "greaterThan", "value": 90}],
        "actions": [{"type": "TRANSITION", "targetTier": "COLD"}],
        "schedule": {"runFrequency": "WEEKLY"},
    }
    record.update(overrides)
    return record


def test_valid_policy() -> None:
    result = validate_storage_policy(valid_record())

    assert result.valid is True
    assert result.errors == []


def test_transition_without_target_tier() -> None:
    result = validate_storage_policy(valid_record(actions=[{"type": "TRANSITION"}]))

    assert result.valid is False
    assert any("target tier" in e for e in result.errors)


def test_transition_to_unknown_tier() -> None:
    result = validate_storage_policy(valid_record(actions=[{"type": "TRANSITION", "targetTier": "TAPE"}]))

    assert any("TAPE" in e for e in result.errors)


def test_notify_requires_roles() -> None:
    result = validate_storage_policy(valid_record(actions=[{"type": "NOTIFY", "notifyRoles": []}]))

    assert any("NOTIFY requires at least one role" in e for e in result.errors)


def test_name_required() -> None:
    result = validate_storage_policy(valid_record(name="   "))

    assert "Policy name is required" in result.errors


def test_conditions_required_unless_unconditional() -> None:
    assert validate_storage_policy(valid_record(conditions=[])).valid is False
    assert validate_storage_policy(valid_record(conditions=[], unconditional=True)).valid is True


def test_actions_required() -> None:
    result = validate_storage_policy(valid_record(actions=[]))

    assert "At least one action is required" in result.errors


@pytest.mark.parametrize("priority", [-1, 1.5, "high", float("inf")])
def test_priority_must_be_non_negative_integer(priority) -> None:
    result = validate_storage_policy(valid_record(priority=priority))

    assert result.valid is False
    assert any("riority" in e for e in result.errors)


def test_schedule_frequency_enum() -> None:
    result = validate_storage_policy(valid_record(schedule={"runFrequency": "YEARLY"}))

    assert any("HOURLY, DAILY, WEEKLY, MONTHLY" in e for e in result.errors)


def test_unknown_field_operator_and_action_type_reported() -> None:
    result = validate_storage_policy(
        valid_record(
            conditions=[
                {"field": "colour", "operator": "equals", "value": "red"},
                {"field": "fileSize", "operator": "like", "value": 1},
            ],
            actions=[{"type": "SHRED"}],
        )
    )

    assert "Condition 1: unknown field 'colour'" in result.errors
    assert "Condition 2: unknown operator 'like'" in result.errors
    assert "Action 1: unknown action type 'SHRED'" in result.errors


def test_value_must_fit_field_kind() -> None:
    result = validate_storage_policy(
        valid_record(
            conditions=[
                {"field": "daysSinceLastAccess", "operator": "greaterThan", "value": "soon"},
                {"field": "isLegalHold", "operator": "equals", "value": "maybe"},
                {"field": "projectStatus", "operator": "lessThan", "value": 3},
                {"field": "currentStorageTier", "operator": "in", "value": "HOT,TAPE"},
            ]
        )
    )

    assert len(result.errors) == 4


def test_form_strings_are_accepted() -> None:
    result = validate_storage_policy(
        valid_record(
            conditions=[
                {"field": "daysSinceLastAccess", "operator": "greaterThan", "value": "90"},
                {"field": "isLegalHold", "operator": "equals", "value": "false"},
            ]
        )
    )

    assert result.valid is True


def test_accepts_model_instances() -> None:
    policy = StorageLifecyclePolicy.model_validate(valid_record())

    assert validate_storage_policy(policy).valid is True


def test_all_templates_are_valid() -> None:
    for template in STORAGE_POLICY_TEMPLATES:
        result = validate_storage_policy(template)
        assert result.valid, (template["name"], result.errors)


class TestPolicySet:
    """Test suite for cross-policy precedence checks."""

    def _policy(self, policy_id: str, priority: int, policy_type: str = "TIME_BASED", **extra):
        actions = [{"type": "LOCK"}] if policy_type == "LEGAL_HOLD" else [{"type": "ARCHIVE"}]
        fields = {
            "id": policy_id,
            "name": policy_id,
            "priority": priority,
            "type": policy_type,
            "isActive": True,
            "actions": actions,
        }
        fields.update(extra)
        return StorageLifecyclePolicy.model_validate(valid_record(**fields))

    def test_distinct_priorities_with_legal_hold_first(self) -> None:
        policies = [self._policy("hold", 1, "LEGAL_HOLD"), self._policy("archive", 100)]

        assert validate_policy_set(policies).valid is True

    def test_duplicate_priorities(self) -> None:
        policies = [self._policy("a", 10), self._policy("b", 10)]

        result = validate_policy_set(policies)

        assert result.errors == ["Priority 10 is shared by active policies: a, b"]

    def test_duplicate_priority_on_inactive_policy_is_ignored(self) -> None:
        policies = [self._policy("a", 10), self._policy("b", 10, isActive=False)]

        assert validate_policy_set(policies).valid is True

    def test_legal_hold_must_precede_other_policies(self) -> None:
        policies = [self._policy("archive", 5), self._policy("hold", 50, "LEGAL_HOLD")]

        result = validate_policy_set(policies)

        assert result.valid is False
        assert "Legal hold policy 'hold'" in result.errors[0]
