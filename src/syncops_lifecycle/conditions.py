"""Typed condition evaluation.

Every condition field is declared with the kind of value it holds. Both the
asset's value and the condition's value go through one explicit coercion step
to that kind before any comparison. Anything that cannot be coerced, and any
unknown field or operator, makes the condition not match: evaluation never
raises.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

import structlog

from syncops_lifecycle.models import AssetContext, ConditionField, ConditionOperator, PolicyCondition

logger = structlog.get_logger()


class ValueKind(str, Enum):
    """Semantic domain of a condition field."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


FIELD_KINDS: dict[str, ValueKind] = {
    ConditionField.DAYS_SINCE_LAST_ACCESS.value: ValueKind.NUMBER,
    ConditionField.DAYS_SINCE_UPLOAD.value: ValueKind.NUMBER,
    ConditionField.DAYS_SINCE_PROJECT_CLOSE.value: ValueKind.NUMBER,
    ConditionField.ACCESS_COUNT.value: ValueKind.NUMBER,
    ConditionField.DOWNLOAD_COUNT.value: ValueKind.NUMBER,
    ConditionField.FILE_SIZE.value: ValueKind.NUMBER,
    ConditionField.PROJECT_STATUS.value: ValueKind.STRING,
    ConditionField.CURRENT_STORAGE_TIER.value: ValueKind.STRING,
    ConditionField.MIME_TYPE.value: ValueKind.STRING,
    ConditionField.APPROVAL_STATUS.value: ValueKind.STRING,
    ConditionField.HAS_ACTIVE_RIGHTS.value: ValueKind.BOOLEAN,
    ConditionField.IS_LEGAL_HOLD.value: ValueKind.BOOLEAN,
}

KNOWN_OPERATORS: frozenset[str] = frozenset(op.value for op in ConditionOperator)

NUMERIC_OPERATORS: frozenset[str] = frozenset(
    {
        ConditionOperator.GREATER_THAN.value,
        ConditionOperator.LESS_THAN.value,
        ConditionOperator.GREATER_THAN_OR_EQUAL.value,
        ConditionOperator.LESS_THAN_OR_EQUAL.value,
    }
)

MEMBERSHIP_OPERATORS: frozenset[str] = frozenset(
    {ConditionOperator.IN.value, ConditionOperator.NOT_IN.value}
)

# Sentinel for "could not be coerced"; None is never a valid coerced value.
_INVALID = object()


def field_kind(field: str) -> ValueKind | None:
    return FIELD_KINDS.get(_plain(field))


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def to_number(value: Any) -> Any:
    """Coerce to float, accepting numeric-looking strings. Booleans are not numbers."""

    value = _plain(value)
    if isinstance(value, bool):
        return _INVALID
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return _INVALID
    else:
        return _INVALID

    if math.isnan(number) or math.isinf(number):
        return _INVALID
    return number


def to_boolean(value: Any) -> Any:
    """Coerce to bool; form inputs arrive as "true"/"false" strings."""

    value = _plain(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return _INVALID


def to_string(value: Any) -> Any:
    value = _plain(value)
    if isinstance(value, str):
        return value
    return _INVALID


_COERCERS = {
    ValueKind.NUMBER: to_number,
    ValueKind.BOOLEAN: to_boolean,
    ValueKind.STRING: to_string,
}


def coerce(kind: ValueKind, value: Any) -> Any:
    """Coerce ``value`` to ``kind``; returns the module's invalid sentinel on failure."""
    if value is None:
        return _INVALID
    return _COERCERS[kind](value)


def is_coercible(kind: ValueKind, value: Any) -> bool:
    return coerce(kind, value) is not _INVALID


def split_members(value: Any) -> list[Any]:
    """Normalize a membership operand: lists pass through, strings split on commas."""

    value = _plain(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if value is None:
        return []
    return [value]


def condition_values(asset: Any) -> Mapping[str, Any]:
    """Field values of an asset; anything that is not an asset or mapping has none."""
    if isinstance(asset, AssetContext):
        return asset.as_condition_values()
    if isinstance(asset, Mapping):
        return asset
    return {}


def evaluate_condition(
    condition: PolicyCondition,
    asset: AssetContext | Mapping[str, Any],
) -> bool:
    """Return True when the asset satisfies a single condition.

    Args:
        condition: Field/operator/value triple.
        asset: AssetContext or a camelCase mapping of the same fields.

    Returns:
        Whether the condition holds. Missing values, unknown fields or operators
        and uncoercible operands all yield False.
    """

    field = _plain(condition.field)
    operator = _plain(condition.operator)
    kind = FIELD_KINDS.get(field)
    if kind is None or operator not in KNOWN_OPERATORS:
        logger.debug("condition_unrecognized", field=field, operator=operator)
        return False

    values = condition_values(asset)
    actual = values.get(field)
    if actual is None:
        return False

    if operator in NUMERIC_OPERATORS:
        return _compare_numbers(operator, actual, condition.value)
    if operator == ConditionOperator.CONTAINS.value:
        return _contains(kind, actual, condition.value)
    if operator in MEMBERSHIP_OPERATORS:
        return _membership(kind, operator, actual, condition.value)
    return _equality(kind, operator, actual, condition.value)


def _equality(kind: ValueKind, operator: str, actual: Any, expected: Any) -> bool:
    left = coerce(kind, actual)
    right = coerce(kind, expected)
    if left is _INVALID or right is _INVALID:
        return False
    if operator == ConditionOperator.EQUALS.value:
        return left == right
    return left != right


def _compare_numbers(operator: str, actual: Any, expected: Any) -> bool:
    left = to_number(actual)
    right = to_number(expected)
    if left is _INVALID or right is _INVALID:
        return False
    if operator == ConditionOperator.GREATER_THAN.value:
        return left > right
    if operator == ConditionOperator.LESS_THAN.value:
        return left < right
    if operator == ConditionOperator.GREATER_THAN_OR_EQUAL.value:
        return left >= right
    return left <= right


def _contains(kind: ValueKind, actual: Any, expected: Any) -> bool:
    actual = _plain(actual)
    if isinstance(actual, str):
        needle = to_string(expected)
        if needle is _INVALID:
            return False
        return needle in actual
    if isinstance(actual, (list, tuple, set, frozenset)):
        needle = coerce(kind, expected)
        if needle is _INVALID:
            return False
        return any(coerce(kind, item) == needle for item in actual)
    return False


def _membership(kind: ValueKind, operator: str, actual: Any, expected: Any) -> bool:
    value = coerce(kind, actual)
    if value is _INVALID:
        return False
    members = [coerce(kind, m) for m in split_members(expected)]
    found = any(m is not _INVALID and m == value for m in members)
    if operator == ConditionOperator.IN.value:
        return found
    return not found
