"""Lifecycle policy records.

Policies arrive from the managed data API with camelCase keys, so every model
accepts both the camelCase alias and the snake_case attribute name and dumps by
alias. Enumerated fields on conditions and actions are kept as plain strings:
an unrecognized field, operator or action type must still load so the evaluator
can treat it as non-matching and validation can report it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StorageTier(str, Enum):
    """Object storage cost/latency class."""

    HOT = "HOT"
    WARM = "WARM"
    COLD = "COLD"
    GLACIER = "GLACIER"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"


class StoragePolicyType(str, Enum):
    """Policy category (drives templates and the legal-hold precedence rule)."""

    TIME_BASED = "TIME_BASED"
    ACCESS_BASED = "ACCESS_BASED"
    PROJECT_STATUS = "PROJECT_STATUS"
    COST_OPTIMIZATION = "COST_OPTIMIZATION"
    LEGAL_HOLD = "LEGAL_HOLD"
    CUSTOM = "CUSTOM"


class PolicyActionType(str, Enum):
    """What happens to an asset when a policy matches."""

    TRANSITION = "TRANSITION"
    DELETE = "DELETE"
    ARCHIVE = "ARCHIVE"
    RESTORE = "RESTORE"
    NOTIFY = "NOTIFY"
    LOCK = "LOCK"


class RunFrequency(str, Enum):
    """Schedule cadence for a policy."""

    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class ConditionField(str, Enum):
    """Asset attributes a condition may test."""

    DAYS_SINCE_LAST_ACCESS = "daysSinceLastAccess"
    DAYS_SINCE_UPLOAD = "daysSinceUpload"
    DAYS_SINCE_PROJECT_CLOSE = "daysSinceProjectClose"
    ACCESS_COUNT = "accessCount"
    DOWNLOAD_COUNT = "downloadCount"
    PROJECT_STATUS = "projectStatus"
    CURRENT_STORAGE_TIER = "currentStorageTier"
    FILE_SIZE = "fileSize"
    MIME_TYPE = "mimeType"
    HAS_ACTIVE_RIGHTS = "hasActiveRights"
    IS_LEGAL_HOLD = "isLegalHold"
    APPROVAL_STATUS = "approvalStatus"


class ConditionOperator(str, Enum):
    """Comparison applied between the asset value and the condition value."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    CONTAINS = "contains"
    IN = "in"
    NOT_IN = "notIn"


ConditionScalar = str | int | float | bool
ConditionValue = ConditionScalar | list[ConditionScalar] | None


class CamelModel(BaseModel):
    """Base model that reads and writes the data API's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """Dump to a JSON-compatible dict keyed by camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)


class PolicyCondition(CamelModel):
    """A single predicate; all conditions of a policy are AND-ed."""

    field: str
    operator: str
    value: ConditionValue = None


class PolicyActionConfig(CamelModel):
    """One action applied, in order, when a policy matches."""

    type: str
    target_tier: str | None = None
    notify_roles: list[str] = Field(default_factory=list)


class PolicyScope(CamelModel):
    """Narrows which assets a policy considers. Empty lists mean no restriction."""

    asset_types: list[str] = Field(default_factory=list)
    project_ids: list[str] = Field(default_factory=list)


class PolicySchedule(CamelModel):
    run_frequency: str = RunFrequency.DAILY.value
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None


def _new_policy_id() -> str:
    return f"policy-{uuid4().hex[:12]}"


class StorageLifecyclePolicy(CamelModel):
    """A named rule: when its conditions hold for an asset, apply its actions."""

    id: str = Field(default_factory=_new_policy_id)
    organization_id: str = ""
    name: str = ""
    description: str = ""
    type: str = StoragePolicyType.CUSTOM.value
    is_active: bool = False
    # Lower number is evaluated first; ties keep list order.
    priority: int = 100
    conditions: list[PolicyCondition] = Field(default_factory=list)
    actions: list[PolicyActionConfig] = Field(default_factory=list)
    # Explicitly marks an empty condition list as intentional (e.g. blanket locks).
    unconditional: bool = False
    scope: PolicyScope = Field(default_factory=PolicyScope)
    schedule: PolicySchedule = Field(default_factory=PolicySchedule)
    version: int = 1
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def has_action(self, action_type: PolicyActionType) -> bool:
        return any(a.type == action_type.value for a in self.actions)
