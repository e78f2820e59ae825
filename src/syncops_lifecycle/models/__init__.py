"""Data models for SyncOps storage lifecycle.

This module contains Pydantic models for policies, asset snapshots and
execution records.
"""

from syncops_lifecycle.models.asset import AssetContext
from syncops_lifecycle.models.execution import (
    ExecutionStatus,
    PolicyExecutionLog,
    SimulationResult,
    TierBreakdown,
    ValidationResult,
)
from syncops_lifecycle.models.policy import (
    ConditionField,
    ConditionOperator,
    ConditionValue,
    PolicyActionConfig,
    PolicyActionType,
    PolicyCondition,
    PolicySchedule,
    PolicyScope,
    RunFrequency,
    StorageLifecyclePolicy,
    StoragePolicyType,
    StorageTier,
)

__all__ = [
    "AssetContext",
    "ConditionField",
    "ConditionOperator",
    "ConditionValue",
    "ExecutionStatus",
    "PolicyActionConfig",
    "PolicyActionType",
    "PolicyCondition",
    "PolicyExecutionLog",
    "PolicySchedule",
    "PolicyScope",
    "RunFrequency",
    "SimulationResult",
    "StorageLifecyclePolicy",
    "StoragePolicyType",
    "StorageTier",
    "TierBreakdown",
    "ValidationResult",
]
