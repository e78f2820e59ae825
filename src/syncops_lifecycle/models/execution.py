"""Execution log and simulation records."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import Field

from syncops_lifecycle.models.policy import CamelModel, StorageLifecyclePolicy


class ExecutionStatus(str, Enum):
    """Outcome of one policy run."""

    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


class PolicyExecutionLog(CamelModel):
    """Audit record of one scheduled or manual policy run."""

    id: str = Field(default_factory=lambda: f"log-{uuid4().hex[:12]}")
    policy_id: str
    policy_name: str
    organization_id: str
    executed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: ExecutionStatus
    assets_evaluated: int = Field(default=0, ge=0)
    assets_transitioned: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list, description="Non-fatal per-asset issues")
    cost_savings_achieved: float = Field(default=0.0, description="USD per month")
    execution_time_ms: int = Field(default=0, ge=0)


class TierBreakdown(CamelModel):
    tier: str
    count: int = 0
    bytes: int = 0


class SimulationResult(CamelModel):
    """Dry-run projection of what a policy would do to a set of assets."""

    policy: StorageLifecyclePolicy
    assets_evaluated: int = 0
    affected_assets: int = 0
    affected_asset_ids: list[str] = Field(default_factory=list)
    total_bytes: int = 0
    estimated_monthly_savings: float = 0.0
    estimated_annual_savings: float = 0.0
    asset_breakdown: list[TierBreakdown] = Field(default_factory=list)


class ValidationResult(CamelModel):
    """Outcome of a structural policy check. Errors are human-readable."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
