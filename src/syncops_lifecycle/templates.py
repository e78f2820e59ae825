"""Canned lifecycle policy definitions.

Templates are partial records: instantiating one stamps an id, organization,
author and timestamps onto a copy and leaves it inactive until a user turns it
on.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

import structlog

from syncops_lifecycle.models import StorageLifecyclePolicy

logger = structlog.get_logger()


STORAGE_POLICY_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Standard Archive Policy",
        "description": "Move inactive assets to cold storage after 90 days",
        "type": "TIME_BASED",
        "priority": 100,
        "conditions": [
            {"field": "daysSinceLastAccess", "operator": "greaterThan", "value": 90},
            {"field": "currentStorageTier", "operator": "equals", "value": "HOT"},
            {"field": "isLegalHold", "operator": "equals", "value": False},
        ],
        "actions": [
            {"type": "TRANSITION", "targetTier": "COLD"},
            {"type": "NOTIFY", "notifyRoles": ["ADMIN"]},
        ],
        "scope": {"assetTypes": ["video", "audio"]},
        "schedule": {"runFrequency": "WEEKLY"},
    },
    {
        "name": "Deep Archive for Completed Projects",
        "description": "Move completed project assets to deep archive 180 days after close",
        "type": "PROJECT_STATUS",
        "priority": 200,
        "conditions": [
            {"field": "daysSinceProjectClose", "operator": "greaterThan", "value": 180},
            {"field": "projectStatus", "operator": "equals", "value": "COMPLETED"},
            {"field": "currentStorageTier", "operator": "equals", "value": "COLD"},
        ],
        "actions": [
            {"type": "TRANSITION", "targetTier": "DEEP_ARCHIVE"},
            {"type": "NOTIFY", "notifyRoles": ["ADMIN", "PRODUCER"]},
        ],
        "schedule": {"runFrequency": "MONTHLY"},
    },
    {
        "name": "Legal Hold Protection",
        "description": "Lock assets under legal hold so no later policy can move or delete them",
        "type": "LEGAL_HOLD",
        "priority": 1,
        "conditions": [
            {"field": "isLegalHold", "operator": "equals", "value": True},
        ],
        "actions": [{"type": "LOCK"}],
        "schedule": {"runFrequency": "HOURLY"},
    },
    {
        "name": "Infrequent Access to Warm",
        "description": "Move hot assets opened fewer than 5 times in 30 days to warm storage",
        "type": "ACCESS_BASED",
        "priority": 50,
        "conditions": [
            {"field": "daysSinceUpload", "operator": "greaterThan", "value": 30},
            {"field": "accessCount", "operator": "lessThan", "value": 5},
            {"field": "currentStorageTier", "operator": "equals", "value": "HOT"},
        ],
        "actions": [{"type": "TRANSITION", "targetTier": "WARM"}],
        "schedule": {"runFrequency": "DAILY"},
    },
    {
        "name": "Large Raw Footage to Glacier",
        "description": "Send raw camera files over 10 GB without active rights to Glacier",
        "type": "COST_OPTIMIZATION",
        "priority": 150,
        "conditions": [
            {"field": "fileSize", "operator": "greaterThan", "value": 10_000_000_000},
            {"field": "hasActiveRights", "operator": "equals", "value": False},
            {"field": "currentStorageTier", "operator": "in", "value": ["HOT", "WARM", "COLD"]},
        ],
        "actions": [
            {"type": "TRANSITION", "targetTier": "GLACIER"},
            {"type": "NOTIFY", "notifyRoles": ["ADMIN"]},
        ],
        "scope": {"assetTypes": ["video"]},
        "schedule": {"runFrequency": "WEEKLY"},
    },
    {
        "name": "Rejected Asset Cleanup Notice",
        "description": "Notify producers about rejected assets untouched for a year",
        "type": "CUSTOM",
        "priority": 300,
        "conditions": [
            {"field": "approvalStatus", "operator": "equals", "value": "REJECTED"},
            {"field": "daysSinceLastAccess", "operator": "greaterThanOrEqual", "value": 365},
        ],
        "actions": [{"type": "NOTIFY", "notifyRoles": ["PRODUCER"]}],
        "schedule": {"runFrequency": "MONTHLY"},
    },
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def instantiate_template(
    template: dict[str, Any],
    organization_id: str,
    created_by: str,
) -> StorageLifecyclePolicy:
    """Create a new, inactive policy from a template.

    Args:
        template: One of STORAGE_POLICY_TEMPLATES (or a caller-supplied partial record).
        organization_id: Owning organization.
        created_by: User creating the policy.

    Returns:
        A version-1 policy with a fresh id; the template itself is not modified.
    """

    record = copy.deepcopy(template)
    for key in ("id", "createdAt", "updatedAt", "deletedAt", "version", "isActive"):
        record.pop(key, None)

    now = _now()
    policy = StorageLifecyclePolicy.model_validate(record).model_copy(
        update={
            "organization_id": organization_id,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
            "version": 1,
            "is_active": False,
        }
    )
    logger.info("policy_instantiated_from_template", template=template.get("name"), policy_id=policy.id)
    return policy


def new_custom_policy(organization_id: str, created_by: str) -> StorageLifecyclePolicy:
    """Blank CUSTOM draft, as opened by "New Policy" without a template."""

    now = _now()
    return StorageLifecyclePolicy(
        organization_id=organization_id,
        name="New Custom Policy",
        type="CUSTOM",
        is_active=False,
        priority=100,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
