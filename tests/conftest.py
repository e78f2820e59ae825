"""Pytest configuration and shared fixtures."""

import pytest

from syncops_lifecycle.models import AssetContext, StorageLifecyclePolicy


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from syncops_lifecycle.config import Settings

    return Settings(
        store_backend="memory",
        max_retries=1,
        retry_delay_seconds=0.0,
        max_concurrency=2,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def legal_hold_policy() -> StorageLifecyclePolicy:
    """Priority-1 legal hold lock, as seeded for every organization."""
    return StorageLifecyclePolicy.model_validate(
        {
            "id": "policy-legal",
            "organizationId": "org-1",
            "name": "Legal Hold Protection",
            "type": "LEGAL_HOLD",
            "isActive": True,
            "priority": 1,
            "conditions": [{"field": "isLegalHold", "operator": "equals", "value": True}],
            "actions": [{"type": "LOCK"}],
            "schedule": {"runFrequency": "HOURLY"},
        }
    )


@pytest.fixture
def archive_policy() -> StorageLifecyclePolicy:
    """Move stale hot video/audio to cold storage."""
    return StorageLifecyclePolicy.model_validate(
        {
            "id": "policy-archive",
            "organizationId": "org-1",
            "name": "Standard Archive Policy",
            "type": "TIME_BASED",
            "isActive": True,
            "priority": 100,
            "conditions": [
                {"field": "daysSinceLastAccess", "operator": "greaterThan", "value": 90},
                {"field": "currentStorageTier", "operator": "equals", "value": "HOT"},
            ],
            "actions": [
                {"type": "TRANSITION", "targetTier": "COLD"},
                {"type": "NOTIFY", "notifyRoles": ["ADMIN"]},
            ],
            "scope": {"assetTypes": ["video", "audio"]},
            "schedule": {"runFrequency": "WEEKLY"},
        }
    )


@pytest.fixture
def sample_assets() -> list[AssetContext]:
    """Three assets: stale hot footage, stale footage under legal hold, fresh footage."""
    return [
        AssetContext(
            asset_id="asset-stale",
            asset_type="video",
            project_id="proj-1",
            days_since_last_access=120,
            current_storage_tier="HOT",
            file_size=2_000_000_000,
            is_legal_hold=False,
        ),
        AssetContext(
            asset_id="asset-held",
            asset_type="video",
            project_id="proj-1",
            days_since_last_access=400,
            current_storage_tier="HOT",
            file_size=5_000_000_000,
            is_legal_hold=True,
        ),
        AssetContext(
            asset_id="asset-fresh",
            asset_type="video",
            project_id="proj-2",
            days_since_last_access=3,
            current_storage_tier="HOT",
            file_size=1_000_000_000,
            is_legal_hold=False,
        ),
    ]
