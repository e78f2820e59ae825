"""Unit tests for the in-memory storage backend."""

import pytest

from syncops_lifecycle.exceptions import AssetLockedError, StorageBackendError, TransientStorageError
from syncops_lifecycle.models import AssetContext, PolicyActionConfig
from syncops_lifecycle.storage import InMemoryStorageBackend


@pytest.fixture
def asset() -> AssetContext:
    return AssetContext(asset_id="asset-1", asset_type="video", current_storage_tier="HOT")


def test_transition_moves_tier(asset) -> None:
    backend = InMemoryStorageBackend()

    backend.apply_action(asset, PolicyActionConfig(type="TRANSITION", target_tier="GLACIER"))

    assert backend.tiers["asset-1"] == "GLACIER"
    assert backend.applied[0].target_tier == "GLACIER"


def test_archive_then_restore(asset) -> None:
    backend = InMemoryStorageBackend()

    backend.apply_action(asset, PolicyActionConfig(type="ARCHIVE"))
    assert backend.tiers["asset-1"] == "DEEP_ARCHIVE"
    assert "asset-1" in backend.archived

    backend.apply_action(asset, PolicyActionConfig(type="RESTORE"))
    assert backend.tiers["asset-1"] == "HOT"
    assert "asset-1" not in backend.archived


def test_legal_lock_blocks_later_transitions(asset) -> None:
    backend = InMemoryStorageBackend()
    backend.apply_action(asset, PolicyActionConfig(type="LOCK"))

    with pytest.raises(AssetLockedError):
        backend.apply_action(asset, PolicyActionConfig(type="DELETE"))

    backend.apply_action(asset, PolicyActionConfig(type="NOTIFY", notify_roles=["LEGAL"]))
    assert "asset-1" not in backend.deleted


def test_deleted_asset_refuses_actions(asset) -> None:
    backend = InMemoryStorageBackend()
    backend.apply_action(asset, PolicyActionConfig(type="DELETE"))

    with pytest.raises(StorageBackendError):
        backend.apply_action(asset, PolicyActionConfig(type="RESTORE"))


def test_edit_lock_and_pending_upload(asset) -> None:
    with pytest.raises(AssetLockedError):
        InMemoryStorageBackend(edit_locked={"asset-1"}).apply_action(asset, PolicyActionConfig(type="ARCHIVE"))
    with pytest.raises(TransientStorageError):
        InMemoryStorageBackend(pending_uploads={"asset-1"}).apply_action(
            asset, PolicyActionConfig(type="ARCHIVE")
        )
