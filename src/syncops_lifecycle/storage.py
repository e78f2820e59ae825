"""Storage backends that carry out policy actions on assets.

Real storage-class transitions happen in the object store and are outside this
package; the runner only talks to the StorageBackend protocol. The in-memory
backend keeps per-asset state so runs and their failure modes can be exercised
without cloud access.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from syncops_lifecycle.exceptions import AssetLockedError, StorageBackendError, TransientStorageError
from syncops_lifecycle.models import AssetContext, PolicyActionConfig, PolicyActionType, StorageTier

logger = structlog.get_logger()


class StorageBackend(Protocol):
    """Applies one action to one asset. Failures are raised as StorageBackendError."""

    def apply_action(self, asset: AssetContext, action: PolicyActionConfig) -> None: ...


@dataclass(frozen=True)
class AppliedAction:
    asset_id: str
    action_type: str
    target_tier: str | None = None
    notify_roles: tuple[str, ...] = ()


@dataclass
class InMemoryStorageBackend:
    """Thread-safe backend that records what it was asked to do.

    Attributes:
        edit_locked: Assets held by an active edit session; every action fails.
        pending_uploads: Assets still uploading; actions fail transiently.
    """

    edit_locked: set[str] = field(default_factory=set)
    pending_uploads: set[str] = field(default_factory=set)
    tiers: dict[str, str] = field(default_factory=dict)
    legal_locks: set[str] = field(default_factory=set)
    archived: set[str] = field(default_factory=set)
    deleted: set[str] = field(default_factory=set)
    applied: list[AppliedAction] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def apply_action(self, asset: AssetContext, action: PolicyActionConfig) -> None:
        asset_id = asset.asset_id
        with self._lock:
            if asset_id in self.deleted:
                raise StorageBackendError(f"Asset {asset_id} has been deleted")
            if asset_id in self.edit_locked:
                raise AssetLockedError(f"Asset {asset_id} is locked by an active edit session")
            if asset_id in self.pending_uploads:
                raise TransientStorageError(f"Asset {asset_id} has a pending upload")

            current = self.tiers.get(asset_id, asset.current_storage_tier or StorageTier.HOT.value)

            if action.type == PolicyActionType.LOCK.value:
                self.legal_locks.add(asset_id)
            elif action.type == PolicyActionType.NOTIFY.value:
                pass
            elif asset_id in self.legal_locks:
                raise AssetLockedError(f"Asset {asset_id} is under legal lock")
            elif action.type == PolicyActionType.TRANSITION.value:
                if not action.target_tier:
                    raise StorageBackendError("TRANSITION without a target tier")
                self.tiers[asset_id] = action.target_tier
            elif action.type == PolicyActionType.ARCHIVE.value:
                self.archived.add(asset_id)
                self.tiers[asset_id] = StorageTier.DEEP_ARCHIVE.value
            elif action.type == PolicyActionType.RESTORE.value:
                self.archived.discard(asset_id)
                self.tiers[asset_id] = StorageTier.HOT.value
            elif action.type == PolicyActionType.DELETE.value:
                self.deleted.add(asset_id)
                self.tiers.pop(asset_id, None)
            else:
                raise StorageBackendError(f"Unsupported action type {action.type}")

            self.applied.append(
                AppliedAction(
                    asset_id=asset_id,
                    action_type=action.type,
                    target_tier=action.target_tier,
                    notify_roles=tuple(action.notify_roles),
                )
            )

        logger.debug(
            "storage_action_applied",
            asset_id=asset_id,
            action=action.type,
            from_tier=current,
            target_tier=action.target_tier,
        )
