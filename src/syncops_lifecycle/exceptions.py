"""Custom exceptions for SyncOps storage lifecycle."""


class SyncOpsError(Exception):
    """Base exception for all SyncOps lifecycle errors."""


class ConfigurationError(SyncOpsError):
    """Exception raised for configuration related errors."""


class PolicyStoreError(SyncOpsError):
    """Exception raised when the policy store cannot read or write records."""


class PolicyNotFoundError(PolicyStoreError):
    """Exception raised when a policy id is unknown or soft-deleted."""


class PolicyValidationError(SyncOpsError):
    """Exception raised when a policy fails validation on save.

    The individual messages are kept on ``errors`` so callers can show them.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Policy failed validation")


class StorageBackendError(SyncOpsError):
    """Exception raised when a storage operation fails for an asset."""


class AssetLockedError(StorageBackendError):
    """Exception raised when an asset is locked (edit session or legal lock)."""


class TransientStorageError(StorageBackendError):
    """Exception raised for failures that may succeed on retry (pending uploads, throttling)."""
