"""Flattened asset view consumed by the policy evaluator.

How these values are computed and joined from asset and project records is the
caller's business; the evaluator only reads the keys named by ConditionField,
plus ``assetType`` and ``projectId`` for scope filtering.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from syncops_lifecycle.models.policy import CamelModel


class AssetContext(CamelModel):
    """Key/value snapshot of one asset at evaluation time."""

    model_config = ConfigDict(extra="allow")

    asset_id: str = Field(description="Asset identifier")
    asset_type: str | None = Field(default=None, description="video, audio, image, document, ...")
    project_id: str | None = None

    days_since_last_access: float | None = None
    days_since_upload: float | None = None
    days_since_project_close: float | None = None
    access_count: int | None = None
    download_count: int | None = None
    project_status: str | None = None
    current_storage_tier: str | None = None
    file_size: int | None = Field(default=None, description="Size in bytes")
    mime_type: str | None = None
    has_active_rights: bool | None = None
    is_legal_hold: bool | None = None
    approval_status: str | None = None

    def as_condition_values(self) -> dict[str, Any]:
        """Return the camelCase mapping the evaluator reads; unset values are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
