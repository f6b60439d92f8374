"""
Domain models for the media gate.
"""

import enum
import posixpath
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccessVerdict(str, enum.Enum):
    """Outcome of the access decision for one request."""

    ALLOW = "allow"
    DENY = "deny"


class AssetMatch(str, enum.Enum):
    """Catalog lookup strategy that located an asset."""

    STORED_PATH = "stored_path"
    LOCATION = "location"


class PipelineState(str, enum.Enum):
    """Per-request pipeline states."""

    PATH_RESOLVED = "path_resolved"
    ASSET_LOOKUP_DONE = "asset_lookup_done"
    VERDICT_OBTAINED = "verdict_obtained"
    STREAMING = "streaming"
    REJECTED = "rejected"


class RequestContext(BaseModel):
    """Resolved request state, built once per request."""

    model_config = ConfigDict(frozen=True)

    raw_path: str = ""
    normalized_path: str = ""
    document_root: str = ""
    caller: Optional[Any] = None
    correlation_id: Optional[str] = None

    @property
    def physical_path(self) -> str:
        """Document root joined with the normalized path, not yet trusted."""
        return f"{self.document_root.rstrip('/')}/{self.normalized_path}"

    @property
    def canonical_path(self) -> str:
        """Normalized path with `.` and `..` segments collapsed."""
        if not self.normalized_path:
            return ""
        path = posixpath.normpath(self.normalized_path).lstrip("/")
        return "" if path == "." else path


class MediaAsset(BaseModel):
    """Managed upload as recorded by the asset catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    stored_relative_path: Optional[str] = None
    location: Optional[str] = None
    matched_by: AssetMatch = AssetMatch.STORED_PATH


class AssetRecord(BaseModel):
    """Catalog manifest entry."""

    id: str = Field(..., min_length=1)
    stored_path: str = Field(..., min_length=1)
    location: Optional[str] = None

    def to_asset(self, matched_by: AssetMatch) -> MediaAsset:
        return MediaAsset(
            id=self.id,
            stored_relative_path=self.stored_path,
            location=self.location,
            matched_by=matched_by,
        )
