"""
Asset catalog adapters.
In-memory storage; records keep insertion order, which is the row order
lookups report.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union

from pydantic import TypeAdapter

from media_gate.domain.models import AssetMatch, AssetRecord, MediaAsset

logger = logging.getLogger(__name__)

_MANIFEST_ADAPTER = TypeAdapter(List[AssetRecord])


class AssetCatalog(Protocol):
    """Read-only view of the attachment catalog."""

    def find_asset_by_stored_path(self, *paths: str) -> Optional[MediaAsset]:
        """Return the first asset whose stored path equals any of `paths`."""
        ...

    def find_asset_by_location_suffix(self, suffix: str) -> Optional[MediaAsset]:
        """Return the first asset whose location ends with `suffix`."""
        ...


class InMemoryAssetCatalog:
    """In-memory attachment catalog."""

    def __init__(self, records: Optional[Iterable[AssetRecord]] = None):
        self.records: List[AssetRecord] = list(records or [])

    def add(self, asset_id: str, stored_path: str, location: Optional[str] = None) -> AssetRecord:
        """Register an attachment."""
        record = AssetRecord(id=asset_id, stored_path=stored_path, location=location)
        self.records.append(record)
        return record

    def find_asset_by_stored_path(self, *paths: str) -> Optional[MediaAsset]:
        wanted = {path for path in paths if path}
        if not wanted:
            return None
        for record in self.records:
            if record.stored_path in wanted:
                return record.to_asset(AssetMatch.STORED_PATH)
        return None

    def find_asset_by_location_suffix(self, suffix: str) -> Optional[MediaAsset]:
        if not suffix:
            return None
        for record in self.records:
            if record.location and record.location.endswith(suffix):
                return record.to_asset(AssetMatch.LOCATION)
        return None


def load_catalog(manifest: Union[str, Path]) -> InMemoryAssetCatalog:
    """Build a catalog from a JSON manifest file."""
    raw = json.loads(Path(manifest).read_text(encoding="utf-8"))
    records = _MANIFEST_ADAPTER.validate_python(raw)
    logger.info("Loaded %s catalog records from %s", len(records), manifest)
    return InMemoryAssetCatalog(records)
