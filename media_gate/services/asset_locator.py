"""
Reverse mapping from physical file paths to managed assets.
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

from media_gate.adapters.catalog import AssetCatalog
from media_gate.domain.models import MediaAsset, RequestContext

logger = logging.getLogger(__name__)

# banner-1544x500.png -> banner.png
SIZE_SUFFIX_RE = re.compile(r"(-\d+x\d+)(\.\w+)$")


def strip_size_suffix(path: str) -> str:
    return SIZE_SUFFIX_RE.sub(r"\2", path)


def relative_to_root(
    path: Union[str, os.PathLike], root: Union[str, os.PathLike]
) -> Optional[str]:
    """Canonical path of `path` under `root`, or None when it lies outside."""
    resolved = Path(path).expanduser().resolve()
    resolved_root = Path(root).expanduser().resolve()
    if resolved == resolved_root or not resolved.is_relative_to(resolved_root):
        return None
    return resolved.relative_to(resolved_root).as_posix()


class MediaAssetLocator:
    """Finds the catalog entry a requested file belongs to."""

    def __init__(self, catalog: AssetCatalog, upload_root: Union[str, os.PathLike]):
        self.catalog = catalog
        self.upload_root = Path(upload_root)

    def locate(self, context: RequestContext) -> Optional[MediaAsset]:
        """
        Map the request's physical path to an asset.

        The path is resolved the same way delivery resolves it, so any
        spelling of a file (``./``, ``x/../``, a symlinked document root)
        reaches the same catalog entry. Thumbnails carry a
        ``-WIDTHxHEIGHT`` suffix the catalog never records, so the lookup
        tries the path with the suffix removed as well as the path itself.
        When neither matches a stored path, the asset location is searched
        for the suffix-free request path. ``None`` means the file is not a
        managed upload.
        """
        if not context.canonical_path:
            return None

        physical_path = context.physical_path
        rel_from_full = relative_to_root(physical_path, self.upload_root)

        asset = None
        if rel_from_full is not None:
            asset = self.catalog.find_asset_by_stored_path(
                strip_size_suffix(rel_from_full), rel_from_full
            )
        if asset is None:
            asset = self.catalog.find_asset_by_location_suffix(
                strip_size_suffix(context.canonical_path)
            )

        if asset is None:
            logger.debug("No managed asset for %s", physical_path)
        else:
            logger.debug("Located asset %s via %s", asset.id, asset.matched_by.value)
        return asset
