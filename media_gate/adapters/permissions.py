"""
Permission provider adapters.
"""

import logging
import posixpath
from typing import Any, Dict, Iterable, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class PermissionProvider(Protocol):
    """Verdict source for URIs and managed assets."""

    def is_uri_restricted(self, uri: str) -> bool:
        ...

    def is_asset_restricted(self, asset_id: str, caller: Optional[Any] = None) -> bool:
        ...

    def get_config_flag(self, key: str, default: bool = False) -> bool:
        ...


class StaticPermissionProvider:
    """Deterministic rule set held in memory."""

    def __init__(
        self,
        restricted_uris: Optional[Iterable[str]] = None,
        restricted_assets: Optional[Iterable[str]] = None,
        granted_callers: Optional[Dict[str, Iterable[Any]]] = None,
        flags: Optional[Dict[str, bool]] = None,
    ):
        self.restricted_uris = [uri.lstrip("/") for uri in restricted_uris or [] if uri]
        self.restricted_assets: Set[str] = set(restricted_assets or [])
        self.granted_callers = {
            asset_id: set(callers) for asset_id, callers in (granted_callers or {}).items()
        }
        self.flags: Dict[str, bool] = dict(flags or {})

    def is_uri_restricted(self, uri: str) -> bool:
        """Check the URI path against the restricted prefixes."""
        path = (uri or "").split("?", 1)[0].split("#", 1)[0]
        path = posixpath.normpath(path).lstrip("/") if path else ""
        for prefix in self.restricted_uris:
            if path.startswith(prefix):
                logger.info("URI %s matches restricted prefix %s", path, prefix)
                return True
        return False

    def is_asset_restricted(self, asset_id: str, caller: Optional[Any] = None) -> bool:
        if asset_id not in self.restricted_assets:
            return False
        return caller is None or caller not in self.granted_callers.get(asset_id, set())

    def get_config_flag(self, key: str, default: bool = False) -> bool:
        return self.flags.get(key, default)
