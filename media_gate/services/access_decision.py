"""
Access decisions for requested files.
"""

import logging
from typing import Optional

from media_gate.adapters.permissions import PermissionProvider
from media_gate.domain.models import AccessVerdict, MediaAsset, RequestContext
from media_gate.security.errors import PermissionCheckError

logger = logging.getLogger(__name__)


class AccessDecisionEngine:
    """Asks the permission provider for a verdict. Never fails open."""

    def __init__(self, permissions: PermissionProvider):
        self.permissions = permissions

    def check_uri(self, context: RequestContext) -> AccessVerdict:
        """URI-level rules, enforced before any asset lookup.

        Both the URI as received and its canonical form are checked, so
        ``./`` or ``x/../`` segments cannot step around a prefix rule.
        """
        uris = [context.raw_path]
        if context.canonical_path and context.canonical_path != context.raw_path:
            uris.append("/" + context.canonical_path)
        try:
            restricted = any(self.permissions.is_uri_restricted(uri) for uri in uris)
        except Exception as exc:
            logger.error("URI permission check failed for %s: %s", context.raw_path, exc)
            raise PermissionCheckError("URI permission check failed") from exc

        if restricted:
            logger.info("URI %s is restricted", context.raw_path)
            return AccessVerdict.DENY
        return AccessVerdict.ALLOW

    def decide(self, context: RequestContext, asset: Optional[MediaAsset]) -> AccessVerdict:
        """Verdict for the located asset; files outside the catalog are allowed."""
        if asset is None:
            return AccessVerdict.ALLOW

        try:
            restricted = self.permissions.is_asset_restricted(asset.id, context.caller)
        except Exception as exc:
            logger.error("Asset permission check failed for %s: %s", asset.id, exc)
            raise PermissionCheckError("Asset permission check failed") from exc

        if restricted:
            logger.info("Asset %s is restricted for caller %s", asset.id, context.caller)
            return AccessVerdict.DENY
        return AccessVerdict.ALLOW

    def denial_redirect_enabled(self, key: str) -> bool:
        try:
            return bool(self.permissions.get_config_flag(key, False))
        except Exception as exc:
            raise PermissionCheckError("Unable to read denial configuration") from exc
