"""
Environment-driven configuration for the media gate.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from media_gate.services.path_resolver import DEFAULT_MARKER_PARAM

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


class GatewaySettings(BaseModel):
    """Gateway configuration."""

    document_root: str = "."
    app_root: str = "."
    upload_root: Optional[str] = None
    marker_param: str = Field(DEFAULT_MARKER_PARAM, min_length=1)
    catalog_file: Optional[str] = None
    restricted_uris: List[str] = Field(default_factory=list)
    restricted_assets: List[str] = Field(default_factory=list)
    denied_redirect: bool = False
    denied_redirect_url: Optional[str] = None
    allowed_extensions: Optional[List[str]] = None

    def get_upload_root_directory(self) -> Path:
        if self.upload_root:
            return Path(self.upload_root)
        return Path(self.document_root or self.app_root) / "wp-content" / "uploads"


def _load_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    logger.warning("Invalid value '%s' for %s. Falling back to %s.", raw, name, default)
    return default


def _load_list_env(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]


def load_settings() -> GatewaySettings:
    """Read `MEDIA_GATE_*` environment variables."""
    allowed = _load_list_env("MEDIA_GATE_ALLOWED_EXTENSIONS")
    return GatewaySettings(
        document_root=os.getenv("MEDIA_GATE_DOCUMENT_ROOT", "."),
        app_root=os.getenv("MEDIA_GATE_APP_ROOT", "."),
        upload_root=os.getenv("MEDIA_GATE_UPLOAD_ROOT") or None,
        marker_param=os.getenv("MEDIA_GATE_MARKER_PARAM") or DEFAULT_MARKER_PARAM,
        catalog_file=os.getenv("MEDIA_GATE_CATALOG_FILE") or None,
        restricted_uris=_load_list_env("MEDIA_GATE_RESTRICTED_URIS"),
        restricted_assets=_load_list_env("MEDIA_GATE_RESTRICTED_ASSETS"),
        denied_redirect=_load_bool_env("MEDIA_GATE_DENIED_REDIRECT", False),
        denied_redirect_url=os.getenv("MEDIA_GATE_DENIED_REDIRECT_URL") or None,
        allowed_extensions=allowed or None,
    )
