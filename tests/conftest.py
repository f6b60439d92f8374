# tests/conftest.py
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from media_gate.adapters.catalog import InMemoryAssetCatalog  # noqa: E402
from media_gate.adapters.permissions import StaticPermissionProvider  # noqa: E402
from media_gate.security.file_policy import FilePolicy  # noqa: E402
from media_gate.services.access_decision import AccessDecisionEngine  # noqa: E402
from media_gate.services.asset_locator import MediaAssetLocator  # noqa: E402
from media_gate.services.audit_service import AuditLogger  # noqa: E402
from media_gate.services.file_streamer import SecureFileStreamer  # noqa: E402
from media_gate.services.gateway import MediaGateway  # noqa: E402
from media_gate.services.path_resolver import RequestPathResolver  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\x0dIHDR" + b"\x01" * 32 + b"IEND\xaeB`\x82"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x10JFIF" + b"\x02" * 64 + b"\xff\xd9"
FIXED_NOW = 1_700_000_000.0


class Site:
    """Isolated document root with an uploads tree."""

    def __init__(self, base: Path):
        self.document_root = base / "site"
        self.upload_root = self.document_root / "wp-content" / "uploads"
        self.upload_root.mkdir(parents=True)

    def upload(self, relative: str, data: bytes) -> Path:
        path = self.upload_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def uri(self, relative: str) -> str:
        return f"wp-content/uploads/{relative}"


@pytest.fixture()
def site(tmp_path):
    return Site(tmp_path)


@pytest.fixture()
def catalog():
    return InMemoryAssetCatalog()


@pytest.fixture()
def permissions():
    return StaticPermissionProvider()


@pytest.fixture()
def audit_logger():
    return AuditLogger()


@pytest.fixture()
def gateway(site, catalog, permissions, audit_logger):
    return MediaGateway(
        resolver=RequestPathResolver(app_root=str(site.document_root)),
        locator=MediaAssetLocator(catalog, str(site.upload_root)),
        decisions=AccessDecisionEngine(permissions),
        streamer=SecureFileStreamer(FilePolicy(site.upload_root), clock=lambda: FIXED_NOW),
        audit_logger=audit_logger,
        document_root=str(site.document_root),
    )
