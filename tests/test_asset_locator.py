from pathlib import Path

from media_gate.adapters.catalog import InMemoryAssetCatalog, load_catalog
from media_gate.domain.models import AssetMatch, RequestContext
from media_gate.services.asset_locator import (
    MediaAssetLocator,
    relative_to_root,
    strip_size_suffix,
)

DOCUMENT_ROOT = "/var/www"
UPLOAD_ROOT = "/var/www/wp-content/uploads"


def _context(path: str) -> RequestContext:
    return RequestContext(raw_path="/" + path, normalized_path=path, document_root=DOCUMENT_ROOT)


def test_strip_size_suffix():
    assert strip_size_suffix("2019/11/banner-1544x500.png") == "2019/11/banner.png"
    assert strip_size_suffix("2019/11/banner.png") == "2019/11/banner.png"
    assert strip_size_suffix("2019/11/banner-1544x500-b.png") == "2019/11/banner-1544x500-b.png"


def test_relative_to_root():
    assert relative_to_root(UPLOAD_ROOT + "/2023/04/a.jpg", UPLOAD_ROOT) == "2023/04/a.jpg"
    assert relative_to_root(UPLOAD_ROOT + "/2023/04/a.jpg", UPLOAD_ROOT + "/") == "2023/04/a.jpg"
    assert relative_to_root("/var/www/theme/a.jpg", UPLOAD_ROOT) is None
    assert relative_to_root(UPLOAD_ROOT + "/./2023/x/../04/a.jpg", UPLOAD_ROOT) == "2023/04/a.jpg"
    assert relative_to_root(UPLOAD_ROOT, UPLOAD_ROOT) is None


def test_thumbnail_maps_to_original_asset():
    catalog = InMemoryAssetCatalog()
    catalog.add("7", "2019/11/banner.png")
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    thumb = locator.locate(_context("wp-content/uploads/2019/11/banner-1544x500.png"))
    original = locator.locate(_context("wp-content/uploads/2019/11/banner.png"))

    assert thumb is not None and original is not None
    assert thumb.id == original.id == "7"
    assert thumb.matched_by is AssetMatch.STORED_PATH
    assert thumb.stored_relative_path == "2019/11/banner.png"


def test_file_named_like_a_thumbnail_matches_full_path():
    catalog = InMemoryAssetCatalog()
    catalog.add("8", "2019/11/banner-1544x500.png")
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    asset = locator.locate(_context("wp-content/uploads/2019/11/banner-1544x500.png"))
    assert asset is not None
    assert asset.id == "8"


def test_first_catalog_row_wins_when_both_fragments_match():
    catalog = InMemoryAssetCatalog()
    catalog.add("full", "2019/11/banner-1544x500.png")
    catalog.add("base", "2019/11/banner.png")
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    asset = locator.locate(_context("wp-content/uploads/2019/11/banner-1544x500.png"))
    assert asset.id == "full"


def test_location_suffix_fallback():
    catalog = InMemoryAssetCatalog()
    catalog.add(
        "42",
        "legacy/photo.jpg",
        location="https://example.com/wp-content/uploads/2023/04/photo.jpg",
    )
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    asset = locator.locate(_context("wp-content/uploads/2023/04/photo-300x200.jpg"))
    assert asset is not None
    assert asset.id == "42"
    assert asset.matched_by is AssetMatch.LOCATION


def test_unmanaged_file_is_not_found():
    catalog = InMemoryAssetCatalog()
    catalog.add("1", "2023/04/photo.jpg")
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    assert locator.locate(_context("wp-content/themes/site/logo.png")) is None


def test_empty_path_is_not_looked_up():
    class ExplodingCatalog:
        def find_asset_by_stored_path(self, *paths):
            raise AssertionError("catalog must not be queried")

        def find_asset_by_location_suffix(self, suffix):
            raise AssertionError("catalog must not be queried")

    locator = MediaAssetLocator(ExplodingCatalog(), UPLOAD_ROOT)
    assert locator.locate(_context("")) is None


def test_load_catalog_from_manifest(tmp_path):
    manifest = tmp_path / "catalog.json"
    manifest.write_text(
        '[{"id": "A42", "stored_path": "2023/04/photo.jpg", '
        '"location": "https://example.com/wp-content/uploads/2023/04/photo.jpg"}]',
        encoding="utf-8",
    )
    catalog = load_catalog(manifest)

    asset = catalog.find_asset_by_stored_path("2023/04/photo.jpg")
    assert asset is not None
    assert asset.id == "A42"
    assert catalog.find_asset_by_stored_path("", "missing.jpg") is None


def test_dot_segments_reach_the_same_asset():
    catalog = InMemoryAssetCatalog()
    catalog.add("A42", "2023/04/photo.jpg")
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    for path in (
        "wp-content/uploads/2023/04/photo.jpg",
        "wp-content/uploads/2023/04/./photo.jpg",
        "wp-content/uploads/2023/x/../04/photo.jpg",
        "./wp-content/uploads/2023/04/photo-300x200.jpg",
    ):
        asset = locator.locate(_context(path))
        assert asset is not None, path
        assert asset.id == "A42"


def test_location_fallback_uses_canonical_path():
    catalog = InMemoryAssetCatalog()
    catalog.add(
        "42",
        "legacy/photo.jpg",
        location="https://example.com/wp-content/uploads/2023/04/photo.jpg",
    )
    locator = MediaAssetLocator(catalog, UPLOAD_ROOT)

    asset = locator.locate(_context("wp-content/uploads/2023/./04/photo.jpg"))
    assert asset is not None
    assert asset.matched_by is AssetMatch.LOCATION


def test_symlinked_document_root_reaches_the_asset(tmp_path):
    upload_root = tmp_path / "site" / "wp-content" / "uploads"
    (upload_root / "2023" / "04").mkdir(parents=True)
    (upload_root / "2023" / "04" / "photo.jpg").write_bytes(b"jpeg")
    link = tmp_path / "docroot"
    link.symlink_to(tmp_path / "site")

    catalog = InMemoryAssetCatalog()
    catalog.add("A42", "2023/04/photo.jpg")
    locator = MediaAssetLocator(catalog, upload_root)
    context = RequestContext(
        normalized_path="wp-content/uploads/2023/04/photo.jpg", document_root=str(link)
    )

    asset = locator.locate(context)
    assert asset is not None
    assert asset.id == "A42"


def test_relative_document_root_with_default_upload_root(tmp_path, monkeypatch):
    upload_root = tmp_path / "wp-content" / "uploads"
    upload_root.mkdir(parents=True)
    monkeypatch.chdir(tmp_path)

    catalog = InMemoryAssetCatalog()
    catalog.add("A42", "2023/04/photo.jpg")
    locator = MediaAssetLocator(catalog, Path(".") / "wp-content" / "uploads")
    context = RequestContext(
        normalized_path="wp-content/uploads/2023/04/photo.jpg", document_root="."
    )

    asset = locator.locate(context)
    assert asset is not None
    assert asset.id == "A42"
