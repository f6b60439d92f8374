"""Delivery policy for files requested through the gateway."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Iterable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE: Final = "application/octet-stream"
SNIFF_BYTES: Final = 16

# Upload extensions that may be delivered. Scripts and markup are not listed.
ALLOWED_TYPES: Final[dict[str, str]] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "jpe": "image/jpeg",
    "gif": "image/gif",
    "png": "image/png",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "webp": "image/webp",
    "avif": "image/avif",
    "ico": "image/x-icon",
    "heic": "image/heic",
    "mp4": "video/mp4",
    "m4v": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "ogv": "video/ogg",
    "avi": "video/avi",
    "mp3": "audio/mpeg",
    "m4a": "audio/mpeg",
    "ogg": "audio/ogg",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "txt": "text/plain",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "ics": "text/calendar",
    "vtt": "text/vtt",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "odt": "application/vnd.oasis.opendocument.text",
    "rtf": "application/rtf",
    "zip": "application/zip",
    "gz": "application/x-gzip",
    "7z": "application/x-7z-compressed",
}

_SIGNATURES: Final[tuple[tuple[bytes, str], ...]] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"ID3", "audio/mpeg"),
    (b"\x1f\x8b", "application/x-gzip"),
)


@dataclass(frozen=True, slots=True)
class PolicyDecision:
    """Outcome of `FilePolicy.check`."""

    allowed: bool
    path: Path | None = None
    extension: str | None = None
    reason: str | None = None


def sniff_media_type(data: bytes) -> str | None:
    """Return media type detected from leading bytes, or None."""
    for magic, media_type in _SIGNATURES:
        if data.startswith(magic):
            return media_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[4:8] == b"ftyp":
        return "video/mp4"
    return None


def file_extension(path: str | os.PathLike[str]) -> str:
    return Path(path).suffix.lower().lstrip(".")


class FilePolicy:
    """Containment and extension floor applied before any byte is released."""

    def __init__(
        self,
        upload_root: str | os.PathLike[str],
        allowed_types: Mapping[str, str] | None = None,
    ):
        self.upload_root = Path(upload_root)
        self.allowed_types = dict(ALLOWED_TYPES if allowed_types is None else allowed_types)

    @classmethod
    def restricted_to(
        cls, upload_root: str | os.PathLike[str], extensions: Iterable[str]
    ) -> FilePolicy:
        """Build a policy permitting only a subset of the built-in extensions."""
        wanted = {ext.lower().lstrip(".") for ext in extensions}
        unknown = wanted - ALLOWED_TYPES.keys()
        if unknown:
            logger.warning("Ignoring unknown extensions: %s", ", ".join(sorted(unknown)))
        return cls(upload_root, {ext: ALLOWED_TYPES[ext] for ext in wanted if ext in ALLOWED_TYPES})

    def check(self, filename: str | os.PathLike[str]) -> PolicyDecision:
        """Canonicalize `filename` and decide whether it may be delivered."""
        root = self.upload_root.expanduser().resolve()
        resolved = Path(filename).expanduser().resolve()

        extension = file_extension(resolved)
        if extension not in self.allowed_types:
            return PolicyDecision(False, resolved, extension, "extension_not_allowed")

        # Symlinks are already resolved, so this also catches links leaving the tree.
        if resolved == root or not resolved.is_relative_to(root):
            return PolicyDecision(False, resolved, extension, "outside_upload_root")

        if not resolved.is_file():
            return PolicyDecision(False, resolved, extension, "not_a_file")

        return PolicyDecision(True, resolved, extension)

    def media_type_for(self, path: Path, head: bytes) -> str:
        """Probe content first, then fall back on the extension table."""
        sniffed = sniff_media_type(head)
        if sniffed:
            return sniffed
        return self.allowed_types.get(file_extension(path)) or DEFAULT_MEDIA_TYPE
