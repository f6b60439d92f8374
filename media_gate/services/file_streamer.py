"""
File delivery with cache headers.
"""

import hashlib
import logging
import os
import time
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from fastapi import status
from fastapi.responses import Response, StreamingResponse

from media_gate.security.errors import FileDeliveryError
from media_gate.security.file_policy import SNIFF_BYTES, FilePolicy

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
EXPIRES_OFFSET_SECONDS = 100_000_000  # a little over three years
HTTP_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S"


def format_http_date(timestamp: float) -> str:
    """RFC 1123 date without the zone suffix."""
    return time.strftime(HTTP_DATE_FORMAT, time.gmtime(timestamp))


def compute_etag(last_modified: str) -> str:
    # Hash of the modification time only; files sharing an mtime share an ETag.
    return '"' + hashlib.md5(last_modified.encode("utf-8")).hexdigest() + '"'


def _iter_file(handle: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()


class SecureFileStreamer:
    """Re-validates the physical path and streams the file verbatim."""

    def __init__(self, policy: FilePolicy, clock=time.time):
        self.policy = policy
        self.clock = clock

    def forbidden(self) -> Response:
        return Response(status_code=status.HTTP_403_FORBIDDEN)

    def stream(self, filename: str, media_type: Optional[str] = None) -> Response:
        decision = self.policy.check(filename)
        if not decision.allowed:
            logger.warning("Refusing to deliver %s: %s", filename, decision.reason)
            return self.forbidden()

        path: Path = decision.path
        try:
            stat = os.stat(path)
            handle = open(path, "rb")
        except OSError as exc:
            logger.error("File %s vanished before delivery: %s", path, exc)
            raise FileDeliveryError() from exc

        if not media_type:
            try:
                head = handle.read(SNIFF_BYTES)
                handle.seek(0)
            except OSError as exc:
                handle.close()
                raise FileDeliveryError() from exc
            media_type = self.policy.media_type_for(path, head)

        last_modified = format_http_date(stat.st_mtime)
        headers = {
            "Content-Type": media_type,
            "Content-Length": str(stat.st_size),
            "Last-Modified": f"{last_modified} GMT",
            "ETag": compute_etag(last_modified),
            "Expires": f"{format_http_date(self.clock() + EXPIRES_OFFSET_SECONDS)} GMT",
        }
        logger.info("Delivering %s (%s, %s bytes)", path, media_type, stat.st_size)
        return StreamingResponse(
            _iter_file(handle),
            status_code=status.HTTP_200_OK,
            media_type=media_type,
            headers=headers,
        )
