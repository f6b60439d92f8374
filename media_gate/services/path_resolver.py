"""
Request path resolution for the media gate.
"""

import logging
import re
from typing import Any, Optional

from media_gate.adapters.request_params import RequestParams
from media_gate.domain.models import RequestContext

logger = logging.getLogger(__name__)

DEFAULT_MARKER_PARAM = "protected-media"

NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
QUERY_OR_FRAGMENT_RE = re.compile(r"[?#].*$", re.DOTALL)


def is_numeric(value: Optional[str]) -> bool:
    return value is not None and bool(NUMERIC_RE.match(value))


def normalize_path(raw: Optional[str]) -> str:
    """Strip query string or fragment and one leading separator."""
    if not raw:
        return ""
    path = QUERY_OR_FRAGMENT_RE.sub("", raw)
    return path[1:] if path.startswith("/") else path


class RequestPathResolver:
    """Picks the requested file path out of a rewritten request."""

    def __init__(self, marker_param: str = DEFAULT_MARKER_PARAM, app_root: str = "."):
        self.marker_param = marker_param
        self.app_root = app_root

    def resolve(
        self,
        params: RequestParams,
        caller: Optional[Any] = None,
        correlation_id: Optional[str] = None,
    ) -> RequestContext:
        marker = params.get_query_param(self.marker_param)

        if marker is None or is_numeric(marker):
            # Server rewrite rule: the original URI is still the request URI
            raw_path = params.get_server_var("REQUEST_URI")
        else:
            # Reverse proxy rewrite: the path travels in the marker itself
            raw_path = marker

        document_root = params.get_server_var("DOCUMENT_ROOT") or self.app_root
        context = RequestContext(
            raw_path=raw_path or "",
            normalized_path=normalize_path(raw_path),
            document_root=document_root,
            caller=caller,
            correlation_id=correlation_id,
        )
        logger.debug("Resolved %r to %r", context.raw_path, context.normalized_path)
        return context
