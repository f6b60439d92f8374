"""
Request parameter accessors.
"""

from typing import Optional, Protocol

from starlette.requests import Request


class RequestParams(Protocol):
    """Typed view over the inbound request."""

    def get_query_param(self, name: str) -> Optional[str]:
        ...

    def get_server_var(self, name: str) -> Optional[str]:
        ...


class StarletteRequestParams:
    """`RequestParams` backed by a Starlette request."""

    def __init__(self, request: Request, document_root: Optional[str] = None):
        self.request = request
        self.document_root = document_root

    def get_query_param(self, name: str) -> Optional[str]:
        return self.request.query_params.get(name)

    def get_server_var(self, name: str) -> Optional[str]:
        if name == "REQUEST_URI":
            uri = self.request.url.path
            query = self.request.url.query
            return f"{uri}?{query}" if query else uri
        if name == "DOCUMENT_ROOT":
            return self.document_root
        return None
