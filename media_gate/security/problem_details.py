"""Helpers for generating RFC 7807 compliant error responses."""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping
from uuid import uuid4

from fastapi.responses import JSONResponse

from media_gate.security.errors import GatewayError

DEFAULT_TYPE = "about:blank"
CORRELATION_HEADER = "X-Correlation-ID"


def _ensure_headers(headers: Mapping[str, str] | None) -> MutableMapping[str, str]:
    return dict(headers or {})


def problem_response(
    *,
    status: int,
    title: str,
    detail: str,
    type_: str = DEFAULT_TYPE,
    instance: str | None = None,
    extras: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    correlation_id: str | None = None,
) -> JSONResponse:
    """
    Produce an RFC 7807 compliant JSON response.

    The correlation id is mirrored in the `X-Correlation-ID` header so that
    a failed file request can be traced through the access logs.
    """
    cid = correlation_id or str(uuid4())
    payload: dict[str, Any] = {
        "type": type_,
        "title": title,
        "status": status,
        "detail": detail,
        "correlation_id": cid,
    }
    if instance:
        payload["instance"] = instance
    if extras:
        payload.update(extras)

    response_headers = _ensure_headers(headers)
    response_headers.setdefault(CORRELATION_HEADER, cid)
    return JSONResponse(status_code=status, content=payload, headers=response_headers)


def gateway_error_response(
    exc: GatewayError,
    *,
    title: str,
    instance: str | None = None,
    correlation_id: str | None = None,
) -> JSONResponse:
    """Problem response for a `GatewayError`."""
    return problem_response(
        status=exc.status,
        title=title,
        detail=exc.message,
        instance=instance,
        extras={"code": exc.code},
        correlation_id=correlation_id,
    )
