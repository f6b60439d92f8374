"""FastAPI application serving protected media files."""

import logging
import secrets

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import Response

from media_gate.adapters.catalog import InMemoryAssetCatalog, load_catalog
from media_gate.adapters.permissions import StaticPermissionProvider
from media_gate.app.settings import GatewaySettings, load_settings
from media_gate.security.errors import FileDeliveryError, GatewayError, PermissionCheckError
from media_gate.security.file_policy import FilePolicy
from media_gate.security.problem_details import (
    CORRELATION_HEADER,
    gateway_error_response,
    problem_response,
)
from media_gate.services.access_decision import AccessDecisionEngine
from media_gate.services.asset_locator import MediaAssetLocator
from media_gate.services.file_streamer import SecureFileStreamer
from media_gate.services.gateway import DENIED_REDIRECT_FLAG, MediaGateway
from media_gate.services.path_resolver import RequestPathResolver

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def build_gateway(settings: GatewaySettings) -> MediaGateway:
    """Wire the pipeline from configuration."""
    upload_root = settings.get_upload_root_directory()

    if settings.catalog_file:
        catalog = load_catalog(settings.catalog_file)
    else:
        catalog = InMemoryAssetCatalog()

    permissions = StaticPermissionProvider(
        restricted_uris=settings.restricted_uris,
        restricted_assets=settings.restricted_assets,
        flags={DENIED_REDIRECT_FLAG: settings.denied_redirect},
    )

    if settings.allowed_extensions:
        policy = FilePolicy.restricted_to(upload_root, settings.allowed_extensions)
    else:
        policy = FilePolicy(upload_root)

    return MediaGateway(
        resolver=RequestPathResolver(settings.marker_param, app_root=settings.app_root),
        locator=MediaAssetLocator(catalog, str(upload_root)),
        decisions=AccessDecisionEngine(permissions),
        streamer=SecureFileStreamer(policy),
        document_root=settings.document_root,
        denied_redirect_url=settings.denied_redirect_url,
    )


app = FastAPI(title="Media Gate", description="Protected media file gateway", version="1.0.0")

gateway = build_gateway(load_settings())


def get_gateway() -> MediaGateway:
    return gateway


def _ensure_correlation_id(request: Request) -> str:
    """Return existing correlation id or generate a new one."""
    correlation_id = getattr(request.state, "correlation_id", None)
    if not correlation_id:
        correlation_id = request.headers.get(CORRELATION_HEADER) or secrets.token_urlsafe(16)
        request.state.correlation_id = correlation_id
    return correlation_id


@app.middleware("http")
async def correlation_middleware(request: Request, call_next):
    """Tag every request with a correlation id and baseline security headers."""
    correlation_id = _ensure_correlation_id(request)
    response = await call_next(request)
    response.headers.setdefault(CORRELATION_HEADER, correlation_id)
    for header, value in SECURITY_HEADERS.items():
        response.headers[header] = value
    return response


@app.exception_handler(PermissionCheckError)
async def permission_error_handler(request: Request, exc: PermissionCheckError):
    logger.error("Permission check failed for %s: %s", request.url.path, exc.__cause__)
    return gateway_error_response(
        exc,
        title="Access check unavailable",
        instance=str(request.url.path),
        correlation_id=_ensure_correlation_id(request),
    )


@app.exception_handler(FileDeliveryError)
async def file_delivery_error_handler(request: Request, exc: FileDeliveryError):
    logger.error("File delivery failed for %s: %s", request.url.path, exc.__cause__)
    return gateway_error_response(
        exc,
        title="File unavailable",
        instance=str(request.url.path),
        correlation_id=_ensure_correlation_id(request),
    )


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    logger.error("Gateway error (%s): %s", exc.code, exc.message)
    return gateway_error_response(
        exc,
        title="Gateway error",
        instance=str(request.url.path),
        correlation_id=_ensure_correlation_id(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return problem_response(
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        title="Internal server error",
        detail="Internal server error",
        extras={"code": "internal_error"},
        instance=str(request.url.path),
        correlation_id=_ensure_correlation_id(request),
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/{file_path:path}")
def serve_file(
    file_path: str, request: Request, media_gateway: MediaGateway = Depends(get_gateway)
) -> Response:
    """Authorize and deliver a requested file."""
    return media_gateway.authorize(request)
