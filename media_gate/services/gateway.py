"""
Media gate: the per-request authorization pipeline.
"""

import logging
from html import escape
from typing import Optional

from fastapi import Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from media_gate.adapters.request_params import StarletteRequestParams
from media_gate.domain.models import AccessVerdict, MediaAsset, PipelineState, RequestContext
from media_gate.services.access_decision import AccessDecisionEngine
from media_gate.services.asset_locator import MediaAssetLocator
from media_gate.services.audit_service import AuditLogger
from media_gate.services.file_streamer import SecureFileStreamer
from media_gate.services.path_resolver import RequestPathResolver

logger = logging.getLogger(__name__)

DENIED_REDIRECT_FLAG = "protected-media.settings.denied-redirect"

DENIED_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{title}</title></head>
<body><h1>{title}</h1><p>{message}</p></body>
</html>
"""


class MediaGateway:
    """Resolver, locator, decision and streamer run once per request."""

    def __init__(
        self,
        resolver: RequestPathResolver,
        locator: MediaAssetLocator,
        decisions: AccessDecisionEngine,
        streamer: SecureFileStreamer,
        audit_logger: Optional[AuditLogger] = None,
        document_root: Optional[str] = None,
        denied_redirect_url: Optional[str] = None,
        denied_title: str = "Access Denied",
        denied_message: str = "You are not allowed to access this file.",
    ):
        self.resolver = resolver
        self.locator = locator
        self.decisions = decisions
        self.streamer = streamer
        self.audit_logger = audit_logger or AuditLogger()
        self.document_root = document_root
        self.denied_redirect_url = denied_redirect_url
        self.denied_title = denied_title
        self.denied_message = denied_message

    def authorize(self, request: Request) -> Response:
        """Decide on and answer one file request."""
        params = StarletteRequestParams(request, document_root=self.document_root)
        context = self.resolver.resolve(
            params,
            caller=getattr(request.state, "caller", None),
            correlation_id=getattr(request.state, "correlation_id", None),
        )
        self._transition(context, PipelineState.PATH_RESOLVED)

        if self.decisions.check_uri(context) is AccessVerdict.DENY:
            return self._deny(context, None, reason="uri_restricted")

        if not context.normalized_path:
            self._transition(context, PipelineState.REJECTED)
            self.audit_logger.log_event(
                "file_rejected", "", correlation_id=context.correlation_id, reason="empty_path"
            )
            return self.streamer.forbidden()

        asset = self.locator.locate(context)
        self._transition(context, PipelineState.ASSET_LOOKUP_DONE)

        verdict = self.decisions.decide(context, asset)
        self._transition(context, PipelineState.VERDICT_OBTAINED)
        if verdict is AccessVerdict.DENY:
            return self._deny(context, asset, reason="asset_restricted")

        response = self.streamer.stream(context.physical_path)
        asset_id = asset.id if asset else None
        if response.status_code == status.HTTP_200_OK:
            self._transition(context, PipelineState.STREAMING)
            self.audit_logger.log_event(
                "file_served",
                context.normalized_path,
                asset_id,
                context.correlation_id,
            )
        else:
            self._transition(context, PipelineState.REJECTED)
            self.audit_logger.log_event(
                "file_rejected",
                context.normalized_path,
                asset_id,
                context.correlation_id,
                reason="delivery_policy",
            )
        return response

    def _deny(self, context: RequestContext, asset: Optional[MediaAsset], reason: str) -> Response:
        self._transition(context, PipelineState.REJECTED)
        self.audit_logger.log_event(
            "access_denied",
            context.normalized_path,
            asset.id if asset else None,
            context.correlation_id,
            reason=reason,
        )

        if not self.decisions.denial_redirect_enabled(DENIED_REDIRECT_FLAG):
            return Response(status_code=status.HTTP_401_UNAUTHORIZED)

        if self.denied_redirect_url:
            return RedirectResponse(self.denied_redirect_url, status_code=status.HTTP_302_FOUND)

        page = DENIED_PAGE_TEMPLATE.format(
            title=escape(self.denied_title), message=escape(self.denied_message)
        )
        return HTMLResponse(page, status_code=status.HTTP_403_FORBIDDEN)

    @staticmethod
    def _transition(context: RequestContext, state: PipelineState) -> None:
        logger.debug("[%s] %s -> %s", context.correlation_id, context.normalized_path, state.value)
