import logging
from typing import Dict, List, Mapping, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev-secret-please-change"
HSTS_VALUE = "max-age=31536000; includeSubDomains"

BASE_SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "same-origin",
    # API responses carry budget and audit data; never cache them.
    "Cache-Control": "no-store",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add a fixed set of response headers, plus HSTS on https requests."""

    def __init__(self, app, headers: Optional[Mapping[str, str]] = None, hsts: bool = True) -> None:
        super().__init__(app)
        self.headers = dict(BASE_SECURITY_HEADERS)
        self.headers.update(headers or {})
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        if self.hsts and request.url.scheme == "https":
            response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
        return response


def collect_security_warnings(settings) -> List[str]:
    warnings = []
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        warnings.append("JWT secret is using the insecure default; set JWT_SECRET in the environment.")
    if settings.database_url.startswith("sqlite"):
        warnings.append("SQLite does not enforce row locks; concurrent workflow transitions may fail with 409.")
    if "*" in settings.cors_origins:
        warnings.append("CORS allows any origin while credentials are enabled.")
    if not settings.workflow_enforce_sequence:
        warnings.append("Workflow sequence enforcement is disabled; any status change will be accepted.")
    return warnings


def log_security_warnings(settings) -> None:
    for message in collect_security_warnings(settings):
        logger.warning(message)
