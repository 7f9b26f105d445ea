from __future__ import annotations

import logging
import re
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_LOG = logging.getLogger("form_intake.http")

# Pages only ever post back to themselves and load assets from /static.
FORM_PAGE_CSP = "; ".join(
    [
        "default-src 'none'",
        "style-src 'self'",
        "img-src 'self'",
        "form-action 'self'",
        "frame-ancestors 'none'",
        "base-uri 'none'",
    ]
)

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}

PAGE_HEADERS = {
    "X-Frame-Options": "DENY",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Content-Security-Policy": FORM_PAGE_CSP,
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}

ROUTE_KIND_HEADERS: dict[str, dict[str, str]] = {
    "static": {"Cache-Control": "public, max-age=3600"},
    "health": {"Cache-Control": "no-store"},
    "form": PAGE_HEADERS,
    "submit": PAGE_HEADERS,
    # Collected submissions stay out of search indexes and shared caches.
    "results": {**PAGE_HEADERS, "Cache-Control": "no-store, private", "X-Robots-Tag": "noindex, nofollow"},
}


def route_kind(method: str, path: str) -> str:
    """Classify a request path into one of the service's route groups."""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "form"
    head = segments[0]
    if head in ("static", "health", "results"):
        return head
    return "submit" if method.upper() == "POST" else "form"


def resolve_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if _REQUEST_ID_RE.fullmatch(candidate):
        return candidate
    return uuid4().hex


def headers_for(kind: str) -> dict[str, str]:
    headers = dict(BASE_HEADERS)
    headers.update(ROUTE_KIND_HEADERS.get(kind, PAGE_HEADERS))
    return headers


def _log_request(request: Request, response: Response, kind: str, request_id: str, started_at: float) -> None:
    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    if kind == "static" and level == logging.INFO:
        level = logging.DEBUG
    _LOG.log(
        level,
        "route=%s method=%s path=%s status=%s elapsed=%.1fms rid=%s",
        kind,
        request.method,
        request.url.path,
        response.status_code,
        (perf_counter() - started_at) * 1000.0,
        request_id,
    )


def install_http_hardening(app: FastAPI) -> None:
    @app.middleware("http")
    async def _harden_form_responses(request: Request, call_next):
        kind = route_kind(request.method, request.url.path)
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        started_at = perf_counter()

        response = await call_next(request)

        response.headers.update(headers_for(kind))
        response.headers[REQUEST_ID_HEADER] = request_id
        _log_request(request, response, kind, request_id, started_at)
        return response
