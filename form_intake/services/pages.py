from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError
from starlette.responses import Response

_LOG = logging.getLogger("form_intake.pages")

NOT_FOUND_PAGE = "404.html"
SUCCESS_PAGE = "200.html"
FAILURE_PAGE = "500.html"


def build_templates(directory: str) -> Jinja2Templates:
    return Jinja2Templates(directory=directory)


def render_page(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    status_code: int = 200,
) -> Response:
    templates: Jinja2Templates = request.app.state.templates
    try:
        return templates.TemplateResponse(request, template_name, context or {}, status_code=status_code)
    except TemplateError as exc:
        _LOG.error("Cannot render %s: %s", template_name, exc)
        raise HTTPException(status_code=500, detail="Template error") from exc
