from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from form_intake.core.config import settings
from form_intake.core.deps import get_configuration, get_results_access
from form_intake.db.session import get_db
from form_intake.schemas.form_config import Configuration
from form_intake.services.pages import FAILURE_PAGE, NOT_FOUND_PAGE, render_page
from form_intake.services.results import fetch_rows

router = APIRouter()

_LOG = logging.getLogger("form_intake.results")

DEFAULT_RESULTS_PAGE = "results.html"


@router.get("/{table_name}", response_class=HTMLResponse)
def get_results(
    table_name: str,
    request: Request,
    authorized: bool = Depends(get_results_access),
    db: Session = Depends(get_db),
    configuration: Configuration = Depends(get_configuration),
):
    if not authorized:
        _LOG.info("Results for %s requested without valid credentials", table_name)
        return render_page(request, DEFAULT_RESULTS_PAGE)
    table = configuration.get_table(table_name)
    if table is None:
        return render_page(request, NOT_FOUND_PAGE)
    try:
        rows = fetch_rows(db, table_name, table, limit=settings.RESULTS_PAGE_SIZE, offset=0)
    except SQLAlchemyError as exc:
        _LOG.error("Cannot read results for %s: %s", table_name, exc)
        return render_page(request, FAILURE_PAGE)
    return render_page(
        request,
        table.results_template,
        {
            "table": table_name,
            "title": table.title,
            "instructions": table.instructions,
            "fields": table.fields,
            "data": rows,
        },
    )
