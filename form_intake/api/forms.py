from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from form_intake.core.deps import get_configuration, get_submitted_form
from form_intake.db.session import get_db
from form_intake.schemas.form_config import Configuration
from form_intake.services.pages import FAILURE_PAGE, NOT_FOUND_PAGE, SUCCESS_PAGE, render_page
from form_intake.services.sql_types import SUPPORTED_DATATYPES
from form_intake.services.submissions import submit_row

router = APIRouter()

_LOG = logging.getLogger("form_intake.forms")


@router.get("/{table_name}", response_class=HTMLResponse)
def get_form(
    table_name: str,
    request: Request,
    configuration: Configuration = Depends(get_configuration),
):
    table = configuration.get_table(table_name)
    if table is None:
        return render_page(request, NOT_FOUND_PAGE)
    _LOG.debug("Template: %s", table.template)
    return render_page(
        request,
        table.template,
        {
            "table": table_name,
            "title": table.title,
            "instructions": table.instructions,
            "fields": table.fields,
            "datatypes": SUPPORTED_DATATYPES,
        },
    )


@router.post("/{table_name}", response_class=HTMLResponse)
def post_form(
    table_name: str,
    request: Request,
    form: dict[str, str] = Depends(get_submitted_form),
    db: Session = Depends(get_db),
    configuration: Configuration = Depends(get_configuration),
):
    table = configuration.get_table(table_name)
    if table is None:
        _LOG.warning("Submission for unknown table %s", table_name)
        return render_page(request, FAILURE_PAGE)
    outcome = submit_row(db, table_name, table, form)
    return render_page(request, SUCCESS_PAGE if outcome.accepted else FAILURE_PAGE)
