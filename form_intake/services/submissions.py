from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from form_intake.schemas.form_config import TableDescriptor
from form_intake.services.store_errors import is_unique_violation

_LOG = logging.getLogger("form_intake.submissions")


class SubmissionOutcome(str, enum.Enum):
    STORED = "stored"
    DUPLICATE = "duplicate"
    FAILED = "failed"

    @property
    def accepted(self) -> bool:
        return self is not SubmissionOutcome.FAILED


def submit_row(db: Session, table_name: str, table: TableDescriptor, form: Mapping[str, Any]) -> SubmissionOutcome:
    sql = table.build_insert_statement(table_name)
    params = table.bind_values(form)
    _LOG.debug("Insert into %s: %s", table_name, sql)
    try:
        db.execute(text(sql), params)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        if is_unique_violation(exc):
            # Resubmitting an already stored value is not reported to the user.
            _LOG.info("Duplicate submission ignored for %s: %s", table_name, exc)
            return SubmissionOutcome.DUPLICATE
        _LOG.error("Cannot store submission for %s: %s", table_name, exc)
        return SubmissionOutcome.FAILED
    return SubmissionOutcome.STORED
