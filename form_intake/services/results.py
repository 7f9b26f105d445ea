from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from form_intake.schemas.form_config import TableDescriptor

_LOG = logging.getLogger("form_intake.results")


def fetch_rows(db: Session, table_name: str, table: TableDescriptor, *, limit: int, offset: int = 0) -> list[list[str]]:
    sql = table.build_select_statement(table_name, limit, offset)
    _LOG.debug("Results query: %s", sql)
    result = db.execute(text(sql))
    return [table.decode_row(row) for row in result.mappings()]
