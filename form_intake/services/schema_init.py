from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from form_intake.schemas.form_config import Configuration

_LOG = logging.getLogger("form_intake.schema")


class SchemaInitError(Exception):
    pass


def initialize_schema(engine: Engine, configuration: Configuration) -> list[str]:
    created: list[str] = []
    for table_name, table in configuration.tables.items():
        sql = table.build_create_statement(table_name)
        _LOG.debug("Sql creation query: %s", sql)
        try:
            with engine.begin() as conn:
                conn.execute(text(sql))
        except SQLAlchemyError as exc:
            raise SchemaInitError(f'Cannot create table "{table_name}": {exc}') from exc
        created.append(table_name)
    _LOG.info("Schema ready for %s table(s): %s", len(created), ", ".join(created))
    return created


def drop_schema(engine: Engine, configuration: Configuration) -> list[str]:
    dropped: list[str] = []
    for table_name, table in configuration.tables.items():
        sql = table.build_drop_statement(table_name)
        _LOG.debug("Sql drop query: %s", sql)
        with engine.begin() as conn:
            conn.execute(text(sql))
        dropped.append(table_name)
    return dropped
