from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from form_intake.services.sql_types import to_storage_type

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")
# First path segments already taken by the service itself.
RESERVED_TABLE_NAMES = {"static", "results", "health"}
LOG_LEVELS = {"trace", "debug", "info", "warning", "warn", "error", "critical"}


def _require_identifier(value: str, kind: str) -> str:
    if not IDENTIFIER_RE.fullmatch(value or ""):
        raise ValueError(f'{kind} "{value}" is not a valid SQL identifier (letters, digits, underscore)')
    return value


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    datatype: str = "text"
    label: str = ""
    placeholder: str = ""
    required: bool = False
    unique: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _require_identifier(value, "Field name")

    @property
    def storage_type(self) -> str:
        return to_storage_type(self.datatype)

    def column_definition(self) -> str:
        parts = [self.name, self.storage_type]
        if self.required:
            parts.append("NOT NULL")
        if self.unique:
            parts.append("UNIQUE")
        return " ".join(parts)


class TableDescriptor(BaseModel):
    """One configured form and the table that stores its submissions.

    Field order is the column order of the created table and the binding
    order of inserts, so reordering fields breaks existing databases.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    template: str
    title: str
    instructions: str = ""
    results_template: str = "results.html"
    fields: tuple[FieldDescriptor, ...] = Field(min_length=1)

    @field_validator("fields")
    @classmethod
    def _check_unique_field_names(cls, value: tuple[FieldDescriptor, ...]) -> tuple[FieldDescriptor, ...]:
        seen: set[str] = set()
        for field in value:
            key = field.name.lower()
            if key in seen:
                raise ValueError(f'Duplicate field name "{field.name}"')
            seen.add(key)
        return value

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    def build_create_statement(self, table_name: str) -> str:
        columns = ",\n  ".join(field.column_definition() for field in self.fields)
        return f"CREATE TABLE IF NOT EXISTS {table_name} (\n  {columns}\n)"

    def build_insert_statement(self, table_name: str) -> str:
        columns = ", ".join(self.field_names)
        params = ", ".join(f":p{index}" for index in range(1, len(self.fields) + 1))
        return f"INSERT INTO {table_name} ({columns}) VALUES ({params})"

    def build_select_statement(self, table_name: str, limit: int, offset: int = 0) -> str:
        return f"SELECT * FROM {table_name} LIMIT {int(limit)} OFFSET {int(offset)}"

    def build_drop_statement(self, table_name: str) -> str:
        return f"DROP TABLE IF EXISTS {table_name}"

    def bind_values(self, form: Mapping[str, Any]) -> dict[str, str]:
        values: dict[str, str] = {}
        for index, field in enumerate(self.fields, start=1):
            value = form.get(field.name)
            values[f"p{index}"] = value if isinstance(value, str) else ""
        return values

    def decode_row(self, row: Mapping[str, Any]) -> list[str]:
        return [_cell_text(row, field.name) for field in self.fields]


def _cell_text(row: Mapping[str, Any], column: str) -> str:
    try:
        value = row[column]
    except (KeyError, IndexError):
        return ""
    if value is None:
        return ""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return ""
    return str(value)


class Configuration(BaseModel):
    """Service registry: settings plus every configured table, read-only after load."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    log_level: str = "info"
    db_url: str
    port: int = 8080
    username: str
    password: str
    tables: dict[str, TableDescriptor] = Field(min_length=1)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = str(value or "").strip().lower()
        if normalized not in LOG_LEVELS:
            raise ValueError(f'Unknown log level "{value}"')
        return normalized

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"Port {value} is out of range")
        return value

    @model_validator(mode="after")
    def _check_table_names(self) -> "Configuration":
        seen: dict[str, str] = {}
        for name in self.tables:
            _require_identifier(name, "Table name")
            key = name.lower()
            if key in RESERVED_TABLE_NAMES:
                raise ValueError(f'Table name "{name}" collides with a service route')
            if key in seen:
                raise ValueError(f'Table names "{seen[key]}" and "{name}" differ only in case')
            seen[key] = name
        return self

    def get_table(self, table_name: str) -> TableDescriptor | None:
        return self.tables.get(table_name)

    @property
    def sqlalchemy_url(self) -> str:
        """SQLAlchemy URL for ``db_url``.

        Bare paths and sqlx style ``sqlite:`` URLs (``sqlite::memory:``,
        ``sqlite://forms.db``, ``sqlite:///abs/forms.db``) become pysqlite
        URLs. Anything with a driver already named is used as-is.
        """
        url = self.db_url.strip()
        if url.startswith("sqlite:"):
            path = url[len("sqlite:"):]
            if path.startswith("//"):
                path = path[2:]
            path = path.split("?", 1)[0]
            if path in ("", ":memory:"):
                return "sqlite+pysqlite:///:memory:"
            return f"sqlite+pysqlite:///{path}"
        if "://" not in url:
            return f"sqlite+pysqlite:///{url}"
        return url
