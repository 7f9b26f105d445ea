from __future__ import annotations

BOOLEAN = "BOOLEAN"
DATE = "DATE"
DATETIME = "DATETIME"
INTEGER = "INTEGER"
REAL = "REAL"
TEXT = "TEXT"
TIME = "TIME"

# HTML input type -> column type. Existing databases were created with this
# table, so entries must not change.
DATATYPE_STORAGE_TYPES: dict[str, str] = {
    "checkbox": BOOLEAN,
    "color": TEXT,
    "date": DATE,
    "datetime-local": DATETIME,
    "email": TEXT,
    "month": INTEGER,
    "number": REAL,
    "password": TEXT,
    "radio": BOOLEAN,
    "range": INTEGER,
    "tel": TEXT,
    "text": TEXT,
    "time": TIME,
    "url": TEXT,
    "week": INTEGER,
}

SUPPORTED_DATATYPES = frozenset(DATATYPE_STORAGE_TYPES)


def to_storage_type(datatype: str | None) -> str:
    return DATATYPE_STORAGE_TYPES.get(str(datatype or ""), TEXT)
