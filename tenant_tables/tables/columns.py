"""Column descriptors and the immutable per-table schemas built from them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from tenant_tables.models.enumerations import ColumnType, Visibility

from .identity import ID_LENGTH

OWNER_COLUMN = "owner_id"
PROJECT_COLUMN = "project_id"
ID_COLUMN = "id"
VISIBILITY_COLUMN = "visibility"
TIMESTAMP_COLUMN = "timestamp"
CREATOR_COLUMN = "creator_id"

TENANT_COLUMNS = (OWNER_COLUMN, PROJECT_COLUMN)

_IDENTIFIER_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")


def validate_identifier(name: str) -> bool:
    """Non-empty, at most 63 chars, letters/digits/underscores, no leading digit."""
    if not isinstance(name, str) or len(name) == 0 or len(name) > 63:
        return False
    return bool(_IDENTIFIER_RE.fullmatch(name))


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    max_length: Optional[int] = None
    is_primary: bool = False
    type: ColumnType = ColumnType.STRING
    hidden: bool = False
    nullable: bool = True
    choices: Tuple[Any, ...] = ()
    default: Any = None

    def __post_init__(self) -> None:
        if not validate_identifier(self.name):
            raise ValueError(f"Invalid column name: {self.name!r}")
        if self.max_length is not None and self.max_length <= 0:
            raise ValueError(f"max_length must be positive for column {self.name!r}")

    @property
    def required(self) -> bool:
        return self.is_primary or not self.nullable


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: Tuple[ColumnSpec, ...]

    def __post_init__(self) -> None:
        if not validate_identifier(self.name):
            raise ValueError(f"Invalid table name: {self.name!r}")
        seen = set()
        for column in self.columns:
            if column.name in seen:
                raise ValueError(f"Duplicate column {column.name!r} in table {self.name!r}")
            seen.add(column.name)
        # accept lists from callers
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def primary_key(self) -> Optional[str]:
        for column in self.columns:
            if column.is_primary:
                return column.name
        return None

    def has_column(self, name: str) -> bool:
        return name in self.column_names

    def column(self, name: str) -> ColumnSpec:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def visible_columns(self, show_hidden: bool = False) -> Tuple[ColumnSpec, ...]:
        if show_hidden:
            return self.columns
        return tuple(column for column in self.columns if not column.hidden)

    def extend(self, extra_columns: Iterable[ColumnSpec]) -> "TableSchema":
        return TableSchema(self.name, self.columns + tuple(extra_columns))


def tenant_schema(name: str, extra_columns: Iterable[ColumnSpec] = ()) -> TableSchema:
    """Tenant-resource table: id, project, owner and visibility, then extras."""

    base = TableSchema(
        name,
        (
            ColumnSpec(ID_COLUMN, max_length=ID_LENGTH, is_primary=True),
            ColumnSpec(PROJECT_COLUMN, max_length=128, nullable=False),
            ColumnSpec(OWNER_COLUMN, max_length=128, nullable=False),
            ColumnSpec(
                VISIBILITY_COLUMN,
                max_length=10,
                nullable=False,
                choices=tuple(v.value for v in Visibility),
                default=Visibility.PRIVATE.value,
            ),
        ),
    )
    return base.extend(extra_columns)


def admin_schema(name: str, extra_columns: Iterable[ColumnSpec] = ()) -> TableSchema:
    base = TableSchema(
        name,
        (
            ColumnSpec(ID_COLUMN, max_length=ID_LENGTH, is_primary=True),
            ColumnSpec("name", max_length=36),
            ColumnSpec(CREATOR_COLUMN, max_length=128),
        ),
    )
    return base.extend(extra_columns)


def log_schema(name: str, extra_columns: Iterable[ColumnSpec] = ()) -> TableSchema:
    base = TableSchema(name, (ColumnSpec(TIMESTAMP_COLUMN, max_length=128, nullable=False),))
    return base.extend(extra_columns)
