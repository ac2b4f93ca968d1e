from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

from tenant_tables.extensions import db

from .columns import TIMESTAMP_COLUMN, ColumnSpec, log_schema
from .driver import SqlTableDriver, not_a_mapping
from .results import Result, RowTable


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class LogTable:
    """Append-style table keyed by nothing but a timestamp column."""

    def __init__(self, name: str, extra_columns: Iterable[ColumnSpec] = (), database=db) -> None:
        self.driver = SqlTableDriver(log_schema(name, extra_columns), database=database)

    @property
    def schema(self):
        return self.driver.schema

    @property
    def name(self) -> str:
        return self.driver.name

    def create(self) -> Result[None]:
        return self.driver.create()

    def add(self, values: Optional[Mapping[str, Any]] = None) -> Result[Dict[str, Any]]:
        if values is None:
            values = {}
        elif not isinstance(values, Mapping):
            return not_a_mapping(self.name, values)
        row = dict(values)
        if not row.get(TIMESTAMP_COLUMN):
            row[TIMESTAMP_COLUMN] = utc_timestamp()
        return self.driver.insert(row)

    def get_all(self, conditions: Optional[Iterable[Any]] = None, show_hidden: bool = False) -> Result[RowTable]:
        return self.driver.select_all(conditions, show_hidden=show_hidden)

    def delete(self, conditions: Iterable[Any]) -> Result[int]:
        return self.driver.delete(conditions)
