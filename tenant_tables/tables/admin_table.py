from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from tenant_tables.extensions import db
from tenant_tables.utils.logging_utils import get_logger

from .columns import CREATOR_COLUMN, ID_COLUMN, ColumnSpec, admin_schema
from .driver import SqlTableDriver, not_a_mapping
from .identity import generate_id
from .results import Result, RowTable
from .scoping import AccessScope

logger = get_logger("tables")


class AdminTable:
    """
    Reference table managed by administrators.

    Rows are not tenant scoped.  A caller-supplied ``id`` is kept; one is
    generated only when missing.
    """

    def __init__(self, name: str, extra_columns: Iterable[ColumnSpec] = (), database=db) -> None:
        self.driver = SqlTableDriver(admin_schema(name, extra_columns), database=database)

    @property
    def schema(self):
        return self.driver.schema

    @property
    def name(self) -> str:
        return self.driver.name

    def create(self) -> Result[None]:
        return self.driver.create()

    def add(self, values: Mapping[str, Any], scope: Optional[AccessScope] = None) -> Result[Dict[str, Any]]:
        if not isinstance(values, Mapping):
            return not_a_mapping(self.name, values)
        row = dict(values)
        if not row.get(ID_COLUMN):
            row[ID_COLUMN] = generate_id()
        if scope is not None and scope.owner_id:
            row[CREATOR_COLUMN] = scope.owner_id
        inserted = self.driver.insert(row)
        if inserted.ok:
            logger.info("add complete table=%s id=%s", self.name, row[ID_COLUMN])
        return inserted

    def get(self, conditions: Iterable[Any], scope: Optional[AccessScope] = None) -> Result[Optional[Dict[str, Any]]]:
        show_hidden = scope.show_hidden if scope is not None else False
        return self.driver.select_one(conditions, show_hidden=show_hidden)

    def get_all(
        self,
        conditions: Optional[Iterable[Any]] = None,
        scope: Optional[AccessScope] = None,
    ) -> Result[RowTable]:
        show_hidden = scope.show_hidden if scope is not None else False
        return self.driver.select_all(conditions, show_hidden=show_hidden)

    def update(self, values: Dict[str, Any], conditions: Iterable[Any]) -> Result[int]:
        return self.driver.update(conditions, values)

    def delete(self, conditions: Iterable[Any]) -> Result[int]:
        return self.driver.delete(conditions)
