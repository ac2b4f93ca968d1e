"""
Tenant-scoped table.

Rows carry ``id``, ``project_id``, ``owner_id`` and ``visibility`` in front of
the table's own columns.  Every read and write of a non-admin caller is
restricted to the caller's owner/project pair by appending equality
conditions before the statement reaches the driver.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from flask import current_app

from tenant_tables.extensions import db
from tenant_tables.models.enumerations import ErrorKind, Visibility
from tenant_tables.utils.logging_utils import get_logger, log_context

from .columns import ID_COLUMN, OWNER_COLUMN, PROJECT_COLUMN, VISIBILITY_COLUMN, ColumnSpec, tenant_schema
from .driver import SqlTableDriver, not_a_mapping
from .identity import generate_id
from .results import Result, RowTable
from .scoping import AccessScope, ConditionError, ScopeError, scope_for

logger = get_logger("tables")

# columns a non-admin caller can never set through update
PROTECTED_COLUMNS = (ID_COLUMN, OWNER_COLUMN, PROJECT_COLUMN)


def _default_visibility() -> str:
    try:
        return current_app.config.get("TABLES_DEFAULT_VISIBILITY", Visibility.PRIVATE.value)
    except RuntimeError:
        return Visibility.PRIVATE.value


def _strip_hidden(row: Dict[str, Any], driver: SqlTableDriver, show_hidden: bool) -> Dict[str, Any]:
    visible = {spec.name for spec in driver.schema.visible_columns(show_hidden)}
    return {key: value for key, value in row.items() if key in visible}


class TenantTable:
    """Table whose rows belong to one owner inside one project."""

    def __init__(self, name: str, extra_columns: Iterable[ColumnSpec] = (), database=db) -> None:
        self.driver = SqlTableDriver(tenant_schema(name, extra_columns), database=database)

    @property
    def schema(self):
        return self.driver.schema

    @property
    def name(self) -> str:
        return self.driver.name

    def create(self) -> Result[None]:
        return self.driver.create()

    def _scoped(self, conditions: Optional[Iterable[Any]], scope: AccessScope, action: str) -> Result:
        try:
            return Result.success(scope_for(conditions, scope))
        except ScopeError as exc:
            logger.warning("Refused unscoped %s on %s", action, self.name)
            return Result.failure(ErrorKind.VALIDATION, str(exc), table=self.name, action=action)
        except ConditionError as exc:
            logger.warning("Rejected conditions for %s on %s: %s", action, self.name, exc)
            return Result.failure(ErrorKind.VALIDATION, str(exc), table=self.name, action=action)

    def add(self, values: Mapping[str, Any], scope: AccessScope) -> Result[Dict[str, Any]]:
        """
        Insert a new row with a freshly generated ``id``.

        Owner and project come from ``scope`` and replace whatever the caller
        put into ``values``.  Only an admin scope may leave them to the row
        itself.  A row left without both is rejected.
        """

        if not isinstance(values, Mapping):
            return not_a_mapping(self.name, values)
        if not scope.is_admin and not scope.has_tenant:
            return Result.failure(
                ErrorKind.VALIDATION,
                "owner_id and project_id are required for non-admin access",
                table=self.name,
                action="add",
            )
        row = dict(values)
        row[ID_COLUMN] = generate_id()
        if scope.owner_id:
            row[OWNER_COLUMN] = scope.owner_id
        if scope.project_id:
            row[PROJECT_COLUMN] = scope.project_id
        if not row.get(OWNER_COLUMN) or not row.get(PROJECT_COLUMN):
            return Result.failure(
                ErrorKind.VALIDATION,
                "owner_id and project_id are required",
                table=self.name,
                action="add",
            )
        if row.get(VISIBILITY_COLUMN) is None:
            row[VISIBILITY_COLUMN] = _default_visibility()

        with log_context(table=self.name, owner_id=row[OWNER_COLUMN], project_id=row[PROJECT_COLUMN]):
            inserted = self.driver.insert(row)
            if not inserted.ok:
                return inserted
            logger.info("add complete table=%s id=%s", self.name, row[ID_COLUMN])
            return Result.success(_strip_hidden(inserted.value, self.driver, scope.show_hidden))

    def get(self, conditions: Iterable[Any], scope: AccessScope) -> Result[Optional[Dict[str, Any]]]:
        scoped = self._scoped(conditions, scope, "get")
        if not scoped.ok:
            return scoped
        return self.driver.select_one(scoped.value, show_hidden=scope.show_hidden)

    def get_all(
        self,
        conditions: Optional[Iterable[Any]] = None,
        scope: Optional[AccessScope] = None,
    ) -> Result[RowTable]:
        scope = scope or AccessScope()
        scoped = self._scoped(conditions, scope, "get_all")
        if not scoped.ok:
            return scoped
        return self.driver.select_all(scoped.value, show_hidden=scope.show_hidden)

    def update(self, values: Mapping[str, Any], conditions: Iterable[Any], scope: AccessScope) -> Result[int]:
        """Change matching rows inside the caller's tenant; returns the row count."""
        if not isinstance(values, Mapping):
            return not_a_mapping(self.name, values)
        if not scope.is_admin:
            protected = sorted(key for key in values if key in PROTECTED_COLUMNS)
            if protected:
                return Result.failure(
                    ErrorKind.VALIDATION,
                    f"column(s) cannot be changed: {', '.join(protected)}",
                    table=self.name,
                    columns=protected,
                )
        scoped = self._scoped(conditions, scope, "update")
        if not scoped.ok:
            return scoped
        return self.driver.update(scoped.value, values)

    def delete(self, conditions: Iterable[Any], scope: AccessScope) -> Result[int]:
        scoped = self._scoped(conditions, scope, "delete")
        if not scoped.ok:
            return scoped
        return self.driver.delete(scoped.value)
