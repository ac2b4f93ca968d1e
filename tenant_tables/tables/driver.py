"""
Generic relational table driver.

A ``SqlTableDriver`` turns an immutable ``TableSchema`` into a SQLAlchemy Core
table registered on the shared metadata and runs insert/select/update/delete
statements filtered by equality conditions.  Specific table types hold a
driver instead of inheriting from it.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from marshmallow import ValidationError
from sqlalchemy import Boolean, Column, Float, Integer, String, Table, Text, and_, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from tenant_tables.extensions import db
from tenant_tables.models.enumerations import ColumnType, ErrorKind
from tenant_tables.schemas.row_schema import build_row_schema
from tenant_tables.utils.logging_utils import get_logger, log_context

from .columns import ColumnSpec, TableSchema
from .results import Result, RowTable
from .scoping import Condition, ConditionError, as_conditions

_SENSITIVE_TOKENS = ("password", "secret", "token", "key", "credential")


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def _sanitize_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        lower = key.lower()
        if any(token in lower for token in _SENSITIVE_TOKENS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = _serialize_value(value)
    return sanitized


def _describe(conditions: Sequence[Condition]) -> List[str]:
    return [f"{c.column}={_serialize_value(c.value)}" for c in conditions]


def _sql_type(column: ColumnSpec):
    if column.type == ColumnType.INTEGER:
        return Integer()
    if column.type == ColumnType.FLOAT:
        return Float()
    if column.type == ColumnType.BOOLEAN:
        return Boolean()
    if column.max_length is None:
        return Text()
    return String(column.max_length)


def _error_detail(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


def not_a_mapping(table: str, values: Any) -> Result:
    """Validation failure for a row that is not a ``Mapping``."""
    return Result.failure(
        ErrorKind.VALIDATION,
        f"row for table '{table}' must be a mapping of column names to values, got {type(values).__name__}",
        table=table,
    )


def _column_signature(column: Column) -> Tuple[Any, ...]:
    return (
        column.name,
        type(column.type).__name__,
        getattr(column.type, "length", None),
        column.primary_key,
        column.nullable,
    )


class SqlTableDriver:
    """
    Run equality-filtered statements against one table described by ``schema``.

    The Core ``Table`` is registered on ``database.metadata``.  A second driver
    for the same name reuses that ``Table`` only when it declares exactly the
    same columns; a different column set is a programming error and raises
    ``ValueError`` so one instance can never reshape another's table.
    """

    def __init__(self, schema: TableSchema, database=db) -> None:
        self.schema = schema
        self._db = database
        self._row_schema = build_row_schema(schema)()
        self.table = self._bind_table(schema, database.metadata)

    @staticmethod
    def _bind_table(schema: TableSchema, metadata) -> Table:
        columns = [
            Column(
                spec.name,
                _sql_type(spec),
                primary_key=spec.is_primary,
                nullable=not spec.required,
            )
            for spec in schema.columns
        ]
        existing = metadata.tables.get(schema.name)
        if existing is None:
            return Table(schema.name, metadata, *columns)
        wanted = [_column_signature(column) for column in columns]
        registered = [_column_signature(column) for column in existing.columns]
        if wanted != registered:
            raise ValueError(
                f"table '{schema.name}' is already registered with columns "
                f"{[c.name for c in existing.columns]}, not {list(schema.column_names)}"
            )
        return existing

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def logger(self):
        return get_logger("tables")

    # ------------------------------------------------------------------
    # validation
    # ------------------------------------------------------------------
    def validate_row(self, values: Mapping[str, Any], partial: bool = False) -> Result[Dict[str, Any]]:
        """Load ``values`` through the table's marshmallow row schema."""
        if not isinstance(values, Mapping):
            return not_a_mapping(self.name, values)
        try:
            loaded = self._row_schema.load(values, partial=partial)
        except ValidationError as exc:
            self.logger.warning(
                "Rejected row for %s errors=%s",
                self.name,
                exc.messages,
            )
            return Result.failure(
                ErrorKind.VALIDATION,
                f"invalid row for table '{self.name}'",
                table=self.name,
                fields=exc.messages,
            )
        return Result.success(loaded)

    def validate_conditions(self, conditions: Optional[Iterable[Any]]) -> Result[List[Condition]]:
        """Normalize ``conditions`` and reject columns this table does not have."""
        try:
            normalized = as_conditions(conditions)
        except ConditionError as exc:
            self.logger.warning("Rejected conditions for %s: %s", self.name, exc)
            return Result.failure(ErrorKind.VALIDATION, str(exc), table=self.name)
        unknown = [c.column for c in normalized if not self.schema.has_column(c.column)]
        if unknown:
            return Result.failure(
                ErrorKind.VALIDATION,
                f"unknown column(s) for table '{self.name}': {', '.join(unknown)}",
                table=self.name,
                columns=unknown,
            )
        return Result.success(normalized)

    def _where(self, statement, conditions: Sequence[Condition]):
        if not conditions:
            return statement
        return statement.where(and_(*[self.table.c[c.column] == c.value for c in conditions]))

    def _delegation_failure(self, action: str, exc: SQLAlchemyError) -> Result:
        self._db.session.rollback()
        self.logger.exception("Failed to %s on %s", action, self.name)
        return Result.failure(
            ErrorKind.DELEGATION,
            f"{action} failed for table '{self.name}'",
            table=self.name,
            detail=_error_detail(exc),
        )

    # ------------------------------------------------------------------
    # statements
    # ------------------------------------------------------------------
    def create(self) -> Result[None]:
        """Create the backing table if it does not exist yet."""
        with log_context(table=self.name, action="create"):
            try:
                self.table.create(bind=self._db.engine, checkfirst=True)
            except SQLAlchemyError as exc:
                self.logger.exception("Failed to create table %s", self.name)
                return Result.failure(
                    ErrorKind.DELEGATION,
                    f"create failed for table '{self.name}'",
                    table=self.name,
                    detail=_error_detail(exc),
                )
            self.logger.info("Ensured table %s columns=%s", self.name, list(self.schema.column_names))
            return Result.success(None)

    def insert(self, row: Dict[str, Any]) -> Result[Dict[str, Any]]:
        """Validate and insert one row, returning the stored values."""
        with log_context(table=self.name, action="insert"):
            validated = self.validate_row(row)
            if not validated.ok:
                return validated
            values = validated.value
            self.logger.info("Inserting into %s row=%s", self.name, _sanitize_payload(values))
            try:
                self._db.session.execute(insert(self.table).values(**values))
                self._db.session.commit()
            except SQLAlchemyError as exc:
                return self._delegation_failure("insert", exc)
            self.logger.info("Inserted into %s", self.name)
            return Result.success(dict(values))

    def select_one(
        self,
        conditions: Iterable[Any],
        show_hidden: bool = False,
    ) -> Result[Optional[Dict[str, Any]]]:
        """First row matching every condition, or ``None``."""
        with log_context(table=self.name, action="select_one"):
            checked = self.validate_conditions(conditions)
            if not checked.ok:
                return checked
            columns = [self.table.c[spec.name] for spec in self.schema.visible_columns(show_hidden)]
            statement = self._where(select(*columns), checked.value).limit(1)
            self.logger.info(
                "Selecting one from %s conditions=%s show_hidden=%s",
                self.name,
                _describe(checked.value),
                show_hidden,
            )
            try:
                row = self._db.session.execute(statement).mappings().first()
            except SQLAlchemyError as exc:
                return self._delegation_failure("select", exc)
            self.logger.info("Selected from %s found=%s", self.name, row is not None)
            return Result.success(dict(row) if row is not None else None)

    def select_all(
        self,
        conditions: Optional[Iterable[Any]] = None,
        show_hidden: bool = False,
    ) -> Result[RowTable]:
        with log_context(table=self.name, action="select_all"):
            checked = self.validate_conditions(conditions or [])
            if not checked.ok:
                return checked
            specs = self.schema.visible_columns(show_hidden)
            statement = self._where(select(*[self.table.c[spec.name] for spec in specs]), checked.value)
            self.logger.info(
                "Selecting all from %s conditions=%s show_hidden=%s",
                self.name,
                _describe(checked.value),
                show_hidden,
            )
            try:
                rows = self._db.session.execute(statement).mappings().all()
            except SQLAlchemyError as exc:
                return self._delegation_failure("select", exc)
            self.logger.info("Selected from %s count=%s", self.name, len(rows))
            return Result.success(RowTable.from_mappings([spec.name for spec in specs], rows))

    def update(self, conditions: Iterable[Any], values: Mapping[str, Any]) -> Result[int]:
        with log_context(table=self.name, action="update"):
            if not isinstance(values, Mapping):
                return not_a_mapping(self.name, values)
            if not values:
                return Result.failure(ErrorKind.VALIDATION, "no values to update", table=self.name)
            checked = self.validate_conditions(conditions)
            if not checked.ok:
                return checked
            validated = self.validate_row(values, partial=True)
            if not validated.ok:
                return validated
            # only the columns the caller sent
            changes = {key: value for key, value in validated.value.items() if key in values}
            self.logger.info(
                "Updating %s conditions=%s values=%s",
                self.name,
                _describe(checked.value),
                _sanitize_payload(changes),
            )
            try:
                result = self._db.session.execute(
                    self._where(update(self.table), checked.value).values(**changes)
                )
                self._db.session.commit()
            except SQLAlchemyError as exc:
                return self._delegation_failure("update", exc)
            self.logger.info("Updated %s count=%s", self.name, result.rowcount)
            return Result.success(result.rowcount)

    def delete(self, conditions: Iterable[Any]) -> Result[int]:
        """Delete matching rows and return how many were removed."""
        with log_context(table=self.name, action="delete"):
            checked = self.validate_conditions(conditions)
            if not checked.ok:
                return checked
            self.logger.info("Deleting from %s conditions=%s", self.name, _describe(checked.value))
            try:
                result = self._db.session.execute(self._where(delete(self.table), checked.value))
                self._db.session.commit()
            except SQLAlchemyError as exc:
                return self._delegation_failure("delete", exc)
            self.logger.info("Deleted from %s count=%s", self.name, result.rowcount)
            return Result.success(result.rowcount)
