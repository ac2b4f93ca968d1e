from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from marshmallow import Schema, fields, validate

from tenant_tables.extensions import ma
from tenant_tables.models.enumerations import ColumnType

if TYPE_CHECKING:
    from tenant_tables.tables.columns import ColumnSpec, TableSchema

_FIELD_TYPES = {
    ColumnType.STRING: fields.String,
    ColumnType.INTEGER: fields.Integer,
    ColumnType.FLOAT: fields.Float,
    ColumnType.BOOLEAN: fields.Boolean,
}


def _build_field(column: ColumnSpec) -> fields.Field:
    validators = []
    if column.max_length is not None and column.type == ColumnType.STRING:
        validators.append(validate.Length(max=column.max_length))
    if column.choices:
        validators.append(validate.OneOf(column.choices))

    kwargs = {"validate": validators, "allow_none": not column.required}
    if column.type == ColumnType.INTEGER:
        kwargs["strict"] = True
    if column.default is not None:
        kwargs["load_default"] = column.default
    else:
        kwargs["required"] = column.required
    return _FIELD_TYPES[column.type](**kwargs)


def build_row_schema(table_schema: TableSchema) -> Type[Schema]:
    """Derive the marshmallow schema that validates rows for ``table_schema``."""

    declared: Dict[str, fields.Field] = {
        column.name: _build_field(column) for column in table_schema.columns
    }
    class_name = "".join(part.capitalize() for part in table_schema.name.split("_")) + "RowSchema"
    return ma.Schema.from_dict(declared, name=class_name)
