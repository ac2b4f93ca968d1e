"""
Thin table wrappers over SQLAlchemy Core that add UUID primary keys and
owner/project scoping.  Each table type holds a ``SqlTableDriver`` configured
with its own immutable schema.
"""

from .columns import ColumnSpec, TableSchema, admin_schema, log_schema, tenant_schema
from .identity import generate_id, is_canonical_id
from .results import IdentityGenerationError, Result, RowTable, TableError, TableOperationError
from .scoping import AccessScope, Condition, ConditionError, ScopeError, scope_conditions
from .driver import SqlTableDriver
from .admin_table import AdminTable
from .log_table import LogTable
from .tenant_table import TenantTable

__all__ = [
    "AccessScope",
    "AdminTable",
    "ColumnSpec",
    "Condition",
    "ConditionError",
    "IdentityGenerationError",
    "LogTable",
    "Result",
    "RowTable",
    "ScopeError",
    "SqlTableDriver",
    "TableError",
    "TableOperationError",
    "TableSchema",
    "TenantTable",
    "admin_schema",
    "generate_id",
    "is_canonical_id",
    "log_schema",
    "scope_conditions",
    "tenant_schema",
]
