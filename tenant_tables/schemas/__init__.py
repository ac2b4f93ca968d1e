# schemas/__init__.py

from .row_schema import build_row_schema
from .scope_schema import AccessScopeSchema

__all__ = [
    'build_row_schema',
    'AccessScopeSchema',
]
