from enum import Enum
# enums.py


class Visibility(str, Enum):
    PRIVATE = 'private'
    SHARED = 'shared'
    PUBLIC = 'public'


class ColumnType(str, Enum):
    STRING = 'string'
    INTEGER = 'integer'
    FLOAT = 'float'
    BOOLEAN = 'boolean'


class ErrorKind(str, Enum):
    VALIDATION = 'validation'
    DELEGATION = 'delegation'
