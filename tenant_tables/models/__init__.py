from .enumerations import ColumnType, ErrorKind, Visibility

__all__ = ["ColumnType", "ErrorKind", "Visibility"]
