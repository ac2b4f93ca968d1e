"""Result and error types returned by every table operation.

Table operations never raise across the table boundary. They hand back a
``Result`` carrying either the value or a structured ``TableError`` so callers
decide whether to log, surface or ``unwrap()`` it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

from tenant_tables.models.enumerations import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class TableError:
    """What went wrong, with ``context`` naming the table and offending fields."""

    kind: ErrorKind
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "context": dict(self.context),
        }


class TableOperationError(Exception):
    """Raised by ``Result.unwrap()`` when the result holds an error."""

    def __init__(self, error: TableError) -> None:
        super().__init__(f"{error.kind.value}: {error.message}")
        self.error = error


class IdentityGenerationError(RuntimeError):
    """The random source could not produce a new identifier."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a ``value`` or an ``error``, never both."""

    value: Optional[T] = None
    error: Optional[TableError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **context: Any) -> "Result[T]":
        """Build a failed result; keyword arguments become ``error.context``."""
        return cls(error=TableError(kind=kind, message=message, context=context))

    @classmethod
    def from_error(cls, error: TableError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising ``TableOperationError`` if this is a failure."""
        if self.error is not None:
            raise TableOperationError(self.error)
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class RowTable:
    """Ordered rows as returned by a multi-row select."""

    columns: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for row in self.rows:
            yield dict(zip(self.columns, row))

    def records(self) -> List[Dict[str, Any]]:
        return list(iter(self))

    def column(self, name: str) -> List[Any]:
        index = self.columns.index(name)
        return [row[index] for row in self.rows]

    @classmethod
    def from_mappings(cls, columns: Sequence[str], mappings: Sequence[Dict[str, Any]]) -> "RowTable":
        ordered = tuple(columns)
        return cls(
            columns=ordered,
            rows=tuple(tuple(mapping.get(name) for name in ordered) for mapping in mappings),
        )
