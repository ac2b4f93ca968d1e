"""Caller context and the owner/project filter injected into every tenant query."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, NamedTuple, Optional

from .columns import OWNER_COLUMN, PROJECT_COLUMN


class Condition(NamedTuple):
    """Equality filter ``column == value``; a ``None`` value matches NULL."""

    column: str
    value: Any


class ScopeError(ValueError):
    """A non-admin request lacks the owner or project needed to scope it."""


class ConditionError(ValueError):
    """A filter is not a ``Condition`` or a ``(column, value)`` pair."""


@dataclass(frozen=True)
class AccessScope:
    """Who is calling and what they may see."""

    owner_id: Optional[str] = None
    project_id: Optional[str] = None
    is_admin: bool = False
    show_hidden: bool = False

    @property
    def has_tenant(self) -> bool:
        return bool(self.owner_id) and bool(self.project_id)

    @classmethod
    def admin(cls, owner_id: Optional[str] = None, project_id: Optional[str] = None, show_hidden: bool = False) -> "AccessScope":
        return cls(owner_id=owner_id, project_id=project_id, is_admin=True, show_hidden=show_hidden)


def _as_condition(item: Any) -> Condition:
    if isinstance(item, Condition):
        return item
    if isinstance(item, (str, bytes)):
        raise ConditionError(f"condition must be a (column, value) pair, got {item!r}")
    try:
        column, value = item
    except (TypeError, ValueError) as exc:
        raise ConditionError(f"condition must be a (column, value) pair, got {item!r}") from exc
    if not isinstance(column, str):
        raise ConditionError(f"condition column must be a string, got {column!r}")
    return Condition(column, value)


def as_conditions(conditions: Optional[Iterable[Any]]) -> List[Condition]:
    """
    Accept ``Condition`` objects or plain ``(column, value)`` pairs.

    Raises ``ConditionError`` for anything else, including a bare string or a
    non-iterable in place of the list.
    """
    if conditions is None:
        return []
    if isinstance(conditions, (str, bytes)):
        raise ConditionError(f"conditions must be a list of (column, value) pairs, got {conditions!r}")
    try:
        items = list(conditions)
    except TypeError as exc:
        raise ConditionError(f"conditions must be a list of (column, value) pairs, got {conditions!r}") from exc
    return [_as_condition(item) for item in items]


def scope_conditions(
    conditions: Optional[Iterable[Any]],
    owner_id: Optional[str],
    project_id: Optional[str],
    is_admin: bool,
) -> List[Condition]:
    """
    Return a new condition list restricted to one tenant.

    Admins get the caller's conditions back unchanged.  Everyone else gets
    ``owner_id`` and ``project_id`` equality conditions appended, so a caller
    condition naming another owner can only narrow the result to nothing.

    Raises ``ScopeError`` when a non-admin call has no owner or project.
    """
    scoped = as_conditions(conditions)
    if is_admin:
        return scoped
    if not owner_id or not project_id:
        raise ScopeError("owner_id and project_id are required for non-admin access")
    scoped.append(Condition(OWNER_COLUMN, owner_id))
    scoped.append(Condition(PROJECT_COLUMN, project_id))
    return scoped


def scope_for(conditions: Optional[Iterable[Any]], scope: AccessScope) -> List[Condition]:
    return scope_conditions(conditions, scope.owner_id, scope.project_id, scope.is_admin)
