"""Who may mutate which task.

The superuser sentinel ``"admin"`` may edit anything. Everyone else may only
edit tasks whose ``assignee`` equals their display name. The comparison is
on the human-readable name, not ``assigneeId``, so renaming a team member
orphans their existing assignments.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from launchos.specs.common.errors import PermissionDeniedError
from launchos.specs.models.domain import Task

ADMIN = "admin"


def is_admin(actor: Any) -> bool:
    return isinstance(actor, str) and actor == ADMIN


def actor_name(actor: Any) -> Optional[str]:
    """Display name of an actor: the sentinel itself, a TeamMember, or a mapping."""
    if isinstance(actor, str):
        return actor
    if isinstance(actor, Mapping):
        name = actor.get("name")
    else:
        name = getattr(actor, "name", None)
    return name if isinstance(name, str) else None


def can_mutate(actor: Any, task: Task) -> bool:
    if is_admin(actor):
        return True
    if isinstance(actor, str):
        # bare strings other than the sentinel are not identities
        return False
    name = actor_name(actor)
    return bool(name) and name == task.assignee


def ensure_can_mutate(actor: Any, task: Task) -> None:
    if not can_mutate(actor, task):
        raise PermissionDeniedError(
            actor_name(actor) or "<anonymous>",
            task.id,
            details={"assignee": task.assignee},
        )


__all__ = ["ADMIN", "is_admin", "actor_name", "can_mutate", "ensure_can_mutate"]
