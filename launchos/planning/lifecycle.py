"""Task lifecycle operations.

Every operation checks the permission gate before touching anything and
works on a deep copy: the plan passed in is never modified, so a denied or
invalid call leaves the caller's plan exactly as it was.

Task states: pending -> in_progress -> review -> done, plus the reopen edge
done -> pending. The dashboard only drives the done/pending toggle.
Phase status is not derived from task completion.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Set, Tuple, Union

from launchos.planning.permissions import actor_name, ensure_can_mutate
from launchos.shared.dates import utc_now
from launchos.shared.ids import generate_id
from launchos.shared.logging_utils import info as log_info, warning as log_warning
from launchos.specs.common.enums import AttachmentType, TaskStatus
from launchos.specs.common.errors import (
    InvalidTransitionError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from launchos.specs.models.domain import Attachment, Phase, Plan, Task, TaskPatch


TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.DONE},
    TaskStatus.IN_PROGRESS: {TaskStatus.REVIEW, TaskStatus.DONE},
    TaskStatus.REVIEW: {TaskStatus.DONE},
    TaskStatus.DONE: {TaskStatus.PENDING},
}


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    return current == target or target in TRANSITIONS[current]


def find_task(plan: Plan, task_id: str) -> Tuple[Phase, Task]:
    for phase, task in plan.iter_tasks():
        if task.id == task_id:
            return phase, task
    raise ResourceNotFoundError("Task", task_id, details={"planId": plan.id})


def _checkout(plan: Plan, actor: Any, task_id: str) -> Tuple[Plan, Task]:
    """Gate the actor on the task and return an editable copy of the plan."""
    _, task = find_task(plan, task_id)
    try:
        ensure_can_mutate(actor, task)
    except PermissionDeniedError:
        log_warning(plan.id, "lifecycle:permission_denied", taskId=task_id, actor=actor_name(actor))
        raise
    working = plan.model_copy(deep=True)
    _, editable = find_task(working, task_id)
    return working, editable


def _move(task: Task, target: TaskStatus) -> None:
    if not can_transition(task.status, target):
        raise InvalidTransitionError(task.status.value, target.value, details={"taskId": task.id})
    if target == task.status:
        return
    task.status = target
    task.completedAt = utc_now() if target == TaskStatus.DONE else None


def set_task_status(plan: Plan, actor: Any, task_id: str, status: Union[TaskStatus, str]) -> Plan:
    working, task = _checkout(plan, actor, task_id)
    _move(task, TaskStatus(status))
    log_info(plan.id, "lifecycle:status", taskId=task_id, status=task.status.value)
    return working


def toggle_task_status(plan: Plan, actor: Any, task_id: str) -> Plan:
    """Mark a task done, or reopen it to pending if it already is."""
    _, task = find_task(plan, task_id)
    target = TaskStatus.PENDING if task.status == TaskStatus.DONE else TaskStatus.DONE
    return set_task_status(plan, actor, task_id, target)


def update_observations(plan: Plan, actor: Any, task_id: str, observations: str) -> Plan:
    working, task = _checkout(plan, actor, task_id)
    task.observations = observations
    return working


def _link_url(url: str) -> str:
    url = url.strip()
    if not url.startswith("http"):
        url = "https://" + url
    return url


def add_attachment(
    plan: Plan,
    actor: Any,
    task_id: str,
    *,
    name: str,
    url: str,
    type: Union[AttachmentType, str] = AttachmentType.LINK,
    size: Optional[str] = None,
) -> Plan:
    """Append an attachment with a fresh id and upload timestamp.

    Link URLs without a scheme get ``https://``; reachability is not checked.
    """
    working, task = _checkout(plan, actor, task_id)
    kind = AttachmentType(type)
    attachment = Attachment(
        id=generate_id(),
        name=name.strip(),
        url=_link_url(url) if kind == AttachmentType.LINK else url,
        type=kind,
        size=size,
        uploadedAt=utc_now(),
    )
    task.attachments.append(attachment)
    log_info(plan.id, "lifecycle:attachment_added", taskId=task_id, attachmentId=attachment.id)
    return working


def remove_attachment(plan: Plan, actor: Any, task_id: str, attachment_id: str) -> Plan:
    """Remove an attachment by id. Removing an unknown id changes nothing."""
    working, task = _checkout(plan, actor, task_id)
    task.attachments = [a for a in task.attachments if a.id != attachment_id]
    return working


def _patched_attachments(task: Task, attachments: List[Attachment]) -> List[Attachment]:
    """Copy patched attachments, keeping only ids the task already owns."""
    owned = {a.id for a in task.attachments}
    used: Set[str] = set()
    result = []
    for att in attachments:
        item = att.model_copy(deep=True)
        if item.id not in owned or item.id in used:
            item.id = generate_id()
        used.add(item.id)
        result.append(item)
    return result


def apply_task_patch(plan: Plan, actor: Any, task_id: str, patch: TaskPatch) -> Plan:
    working, task = _checkout(plan, actor, task_id)
    if patch.status is not None:
        _move(task, patch.status)
    if patch.observations is not None:
        task.observations = patch.observations
    if patch.comments is not None:
        task.comments = list(patch.comments)
    if patch.attachments is not None:
        task.attachments = _patched_attachments(task, patch.attachments)
    log_info(plan.id, "lifecycle:patched", taskId=task_id, fields=sorted(patch.changes()))
    return working


@dataclass(frozen=True)
class Progress:
    done: int
    total: int

    @property
    def percent(self) -> int:
        if not self.total:
            return 0
        return math.floor(self.done * 100 / self.total + 0.5)


def phase_progress(phase: Phase) -> Progress:
    done = sum(1 for t in phase.tasks if t.status == TaskStatus.DONE)
    return Progress(done=done, total=len(phase.tasks))


def plan_progress(plan: Plan) -> Progress:
    done = total = 0
    for phase in plan.phases:
        p = phase_progress(phase)
        done += p.done
        total += p.total
    return Progress(done=done, total=total)


__all__ = [
    "TRANSITIONS",
    "can_transition",
    "find_task",
    "set_task_status",
    "toggle_task_status",
    "update_observations",
    "add_attachment",
    "remove_attachment",
    "apply_task_patch",
    "Progress",
    "phase_progress",
    "plan_progress",
]
