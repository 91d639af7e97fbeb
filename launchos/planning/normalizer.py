"""Plan normalization.

Every plan passes through :func:`normalize_plan` before it is persisted and
after it is read back. Drafts from the collaborator and records written by
older versions may lack identities, statuses or attachment lists; the
normalizer repairs them so that downstream code can rely on:

* every phase, task and attachment has a non-empty, non-placeholder id that
  is unique across the whole plan;
* every task has a concrete ``attachments`` list;
* statuses are valid enum values.

Normalization never raises. It is idempotent: a normalized plan comes back
unchanged.
"""
from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, ValidationError

from launchos.shared.ids import generate_id, is_valid_id
from launchos.shared.logging_utils import info as log_info
from launchos.specs.common.enums import AttachmentType, Channel, PhaseStatus, TaskStatus
from launchos.specs.models.domain import ExpertProfile, MessageFlow, Plan


_PLAN_ALIASES = {
    "created_at": "createdAt",
    "executive_summary": "executiveSummary",
    "expert_profile": "expertProfile",
    "message_flows": "messageFlows",
    "full_strategy_content": "fullStrategyContent",
}
_TASK_ALIASES = {
    "strategic_rationale": "strategicRationale",
    "script_channel": "scriptChannel",
    "assignee_id": "assigneeId",
    "completed_at": "completedAt",
}
_ATTACHMENT_ALIASES = {"uploaded_at": "uploadedAt"}

_TASK_OPTIONAL_TEXT = ("description", "strategicRationale", "assigneeId", "dependency", "deadline", "completedAt")

_CHANNEL_ALIASES = {
    "e_mail": Channel.EMAIL.value,
    "whats_app": Channel.WHATSAPP.value,
    "youtube": Channel.YOUTUBE_LIVE.value,
    "live": Channel.YOUTUBE_LIVE.value,
}
_ATTACHMENT_TYPE_ALIASES = {
    "doc": AttachmentType.DOCUMENT.value,
    "pdf": AttachmentType.DOCUMENT.value,
    "file": AttachmentType.DOCUMENT.value,
}


class RepairReport:
    """What one normalization pass had to fix."""

    def __init__(self) -> None:
        self.seen: Set[str] = set()
        self.ids = 0
        self.defaults = 0
        self.dropped = 0

    def claim(self, value: Any) -> str:
        """Return ``value`` if it is a usable, unused id, else a fresh one."""
        if is_valid_id(value) and value not in self.seen:
            ident = value
        else:
            ident = generate_id()
            while ident in self.seen:
                ident = generate_id()
            self.ids += 1
        self.seen.add(ident)
        return ident

    @property
    def changed(self) -> bool:
        return bool(self.ids or self.defaults or self.dropped)


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    if not isinstance(value, Mapping):
        return {}
    return {k: copy.deepcopy(v) for k, v in value.items() if isinstance(k, str)}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _canonical(doc: Dict[str, Any], aliases: Mapping[str, str]) -> Dict[str, Any]:
    for legacy, name in aliases.items():
        if legacy in doc:
            value = doc.pop(legacy)
            doc.setdefault(name, value)
    return doc


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _text_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, (list, tuple)):
        return None
    return [item for item in value if isinstance(item, str)]


def _enum_value(value: Any, enum_cls, default: str, repairs: RepairReport) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        repairs.defaults += 1
        return default


def normalize_channel(value: Any) -> Optional[str]:
    """Map free-text channel names ("E-mail", "WhatsApp") onto known channels."""
    if not isinstance(value, str) or not value.strip():
        return None
    key = re.sub(r"[\s\-]+", "_", value.strip().lower())
    key = _CHANNEL_ALIASES.get(key, key)
    try:
        return Channel(key).value
    except ValueError:
        return None


def _normalize_attachment(raw: Dict[str, Any], repairs: RepairReport) -> Dict[str, Any]:
    att = _canonical(raw, _ATTACHMENT_ALIASES)
    att["name"] = _text(att.get("name"))
    att["url"] = _text(att.get("url"))
    kind = att.get("type")
    if isinstance(kind, str):
        kind = _ATTACHMENT_TYPE_ALIASES.get(kind.lower(), kind.lower())
    att["type"] = _enum_value(kind, AttachmentType, AttachmentType.LINK.value, repairs)
    att["size"] = _optional_text(att.get("size"))
    att["uploadedAt"] = _optional_text(att.get("uploadedAt"))
    return att


def _normalize_task(raw: Dict[str, Any], repairs: RepairReport) -> Dict[str, Any]:
    task = _canonical(raw, _TASK_ALIASES)
    task["title"] = _text(task.get("title"))
    task["assignee"] = _text(task.get("assignee"))
    task["status"] = _enum_value(task.get("status"), TaskStatus, TaskStatus.PENDING.value, repairs)
    for field in _TASK_OPTIONAL_TEXT:
        task[field] = _optional_text(task.get(field))
    task["observations"] = _text(task.get("observations"))
    task["script"] = _text(task.get("script"))
    task["scriptChannel"] = normalize_channel(task.get("scriptChannel"))
    task["examples"] = _text_list(task.get("examples"))
    task["comments"] = _text_list(task.get("comments"))

    attachments = []
    for item in _as_list(task.get("attachments")):
        if not isinstance(item, Mapping):
            repairs.dropped += 1
            continue
        attachments.append(_normalize_attachment(_as_dict(item), repairs))
    task["attachments"] = attachments
    return task


def _normalize_phase(raw: Dict[str, Any], repairs: RepairReport) -> Dict[str, Any]:
    phase = raw
    phase["name"] = _text(phase.get("name"))
    phase["description"] = _text(phase.get("description"))
    phase["status"] = _enum_value(phase.get("status"), PhaseStatus, PhaseStatus.LOCKED.value, repairs)

    tasks = []
    for item in _as_list(phase.get("tasks")):
        if not isinstance(item, Mapping):
            repairs.dropped += 1
            continue
        tasks.append(_normalize_task(_as_dict(item), repairs))
    phase["tasks"] = tasks
    return phase


def _validated(model, value: Any) -> Optional[Dict[str, Any]]:
    try:
        return model.model_validate(value).model_dump(mode="json")
    except ValidationError:
        return None


def _claim_ids(phases: List[Dict[str, Any]], repairs: RepairReport) -> None:
    # Phases, then tasks, then attachments: an id already owned by a phase or
    # task is never taken over by an entity further down.
    for phase in phases:
        phase["id"] = repairs.claim(phase.get("id"))
    for phase in phases:
        for task in phase["tasks"]:
            task["id"] = repairs.claim(task.get("id"))
    for phase in phases:
        for task in phase["tasks"]:
            for att in task["attachments"]:
                att["id"] = repairs.claim(att.get("id"))


def normalize_plan_with_report(raw: Any) -> Tuple[Plan, RepairReport]:
    """Normalize ``raw`` and report which repairs were needed."""
    repairs = RepairReport()
    doc = _canonical(_as_dict(raw), _PLAN_ALIASES)

    doc["id"] = _optional_text(doc.get("id"))
    doc["theme"] = _optional_text(doc.get("theme"))
    doc["createdAt"] = _optional_text(doc.get("createdAt"))
    doc["executiveSummary"] = _text(doc.get("executiveSummary"))
    doc["fullStrategyContent"] = _text(doc.get("fullStrategyContent"))
    doc["expertProfile"] = (
        _validated(ExpertProfile, doc["expertProfile"]) if isinstance(doc.get("expertProfile"), Mapping) else None
    )

    flows = doc.get("messageFlows")
    if isinstance(flows, (list, tuple)):
        kept = [f for f in (_validated(MessageFlow, item) for item in flows) if f is not None]
        repairs.dropped += len(flows) - len(kept)
        doc["messageFlows"] = kept
    else:
        doc["messageFlows"] = None

    phases = []
    for item in _as_list(doc.get("phases")):
        if not isinstance(item, Mapping):
            repairs.dropped += 1
            continue
        phases.append(_normalize_phase(_as_dict(item), repairs))
    _claim_ids(phases, repairs)
    doc["phases"] = phases

    plan = Plan.model_validate(doc)
    if repairs.changed:
        log_info(
            plan.id,
            "normalize:repaired",
            regeneratedIds=repairs.ids,
            defaultedStatuses=repairs.defaults,
            droppedEntries=repairs.dropped,
        )
    return plan, repairs


def normalize_plan(raw: Any) -> Plan:
    """Return a structurally sound :class:`Plan` built from ``raw``.

    ``raw`` may be a :class:`Plan`, a mapping from storage or the drafting
    collaborator, or anything else (treated as an empty plan).
    """
    return normalize_plan_with_report(raw)[0]


__all__ = ["normalize_plan", "normalize_plan_with_report", "normalize_channel", "RepairReport"]
