from __future__ import annotations

from typing import Dict, Type

from pydantic import BaseModel

from .domain import (
    Attachment,
    Blueprint,
    Expert,
    LaunchBrief,
    Phase,
    Plan,
    ProjectSummary,
    Task,
    TaskPatch,
    TeamMember,
)
from .drafts import DraftRequest, PlanDraft
from .http import (
    DeletePlanResponse,
    ErrorResponse,
    GeneratePlanRequest,
    MutateTaskRequest,
)


# Registry mapping output schema filenames to models for generation
SCHEMA_MODELS: Dict[str, Type[BaseModel]] = {
    "plan.document.schema.json": Plan,
    "blueprint.document.schema.json": Blueprint,
    "expert.document.schema.json": Expert,
    "team_member.document.schema.json": TeamMember,
    "launch_brief.schema.json": LaunchBrief,
    "plan_draft.schema.json": PlanDraft,
    "draft.request.schema.json": DraftRequest,
    "generate_plan.request.schema.json": GeneratePlanRequest,
    "mutate_task.request.schema.json": MutateTaskRequest,
    "delete_plan.response.schema.json": DeletePlanResponse,
    "project.summary.schema.json": ProjectSummary,
    "error.response.schema.json": ErrorResponse,
}

__all__ = [
    "Attachment",
    "Blueprint",
    "Expert",
    "LaunchBrief",
    "Phase",
    "Plan",
    "ProjectSummary",
    "Task",
    "TaskPatch",
    "TeamMember",
    "DraftRequest",
    "PlanDraft",
    "GeneratePlanRequest",
    "MutateTaskRequest",
    "DeletePlanResponse",
    "ErrorResponse",
    "SCHEMA_MODELS",
]
