"""Strategy generation: brief + roster + blueprint -> validated plan draft.

This module only checks the *shape* of what the drafting collaborator sends
back. It never repairs ids, statuses or attachments; that is the plan
normalizer's job.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from launchos.agents.base import DraftingAgent
from launchos.shared.logging_utils import error as log_error, info as log_info
from launchos.specs.common.errors import GenerationError
from launchos.specs.models.domain import Blueprint, BrandIdentity, Expert, LaunchBrief, TeamMember
from launchos.specs.models.drafts import DraftRequest, PlanDraft, RosterEntry


def build_draft_request(
    brief: LaunchBrief,
    expert: Expert,
    team: Sequence[TeamMember],
    blueprint: Optional[Blueprint] = None,
) -> DraftRequest:
    return DraftRequest(
        expertName=expert.name,
        expertNiche=expert.niche,
        branding=expert.branding or BrandIdentity(),
        theme=brief.theme,
        targetAudience=brief.targetAudience,
        goal=brief.goal,
        budget=brief.budget,
        startDate=brief.startDate,
        endDate=brief.endDate,
        roster=[RosterEntry(name=m.name, role=m.role.value) for m in team],
        blueprintName=blueprint.name if blueprint else None,
        blueprintPhases=list(blueprint.phases) if blueprint else [],
        guidance=blueprint.aiContext if blueprint else "",
    )


def parse_draft(raw: Any) -> PlanDraft:
    """Validate the collaborator's answer against the declared draft shape."""
    try:
        if isinstance(raw, (str, bytes)):
            return PlanDraft.model_validate_json(raw)
        return PlanDraft.model_validate(raw)
    except ValidationError as exc:
        raise GenerationError(
            "Drafting collaborator returned an unexpected shape",
            details={"errors": json.loads(exc.json(include_url=False))},
        ) from exc


async def generate_draft(drafter: DraftingAgent, request: DraftRequest) -> PlanDraft:
    """Call the collaborator and return a shape-valid draft, or raise GenerationError."""
    try:
        raw = await drafter.draft(request)
    except GenerationError:
        raise
    except Exception as exc:
        log_error(None, "generation:collaborator_failed", theme=request.theme, error=str(exc))
        raise GenerationError(f"Drafting collaborator failed: {exc}") from exc
    draft = parse_draft(raw)
    log_info(
        None,
        "generation:draft_accepted",
        theme=request.theme,
        phases=len(draft.phases),
        tasks=sum(len(p.tasks) for p in draft.phases),
    )
    return draft


def draft_to_plan_document(draft: PlanDraft, brief: LaunchBrief, expert: Expert) -> Dict[str, Any]:
    """Raw plan document from a draft; identities are left for the normalizer."""
    branding = expert.branding or BrandIdentity()
    phases: List[Dict[str, Any]] = []
    for phase in draft.phases:
        phases.append(
            {
                "name": phase.name,
                "description": phase.description or "",
                "tasks": [task.model_dump(exclude_none=True) for task in phase.tasks],
            }
        )
    return {
        "theme": brief.theme,
        "executiveSummary": draft.executiveSummary,
        "expertProfile": {
            "tone": branding.toneOfVoice,
            "keywords": [],
            "styleAnalysis": branding.brandManifesto,
        },
        "phases": phases,
        "fullStrategyContent": draft.executiveSummary,
    }


__all__ = ["build_draft_request", "parse_draft", "generate_draft", "draft_to_plan_document"]
