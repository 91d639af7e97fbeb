"""Plan operations exposed to the presentation layer.

Every plan read from or written to the store goes through the normalizer.
Writes overwrite the whole plan body; two editors saving the same plan
simply race and the last write wins.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from launchos.agents.base import DraftingAgent
from launchos.planning.lifecycle import apply_task_patch
from launchos.planning.normalizer import RepairReport, normalize_plan, normalize_plan_with_report
from launchos.services.generation import build_draft_request, draft_to_plan_document, generate_draft
from launchos.shared.logging_utils import error as log_error, info as log_info, warning as log_warning
from launchos.specs.common.enums import TeamRole
from launchos.specs.common.errors import ResourceNotFoundError, StoreError
from launchos.specs.models.domain import (
    Blueprint,
    Expert,
    LaunchBrief,
    Plan,
    ProjectSummary,
    TaskPatch,
    TeamMember,
)
from launchos.store.base import PlanStore

# Roster used when the team cannot be read
FALLBACK_TEAM = [
    TeamMember(id="admin", name="Admin", role=TeamRole.STRATEGIST, email="admin@launchos.ai"),
]


def _plan_from_project(doc: Dict[str, Any]) -> Tuple[Plan, RepairReport]:
    body = dict(doc.get("plan") or {})
    body.update({"id": doc.get("id"), "theme": doc.get("theme"), "createdAt": doc.get("createdAt")})
    return normalize_plan_with_report(body)


def _body(plan: Plan) -> Dict[str, Any]:
    """Plan body as persisted: project metadata lives on the project record."""
    return plan.model_dump(mode="json", exclude={"id", "theme", "createdAt"})


class PlanService:
    def __init__(self, store: PlanStore, drafter: Optional[DraftingAgent] = None) -> None:
        self.store = store
        self.drafter = drafter
        # Plans whose last remote write failed, keyed by plan id
        self._local: Dict[str, Plan] = {}

    async def generate_plan(
        self,
        brief: LaunchBrief,
        expert: Expert,
        team: Sequence[TeamMember],
        blueprint: Optional[Blueprint] = None,
    ) -> Plan:
        """Draft, normalize and persist a new plan.

        Raises GenerationError when the collaborator fails; nothing is
        persisted in that case.
        """
        if self.drafter is None:
            raise RuntimeError("PlanService was created without a drafting agent")
        request = build_draft_request(brief, expert, team, blueprint)
        draft = await generate_draft(self.drafter, request)
        plan = normalize_plan(draft_to_plan_document(draft, brief, expert))
        doc = self.store.insert_project(brief, _body(plan))
        saved, _ = _plan_from_project(doc)
        log_info(saved.id, "plans:generated", theme=saved.theme, phases=len(saved.phases))
        return saved

    def list_plans(self) -> List[ProjectSummary]:
        return self.store.list_projects()

    def list_team(self) -> List[TeamMember]:
        try:
            return self.store.list_team()
        except StoreError as exc:
            log_warning(None, "plans:team_fallback", error=str(exc))
            return [m.model_copy() for m in FALLBACK_TEAM]

    def load_plan(self, plan_id: str) -> Plan:
        doc = self.store.get_project(plan_id)
        if doc is None:
            raise ResourceNotFoundError("Plan", plan_id)
        plan, repairs = _plan_from_project(doc)
        if repairs.changed:
            # Persist repaired identities so ids handed out here stay valid
            try:
                self.store.update_project_plan(plan_id, _body(plan))
            except StoreError as exc:
                log_warning(plan_id, "plans:repair_not_saved", error=str(exc))
            else:
                log_info(plan_id, "plans:repaired_on_read", regeneratedIds=repairs.ids)
        return plan

    def mutate_task(self, actor: Any, plan_id: str, task_id: str, patch: TaskPatch) -> Plan:
        """Apply ``patch`` to one task as ``actor`` and persist the plan.

        PermissionDeniedError, InvalidTransitionError and ResourceNotFoundError
        leave the stored plan untouched. If the write itself fails the
        updated plan is kept locally and StoreError is raised with
        ``details["cachedLocally"] = True``.
        """
        plan = self.load_plan(plan_id)
        updated = normalize_plan(apply_task_patch(plan, actor, task_id, patch))
        try:
            self.store.update_project_plan(plan_id, _body(updated))
        except StoreError as exc:
            self._local[plan_id] = updated
            exc.details.update({"planId": plan_id, "cachedLocally": True})
            log_error(plan_id, "plans:write_failed", taskId=task_id, error=str(exc))
            raise
        self._local.pop(plan_id, None)
        log_info(plan_id, "plans:task_mutated", taskId=task_id)
        return updated

    def local_copy(self, plan_id: str) -> Optional[Plan]:
        """Locally cached plan whose remote write failed, if any."""
        return self._local.get(plan_id)

    def delete_plan(self, plan_id: str) -> None:
        if self.store.get_project(plan_id) is None:
            raise ResourceNotFoundError("Plan", plan_id)
        self.store.delete_project(plan_id)
        self._local.pop(plan_id, None)
        log_info(plan_id, "plans:deleted")


__all__ = ["PlanService", "FALLBACK_TEAM"]
