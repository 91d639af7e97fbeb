"""Persistent store contract.

Four record families live in the store: experts, team members, blueprint
templates and projects. A project document carries the launch metadata and
the plan body; plan bodies are always overwritten as a whole (last write
wins).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from launchos.shared.dates import utc_now
from launchos.shared.ids import generate_id, is_valid_id
from launchos.specs.common.errors import ResourceNotFoundError
from launchos.specs.models.domain import (
    Blueprint,
    Expert,
    LaunchBrief,
    ProjectSummary,
    TeamMember,
)

EXPERTS = "experts"
TEAM = "team"
BLUEPRINTS = "blueprints"
PROJECTS = "projects"

# Ids minted client-side before the record was ever stored
_UNSTORED_PREFIXES = ("local-", "id-")


def storable_id(value: Optional[str]) -> str:
    if not is_valid_id(value) or value.startswith(_UNSTORED_PREFIXES):
        return generate_id()
    return value


class PlanStore(ABC):
    """High-level record operations over four backend primitives."""

    @abstractmethod
    def _list(self, family: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def _get(self, family: str, item_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def _put(self, family: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def _remove(self, family: str, item_id: str) -> None:
        ...

    # experts
    def list_experts(self) -> List[Expert]:
        docs = sorted(self._list(EXPERTS), key=lambda d: d.get("name") or "")
        return [Expert.model_validate(d) for d in docs]

    def get_expert(self, expert_id: str) -> Expert:
        doc = self._get(EXPERTS, expert_id)
        if doc is None:
            raise ResourceNotFoundError("Expert", expert_id)
        return Expert.model_validate(doc)

    def save_expert(self, expert: Expert) -> Expert:
        doc = expert.model_dump(mode="json")
        doc["id"] = storable_id(expert.id)
        return Expert.model_validate(self._put(EXPERTS, doc))

    def delete_expert(self, expert_id: str) -> None:
        self._remove(EXPERTS, expert_id)

    # team
    def list_team(self) -> List[TeamMember]:
        docs = sorted(self._list(TEAM), key=lambda d: d.get("name") or "")
        return [TeamMember.model_validate(d) for d in docs]

    def save_team_member(self, member: TeamMember) -> TeamMember:
        doc = member.model_dump(mode="json")
        doc["id"] = storable_id(member.id)
        return TeamMember.model_validate(self._put(TEAM, doc))

    def delete_team_member(self, member_id: str) -> None:
        self._remove(TEAM, member_id)

    # blueprints
    def list_blueprints(self) -> List[Blueprint]:
        docs = sorted(self._list(BLUEPRINTS), key=lambda d: d.get("name") or "")
        return [Blueprint.model_validate(d) for d in docs]

    def save_blueprint(self, blueprint: Blueprint) -> Blueprint:
        return Blueprint.model_validate(self._put(BLUEPRINTS, blueprint.model_dump(mode="json")))

    def delete_blueprint(self, blueprint_id: str) -> None:
        self._remove(BLUEPRINTS, blueprint_id)

    # projects
    def list_projects(self) -> List[ProjectSummary]:
        docs = sorted(self._list(PROJECTS), key=lambda d: d.get("createdAt") or "", reverse=True)
        return [
            ProjectSummary(id=d["id"], theme=d.get("theme"), createdAt=d.get("createdAt"))
            for d in docs
        ]

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        return self._get(PROJECTS, project_id)

    def insert_project(self, brief: LaunchBrief, plan_body: Dict[str, Any]) -> Dict[str, Any]:
        doc = {
            "id": generate_id(),
            "theme": brief.theme,
            "expertId": brief.expertId,
            "createdAt": utc_now(),
            "input": brief.model_dump(mode="json"),
            "plan": plan_body,
        }
        return self._put(PROJECTS, doc)

    def update_project_plan(self, project_id: str, plan_body: Dict[str, Any]) -> Dict[str, Any]:
        doc = self._get(PROJECTS, project_id)
        if doc is None:
            raise ResourceNotFoundError("Project", project_id)
        doc["plan"] = plan_body
        doc["updatedAt"] = utc_now()
        return self._put(PROJECTS, doc)

    def delete_project(self, project_id: str) -> None:
        """Remove the project document; phases, tasks and attachments go with it."""
        self._remove(PROJECTS, project_id)


__all__ = ["PlanStore", "storable_id", "EXPERTS", "TEAM", "BLUEPRINTS", "PROJECTS"]
