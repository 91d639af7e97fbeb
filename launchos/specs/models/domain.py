from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from launchos.shared.dates import parse_date
from launchos.specs.common.enums import (
    AttachmentType,
    Channel,
    PhaseStatus,
    TaskStatus,
    TeamRole,
)


# Role spellings found in older team records
_ROLE_ALIASES = {
    "Estrategista": TeamRole.STRATEGIST.value,
    "Suporte": TeamRole.SUPPORT.value,
}


class BrandIdentity(BaseModel):
    archetype: str = "Não definido"
    toneOfVoice: str = Field(default="Profissional", alias="tone_of_voice")
    contentPillars: str = Field(default="Geral", alias="content_pillars")
    visualIdentity: str = Field(default="Geral", alias="visual_identity")
    brandManifesto: str = Field(default="Geral", alias="brand_manifesto")

    model_config = ConfigDict(populate_by_name=True)


class Expert(BaseModel):
    """Expert (brand profile) a launch is built around."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str
    niche: str = ""
    communicationStyle: str = Field(default="", alias="communication_style")
    avatar: Optional[str] = None
    branding: Optional[BrandIdentity] = None


class TeamMember(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str
    role: TeamRole
    email: str
    password: Optional[str] = Field(
        default=None,
        json_schema_extra={"writeOnly": True, "x-sensitive": True},
    )
    avatar: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _legacy_role(cls, value: Any) -> Any:
        return _ROLE_ALIASES.get(value, value)


class Blueprint(BaseModel):
    """Reusable execution template used to seed a plan."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str
    description: str = ""
    phases: List[str] = Field(default_factory=list)
    aiContext: str = Field(default="", alias="ai_context")
    defaultDurationDays: int = Field(default=0, ge=0, alias="default_duration_days")

    @field_validator("defaultDurationDays", mode="before")
    @classmethod
    def _absent_duration(cls, value: Any) -> Any:
        return 0 if value is None else value


class LaunchBrief(BaseModel):
    """Campaign brief captured by the launch form."""

    model_config = ConfigDict(populate_by_name=True)

    expertId: str = Field(alias="expert_id")
    blueprintId: Optional[str] = Field(default=None, alias="blueprint_id")
    projectType: str = Field(default="", alias="project_type")
    theme: str
    targetAudience: str = Field(default="", alias="target_audience")
    goal: str = ""
    budget: str = ""
    startDate: str = Field(alias="start_date")
    endDate: str = Field(alias="end_date")

    @model_validator(mode="after")
    def _check_dates(self) -> "LaunchBrief":
        start = parse_date(self.startDate)
        end = parse_date(self.endDate)
        if start is None or end is None:
            raise ValueError("startDate and endDate must be ISO dates (YYYY-MM-DD)")
        if end < start:
            raise ValueError("endDate cannot be before startDate")
        return self


class Attachment(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str = ""
    url: str = ""
    type: AttachmentType = AttachmentType.LINK
    size: Optional[str] = None
    uploadedAt: Optional[str] = Field(default=None, alias="uploaded_at")


class Task(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    title: str = ""
    description: Optional[str] = None
    strategicRationale: Optional[str] = Field(default=None, alias="strategic_rationale")
    observations: str = ""
    examples: Optional[List[str]] = None
    script: str = ""
    scriptChannel: Optional[Channel] = Field(default=None, alias="script_channel")
    assignee: str = ""
    assigneeId: Optional[str] = Field(default=None, alias="assignee_id")
    status: TaskStatus = TaskStatus.PENDING
    dependency: Optional[str] = None
    deadline: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)
    comments: Optional[List[str]] = None
    completedAt: Optional[str] = Field(default=None, alias="completed_at")


class Phase(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str = ""
    description: str = ""
    status: PhaseStatus = PhaseStatus.LOCKED
    tasks: List[Task] = Field(default_factory=list)


class MessageFlow(BaseModel):
    channel: Channel
    trigger: str
    content: str
    cta: str
    responsibleRole: str = Field(alias="responsible_role")

    model_config = ConfigDict(populate_by_name=True)


class ExpertProfile(BaseModel):
    tone: str = ""
    keywords: List[str] = Field(default_factory=list)
    styleAnalysis: str = Field(default="", alias="style_analysis")

    model_config = ConfigDict(populate_by_name=True)


class Plan(BaseModel):
    """Full execution document for one launch: phases -> tasks -> attachments."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    theme: Optional[str] = None
    createdAt: Optional[str] = Field(default=None, alias="created_at")
    executiveSummary: str = Field(default="", alias="executive_summary")
    expertProfile: Optional[ExpertProfile] = Field(default=None, alias="expert_profile")
    phases: List[Phase] = Field(default_factory=list)
    messageFlows: Optional[List[MessageFlow]] = Field(default=None, alias="message_flows")
    fullStrategyContent: str = Field(default="", alias="full_strategy_content")

    def iter_tasks(self):
        for phase in self.phases:
            for task in phase.tasks:
                yield phase, task


class ProjectSummary(BaseModel):
    id: str
    theme: Optional[str] = None
    createdAt: Optional[str] = Field(default=None, alias="created_at")

    model_config = ConfigDict(populate_by_name=True)


class TaskPatch(BaseModel):
    """Fields an editor may change on an existing task."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    status: Optional[TaskStatus] = None
    observations: Optional[str] = None
    comments: Optional[List[str]] = None
    attachments: Optional[List[Attachment]] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


__all__ = [
    "BrandIdentity",
    "Expert",
    "TeamMember",
    "Blueprint",
    "LaunchBrief",
    "Attachment",
    "Task",
    "Phase",
    "MessageFlow",
    "ExpertProfile",
    "Plan",
    "ProjectSummary",
    "TaskPatch",
]
