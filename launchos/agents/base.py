from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Union

from launchos.specs.models.drafts import DraftRequest


class DraftingAgent(ABC):
    """Abstract base class for plan drafting collaborators.

    Implementations return the collaborator's raw answer, either JSON text
    or an already-decoded mapping. Shape validation happens in
    ``launchos.services.generation``.
    """

    def __init__(self) -> None:
        self._trace_id: str | None = None

    def with_trace(self, trace_id: str) -> "DraftingAgent":
        """Attach a trace id for downstream logging."""

        self._trace_id = trace_id
        return self

    @abstractmethod
    async def draft(self, request: DraftRequest) -> Union[str, Dict[str, Any]]:
        """Ask the collaborator for a plan draft."""


__all__ = ["DraftingAgent"]
