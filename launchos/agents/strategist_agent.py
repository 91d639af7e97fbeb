import asyncio
import os
import time
from typing import Any, List, Optional

try:
    from azure.ai.projects import AIProjectClient  # type: ignore
    from azure.identity import DefaultAzureCredential  # type: ignore
except Exception:  # pragma: no cover
    AIProjectClient = None  # type: ignore
    DefaultAzureCredential = None  # type: ignore

from launchos.shared.logging_utils import info as log_info
from launchos.shared.retry_utils import retry_with_backoff
from launchos.specs.agents.strategist_instructions import AGENT_CONFIG, render_instructions, render_prompt
from launchos.specs.common.errors import ConfigurationError, GenerationError
from launchos.specs.models.drafts import DraftRequest
from .base import DraftingAgent


def content_to_text(content: Any) -> str:
    """Flatten a Foundry message content payload to plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        chunks: List[str] = []
        for part in content:
            if isinstance(part, dict):
                val = part.get("text") or part.get("content") or part.get("value")
            else:
                val = getattr(part, "text", None)
            if isinstance(val, dict):
                val = val.get("value")
            elif val is not None and not isinstance(val, str):
                val = getattr(val, "value", None)
            if isinstance(val, str):
                chunks.append(val)
        return "\n".join(chunks)
    return ""


def strip_code_fence(text: str) -> str:
    """Drop a surrounding ```json fence some models add around JSON output."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


class FoundryStrategistAgent(DraftingAgent):
    """Strategist agent using Azure AI Foundry Agents SDK (AIProjectClient).

    Creates a short-lived agent with the strategist instructions, runs one
    thread with the brief and returns the last assistant message as text.
    """

    POLL_INTERVAL = 0.75
    RUN_TIMEOUT = 180.0

    def __init__(self, *, model: Optional[str] = None) -> None:
        super().__init__()
        if AIProjectClient is None or DefaultAzureCredential is None:
            raise ConfigurationError(
                "Azure AI Foundry Agents SDK not available. Install 'azure-ai-projects' and 'azure-identity'."
            )
        endpoint = os.getenv("PROJECT_ENDPOINT")
        if not endpoint:
            raise ConfigurationError("PROJECT_ENDPOINT is required for AIProjectClient")
        self.model = model or os.getenv("MODEL_DEPLOYMENT_NAME")
        if not self.model:
            raise ConfigurationError("MODEL_DEPLOYMENT_NAME is required for AI agent model")
        self.agent_name = os.getenv("STRATEGIST_AGENT_NAME", AGENT_CONFIG["name"])
        disable_mi = (os.getenv("AZURE_IDENTITY_DISABLE_MANAGED_IDENTITY", "").lower() in ("1", "true", "yes"))
        cred = DefaultAzureCredential(exclude_managed_identity_credential=disable_mi)
        self._client = AIProjectClient(endpoint=endpoint, credential=cred)

    def _wait_for_run(self, *, thread_id: str, run_id: str) -> None:
        deadline = time.monotonic() + self.RUN_TIMEOUT
        while True:
            run = retry_with_backoff(
                lambda: self._client.agents.runs.get(thread_id=thread_id, run_id=run_id),
                attempts=3,
                delay=self.POLL_INTERVAL,
                label="agents.runs.get",
            )
            status = (getattr(run, "status", None) or "").lower()
            if status in {"succeeded", "completed"}:
                return
            if status in {"failed", "cancelled", "canceled", "expired"}:
                raise GenerationError(
                    f"Strategist run {status}",
                    details={"lastError": str(getattr(run, "last_error", None))},
                )
            if time.monotonic() > deadline:
                raise GenerationError("Strategist run timed out", details={"runId": run_id})
            # queued or in_progress
            time.sleep(self.POLL_INTERVAL)

    def _last_assistant_text(self, thread_id: str) -> str:
        msgs = list(self._client.agents.messages.list(thread_id=thread_id))
        assistant_msgs = [m for m in msgs if getattr(m, "role", None) == "assistant"]
        if not assistant_msgs:
            raise GenerationError("Strategist returned no assistant message")
        # messages.list is newest first
        return content_to_text(getattr(assistant_msgs[0], "content", ""))

    def run(self, request: DraftRequest) -> str:
        with self._client:
            agent = self._client.agents.create_agent(
                model=self.model,
                name=self.agent_name,
                description=AGENT_CONFIG["description"],
                instructions=render_instructions(request),
            )
            try:
                thread = self._client.agents.threads.create()
                self._client.agents.messages.create(
                    thread_id=thread.id,
                    role="user",
                    content=render_prompt(request),
                )
                run = retry_with_backoff(
                    lambda: self._client.agents.runs.create(thread_id=thread.id, agent_id=agent.id),
                    attempts=3,
                    label="agents.runs.create",
                )
                self._wait_for_run(thread_id=thread.id, run_id=run.id)
                text = strip_code_fence(self._last_assistant_text(thread.id))
                log_info(self._trace_id, "strategist:draft_received", chars=len(text))
                return text
            finally:
                self._client.agents.delete_agent(agent.id)

    async def draft(self, request: DraftRequest) -> str:
        # The Foundry SDK client used here is synchronous
        return await asyncio.to_thread(self.run, request)


__all__ = ["FoundryStrategistAgent", "content_to_text", "strip_code_fence"]
