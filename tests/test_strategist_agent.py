from types import SimpleNamespace

import pytest

from launchos.agents.strategist_agent import FoundryStrategistAgent, content_to_text, strip_code_fence
from launchos.services.generation import build_draft_request
from launchos.specs.agents.strategist_instructions import AGENT_INSTRUCTIONS, render_instructions, render_prompt
from launchos.specs.common.errors import ConfigurationError


def test_content_to_text_variants():
    assert content_to_text("plain") == "plain"
    assert content_to_text([{"type": "text", "text": {"value": "a"}}, {"text": "b"}]) == "a\nb"
    assert content_to_text([SimpleNamespace(text=SimpleNamespace(value="c"))]) == "c"
    assert content_to_text(None) == ""


@pytest.mark.parametrize(
    "text, expected",
    [
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}```', '{"a": 1}'),
        ('  {"a": 1}  ', '{"a": 1}'),
    ],
)
def test_strip_code_fence(text, expected):
    assert strip_code_fence(text) == expected


def test_instructions_name_the_team_and_period(brief, expert, team):
    request = build_draft_request(brief, expert, team)

    instructions = render_instructions(request)

    assert instructions.startswith(AGENT_INSTRUCTIONS)
    assert "Ana (Copywriter), Bruno (Tráfego)" in instructions
    assert "2024-01-01 e 2024-01-19" in instructions
    assert '"phases"' in instructions
    assert "Tema: Mentoria Black" in render_prompt(request)


def test_instructions_fall_back_to_admin(brief, expert):
    request = build_draft_request(brief, expert, [])

    assert "Admin (Strategist)" in render_instructions(request)


def test_agent_requires_endpoint(monkeypatch):
    monkeypatch.delenv("PROJECT_ENDPOINT", raising=False)

    with pytest.raises(ConfigurationError):
        FoundryStrategistAgent()


def test_with_trace_returns_the_agent():
    from tests.conftest import FakeDrafter

    drafter = FakeDrafter()

    assert drafter.with_trace("trace-1") is drafter
    assert drafter._trace_id == "trace-1"
