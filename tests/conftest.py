import json

import pytest

from launchos.agents.base import DraftingAgent
from launchos.services.plans import PlanService
from launchos.specs.models.domain import Expert, LaunchBrief, TeamMember
from launchos.store.file_store import FilePlanStore


DRAFT = {
    "executiveSummary": "Lançamento interno com três CPLs e carrinho de 7 dias.",
    "phases": [
        {
            "name": "PPL",
            "description": "Aquecimento",
            "tasks": [
                {
                    "title": "Roteiro dos stories",
                    "strategicRationale": "Gerar antecipação",
                    "script": "Oi! Amanhã tem novidade...",
                    "scriptChannel": "WhatsApp",
                    "assignee": "Ana",
                    "deadline": "2024-01-05",
                },
                {
                    "title": "Campanha de captação",
                    "assignee": "Bruno",
                    "deadline": "2024-01-07",
                },
            ],
        },
        {
            "name": "Carrinho",
            "tasks": [
                {"title": "E-mail de abertura", "assignee": "Ana", "deadline": "2024-01-15"},
            ],
        },
    ],
}


class FakeDrafter(DraftingAgent):
    def __init__(self, response=None, error=None):
        super().__init__()
        self.response = DRAFT if response is None else response
        self.error = error
        self.requests = []

    async def draft(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.response, (dict, list)):
            return json.dumps(self.response)
        return self.response


@pytest.fixture
def store(tmp_path):
    return FilePlanStore(state_dir=tmp_path)


@pytest.fixture
def drafter():
    return FakeDrafter()


@pytest.fixture
def service(store, drafter):
    return PlanService(store, drafter)


@pytest.fixture
def brief():
    return LaunchBrief(
        expertId="exp-1",
        blueprintId="seed-interno",
        theme="Mentoria Black",
        targetAudience="Infoprodutores iniciantes",
        goal="R$ 100k",
        budget="R$ 10k",
        startDate="2024-01-01",
        endDate="2024-01-19",
    )


@pytest.fixture
def expert():
    return Expert(id="exp-1", name="Carla", niche="Marketing digital")


@pytest.fixture
def team():
    return [
        TeamMember(id="tm-ana", name="Ana", role="Copywriter", email="ana@launchos.ai"),
        TeamMember(id="tm-bruno", name="Bruno", role="Tráfego", email="bruno@launchos.ai"),
    ]


@pytest.fixture
def raw_plan():
    """A legacy record: missing ids, placeholder ids, no attachments."""
    return {
        "executiveSummary": "Resumo",
        "phases": [
            {
                "name": "Aquecimento",
                "tasks": [
                    {"title": "Post 1", "assignee": "Ana"},
                    {"id": "undefined", "title": "Post 2", "assignee": "Bruno"},
                ],
            },
            {
                "id": "undefined",
                "name": "Vendas",
                "status": "active",
                "tasks": [{"id": "", "title": "Live", "assignee": "Ana", "status": "done"}],
            },
        ],
    }
