"""Blueprint catalog: system launch templates plus user-defined ones."""
from __future__ import annotations

from typing import List, Optional

from launchos.shared.ids import generate_id
from launchos.shared.logging_utils import info as log_info
from launchos.specs.common.errors import BlueprintProtectedError, ResourceNotFoundError
from launchos.specs.models.domain import Blueprint
from launchos.store.base import PlanStore

SYSTEM_PREFIX = "seed-"
# Ids minted by the timestamp fallback are never treated as stored ids
_FALLBACK_PREFIX = "id-"

SYSTEM_BLUEPRINTS: List[Blueprint] = [
    Blueprint(
        id="seed-semente",
        name="Lançamento Semente (Validação)",
        description="Validar oferta e audiência com baixo investimento. Ideal para quem está começando.",
        phases=[
            "Pesquisa de Público e Avatar",
            "Aquecimento no Instagram (Stories/Feed)",
            "Convite para Aula ao Vivo (YouTube)",
            "Abertura de Carrinho e Feedbacks",
        ],
        aiContext="Foque em gerar desejo através de conteúdo educacional.",
        defaultDurationDays=21,
    ),
    Blueprint(
        id="seed-interno",
        name="Lançamento Interno (Escala)",
        description="Escalar faturamento com base de leads e múltiplos vídeos de conteúdo.",
        phases=[
            "PPL (Pré-pré-lançamento)",
            "PL (Pré-lançamento com 3 CPLs)",
            "Lançamento (Venda)",
            "Pós-venda e Downsell",
        ],
        aiContext="Copy focada em antecipação.",
        defaultDurationDays=45,
    ),
    Blueprint(
        id="seed-meteorico",
        name="Lançamento Meteórico (WhatsApp)",
        description="Estratégia de 3 dias focada em grupos de WhatsApp e escassez extrema.",
        phases=[
            "Captação de Leads para Grupos",
            "Aquecimento nos Grupos",
            "O Dia da Oferta (Abertura)",
            "Encerramento e Limpeza",
        ],
        aiContext="Foque 100% em escassez e urgência.",
        defaultDurationDays=7,
    ),
]


def is_system_blueprint(blueprint_id: str) -> bool:
    return blueprint_id.startswith(SYSTEM_PREFIX)


def list_blueprints(store: PlanStore) -> List[Blueprint]:
    """System blueprints first, then user-defined ones from the store."""
    custom = [bp for bp in store.list_blueprints() if not is_system_blueprint(bp.id)]
    return [bp.model_copy(deep=True) for bp in SYSTEM_BLUEPRINTS] + custom


def get_blueprint(store: PlanStore, blueprint_id: str) -> Blueprint:
    for bp in list_blueprints(store):
        if bp.id == blueprint_id:
            return bp
    raise ResourceNotFoundError("Blueprint", blueprint_id)


def find_blueprint(store: PlanStore, blueprint_id: Optional[str]) -> Optional[Blueprint]:
    if not blueprint_id:
        return None
    try:
        return get_blueprint(store, blueprint_id)
    except ResourceNotFoundError:
        return None


def save_blueprint(store: PlanStore, blueprint: Blueprint) -> Blueprint:
    """Store a user blueprint; editing a system one saves a customized copy."""
    bp = blueprint.model_copy(deep=True)
    if not bp.id or is_system_blueprint(bp.id) or bp.id.startswith(_FALLBACK_PREFIX):
        bp.id = generate_id()
    saved = store.save_blueprint(bp)
    log_info(None, "catalog:blueprint_saved", blueprintId=saved.id)
    return saved


def delete_blueprint(store: PlanStore, blueprint_id: str) -> None:
    if is_system_blueprint(blueprint_id):
        raise BlueprintProtectedError(blueprint_id)
    store.delete_blueprint(blueprint_id)
    log_info(None, "catalog:blueprint_deleted", blueprintId=blueprint_id)


__all__ = [
    "SYSTEM_BLUEPRINTS",
    "is_system_blueprint",
    "list_blueprints",
    "get_blueprint",
    "find_blueprint",
    "save_blueprint",
    "delete_blueprint",
]
