import json
from functools import lru_cache
from time import perf_counter
from typing import Optional

import azure.functions as func
from pydantic import BaseModel, ValidationError

from launchos.agents.strategist_agent import FoundryStrategistAgent
from launchos.catalog.blueprints import get_blueprint, list_blueprints
from launchos.planning.permissions import ADMIN
from launchos.services.plans import PlanService
from launchos.shared.logging_utils import error as log_error, info as log_info
from launchos.specs.common.errors import (
    BlueprintProtectedError,
    ConfigurationError,
    GenerationError,
    InvalidTransitionError,
    LaunchOSError,
    PermissionDeniedError,
    ResourceNotFoundError,
    StoreError,
)
from launchos.specs.models.http import (
    DeletePlanResponse,
    ErrorResponse,
    GeneratePlanRequest,
    MutateTaskRequest,
)
from launchos.store.cosmos_store import select_store


bp = func.Blueprint()

ACTOR_HEADER = "x-launchos-actor"

_ERROR_STATUS = (
    (PermissionDeniedError, 403),
    (ResourceNotFoundError, 404),
    (InvalidTransitionError, 409),
    (BlueprintProtectedError, 409),
    (GenerationError, 502),
    (StoreError, 503),
    (ConfigurationError, 500),
)


@lru_cache(maxsize=1)
def get_plan_service() -> PlanService:
    return PlanService(select_store())


def _json(model: BaseModel, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        body=model.model_dump_json(),
        mimetype="application/json",
        status_code=status_code,
    )


def _json_list(models, status_code: int = 200) -> func.HttpResponse:
    body = json.dumps([m.model_dump(mode="json") for m in models], ensure_ascii=False)
    return func.HttpResponse(body=body, mimetype="application/json", status_code=status_code)


def _bad_request(message: str) -> func.HttpResponse:
    return _json(ErrorResponse(message=message, errorCode="INVALID_REQUEST"), 400)


def _error_response(exc: LaunchOSError, plan_id: Optional[str] = None) -> func.HttpResponse:
    status = next((code for kind, code in _ERROR_STATUS if isinstance(exc, kind)), 500)
    log_error(plan_id, "http:request_failed", code=exc.code, status=status, error=str(exc))
    payload = exc.to_dict()
    err = ErrorResponse(message=payload["message"], errorCode=payload["code"], details=payload["details"] or None)
    return _json(err, status)


def _parse(req: func.HttpRequest, model):
    try:
        data = req.get_json()
    except ValueError:
        return None, _bad_request("Invalid JSON body")
    try:
        return model.model_validate(data), None
    except ValidationError as ex:
        return None, _bad_request(f"Invalid request: {ex}")


@bp.function_name(name="list_plans")
@bp.route(route="plans", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def list_plans(req: func.HttpRequest) -> func.HttpResponse:
    try:
        return _json_list(get_plan_service().list_plans())
    except LaunchOSError as exc:
        return _error_response(exc)


@bp.function_name(name="list_blueprints")
@bp.route(route="blueprints", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def list_catalog(req: func.HttpRequest) -> func.HttpResponse:
    try:
        return _json_list(list_blueprints(get_plan_service().store))
    except LaunchOSError as exc:
        return _error_response(exc)


@bp.function_name(name="generate_plan")
@bp.route(route="plans", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
async def generate_plan(req: func.HttpRequest) -> func.HttpResponse:
    start = perf_counter()
    parsed, bad = _parse(req, GeneratePlanRequest)
    if bad is not None:
        return bad
    brief = parsed.brief
    service = get_plan_service()
    try:
        expert = service.store.get_expert(brief.expertId)
        team = service.list_team()
        if parsed.teamIds is not None:
            wanted = set(parsed.teamIds)
            team = [m for m in team if m.id in wanted]
        blueprint = get_blueprint(service.store, brief.blueprintId) if brief.blueprintId else None
        if service.drafter is None:
            service.drafter = FoundryStrategistAgent()
        plan = await service.generate_plan(brief, expert, team, blueprint)
    except LaunchOSError as exc:
        return _error_response(exc)
    log_info(plan.id, "http:plan_generated", durationMs=int((perf_counter() - start) * 1000))
    return _json(plan, 201)


@bp.function_name(name="load_plan")
@bp.route(route="plans/{plan_id}", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def load_plan(req: func.HttpRequest) -> func.HttpResponse:
    plan_id = req.route_params.get("plan_id")
    try:
        return _json(get_plan_service().load_plan(plan_id))
    except LaunchOSError as exc:
        return _error_response(exc, plan_id)


@bp.function_name(name="mutate_task")
@bp.route(route="plans/{plan_id}/tasks/{task_id}", methods=["PATCH"], auth_level=func.AuthLevel.FUNCTION)
def mutate_task(req: func.HttpRequest) -> func.HttpResponse:
    plan_id = req.route_params.get("plan_id")
    task_id = req.route_params.get("task_id")
    parsed, bad = _parse(req, MutateTaskRequest)
    if bad is not None:
        return bad
    try:
        plan = get_plan_service().mutate_task(parsed.actor, plan_id, task_id, parsed.patch)
    except LaunchOSError as exc:
        return _error_response(exc, plan_id)
    return _json(plan)


@bp.function_name(name="delete_plan")
@bp.route(route="plans/{plan_id}", methods=["DELETE"], auth_level=func.AuthLevel.FUNCTION)
def delete_plan(req: func.HttpRequest) -> func.HttpResponse:
    plan_id = req.route_params.get("plan_id")
    if req.headers.get(ACTOR_HEADER) != ADMIN:
        err = ErrorResponse(message="Only the admin may delete a launch", errorCode="PERMISSION_DENIED")
        return _json(err, 403)
    try:
        get_plan_service().delete_plan(plan_id)
    except LaunchOSError as exc:
        return _error_response(exc, plan_id)
    return _json(DeletePlanResponse(planId=plan_id))
