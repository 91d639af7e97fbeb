#!/usr/bin/env python3
"""
Generate JSON Schemas, YAML variants, and OpenAPI from Pydantic models.

Outputs under launchos/specs/:
 - schemas/*.json (and *.yaml)
 - openapi.yaml and openapi.json
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

try:
    import yaml  # type: ignore
except Exception as exc:  # pragma: no cover
    print("PyYAML is required: pip install pyyaml", file=sys.stderr)
    raise


ROOT = Path(__file__).resolve().parents[1]
SPECS = ROOT / "launchos" / "specs"
SCHEMAS_DIR = SPECS / "schemas"

sys.path.insert(0, str(ROOT))

from launchos.specs.models import SCHEMA_MODELS  # noqa: E402


# (path, method, operationId, summary, request schema name, success code, response schema name)
ROUTES = [
    ("/plans", "get", "listPlans", "List launch plans, newest first", None, "200", "ProjectSummary"),
    ("/plans", "post", "generatePlan", "Draft, normalize and store a new launch plan",
     "GeneratePlanRequest", "201", "Plan"),
    ("/plans/{plan_id}", "get", "loadPlan", "Load one normalized plan", None, "200", "Plan"),
    ("/plans/{plan_id}", "delete", "deletePlan", "Delete a plan with all phases, tasks and attachments",
     None, "200", "DeletePlanResponse"),
    ("/plans/{plan_id}/tasks/{task_id}", "patch", "mutateTask", "Change fields of one task as an actor",
     "MutateTaskRequest", "200", "Plan"),
    ("/blueprints", "get", "listBlueprints", "System and custom launch blueprints", None, "200", "Blueprint"),
]

ERROR_CODES = {
    "400": "Invalid JSON or request shape",
    "403": "Actor may not mutate this task",
    "404": "Plan or task not found",
    "409": "Status change not allowed",
    "502": "Drafting collaborator failed",
    "503": "Persistent store failed",
}


def write_json_yaml(obj: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    yaml_path = json_path.with_suffix(".yaml")
    with yaml_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False, allow_unicode=True)


def generate_model_schemas() -> None:
    for filename, model in SCHEMA_MODELS.items():
        schema = model.model_json_schema()
        write_json_yaml(schema, SCHEMAS_DIR / filename)


def _ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


def build_openapi() -> dict:
    # Inline the model schemas as OpenAPI components
    components = {
        "schemas": {model.__name__: model.model_json_schema() for model in SCHEMA_MODELS.values()}
    }

    paths: dict = {}
    for path, method, op_id, summary, request, code, response in ROUTES:
        op: dict = {"summary": summary, "operationId": op_id}
        params = [part[1:-1] for part in path.split("/") if part.startswith("{")]
        if params:
            op["parameters"] = [
                {"in": "path", "name": p, "required": True, "schema": {"type": "string"}} for p in params
            ]
        if method == "delete":
            op.setdefault("parameters", []).append(
                {"in": "header", "name": "x-launchos-actor", "required": True, "schema": {"type": "string"}}
            )
        if request:
            op["requestBody"] = {"required": True, "content": {"application/json": {"schema": _ref(request)}}}
        schema = _ref(response)
        if method == "get" and not params:
            schema = {"type": "array", "items": schema}
        op["responses"] = {code: {"description": "OK", "content": {"application/json": {"schema": schema}}}}
        for err_code, description in ERROR_CODES.items():
            op["responses"][err_code] = {
                "description": description,
                "content": {"application/json": {"schema": _ref("ErrorResponse")}},
            }
        paths.setdefault(path, {})[method] = op

    return {
        "openapi": "3.0.3",
        "info": {
            "title": "LaunchOS Functions API",
            "version": "0.1.0",
            "description": "HTTP endpoints exposed by the LaunchOS Azure Functions app.",
        },
        "servers": [
            {"url": "http://localhost:7071/api", "description": "Local Functions host"}
        ],
        "paths": paths,
        "components": components,
    }


def generate_openapi() -> None:
    spec = build_openapi()
    write_json_yaml(spec, SPECS / "openapi.json")


def main() -> None:
    generate_model_schemas()
    generate_openapi()
    print("Specs generated under launchos/specs/")


if __name__ == "__main__":
    main()
