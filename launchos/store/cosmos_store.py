import os
from typing import Any, Dict, List, Optional

from azure.cosmos import exceptions

from launchos.shared.cosmos_client import CosmosDBClient, RetryableCosmosError, get_cosmos_client
from launchos.shared.logging_utils import error as log_error, info as log_info
from launchos.specs.common.errors import StoreError
from .base import PlanStore
from .file_store import FilePlanStore

# Cosmos bookkeeping fields that must not leak into domain records
_SYSTEM_FIELDS = ("_rid", "_self", "_etag", "_attachments", "_ts", "partitionKey")


def _strip(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in _SYSTEM_FIELDS}


class CosmosPlanStore(PlanStore):
    """Record families as Cosmos containers partitioned on /id."""

    def __init__(self, client: Optional[CosmosDBClient] = None) -> None:
        self._client = client or get_cosmos_client()
        log_info(None, "store:cosmos:init", database=self._client.database_name)

    def _call(self, action: str, family: str, fn, *args):
        try:
            return fn(*args)
        except (exceptions.CosmosHttpResponseError, RetryableCosmosError) as exc:
            log_error(None, "store:cosmos:failed", action=action, container=family, error=str(exc))
            raise StoreError(
                f"Cosmos {action} failed on '{family}': {exc}",
                details={"container": family, "action": action},
            ) from exc

    def _list(self, family: str) -> List[Dict[str, Any]]:
        items = self._call("list", family, self._client.query_items, family, "SELECT * FROM c")
        return [_strip(item) for item in items]

    def _get(self, family: str, item_id: str) -> Optional[Dict[str, Any]]:
        item = self._call("read", family, self._client.get_item, family, item_id)
        return _strip(item) if item else None

    def _put(self, family: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        body = dict(doc)
        body.setdefault("partitionKey", body["id"])
        return _strip(self._call("upsert", family, self._client.upsert_item, family, body))

    def _remove(self, family: str, item_id: str) -> None:
        self._call("delete", family, self._client.delete_item, family, item_id)


def select_store() -> PlanStore:
    """Pick the backend from LAUNCHOS_STORE_BACKEND (file, cosmos or auto)."""
    backend = os.getenv("LAUNCHOS_STORE_BACKEND", "auto").lower()
    if backend == "file":
        return FilePlanStore()
    if backend == "cosmos":
        return CosmosPlanStore()
    # auto-detect cosmos if config present
    if os.getenv("COSMOS_DB_CONNECTION_STRING") and os.getenv("COSMOS_DB_NAME"):
        return CosmosPlanStore()
    return FilePlanStore()
