import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from launchos.shared.logging_utils import info as log_info
from launchos.specs.common.errors import StoreError
from .base import PlanStore

# Use a temp-based directory by default to avoid Azure Functions
# file-watcher restarts when writing local state.
_DEFAULT_STATE_BASE = Path(tempfile.gettempdir()) / "launchos-runtime"


class FilePlanStore(PlanStore):
    """Single JSON file holding every record family.

    Local fallback for development and tests; not safe for concurrent writers.
    """

    def __init__(self, state_dir: Optional[Path] = None) -> None:
        base = state_dir or Path(os.getenv("LAUNCHOS_STATE_DIR", str(_DEFAULT_STATE_BASE)))
        self.path = Path(base) / "store.json"
        log_info(None, "store:file:init", path=str(self.path))

    def _read_all(self) -> Dict[str, Dict[str, dict]]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read store file {self.path}: {exc}") from exc

    def _write_all(self, data: Dict[str, Dict[str, dict]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write store file {self.path}: {exc}") from exc

    def _list(self, family: str) -> List[Dict[str, Any]]:
        return list(self._read_all().get(family, {}).values())

    def _get(self, family: str, item_id: str) -> Optional[Dict[str, Any]]:
        return self._read_all().get(family, {}).get(item_id)

    def _put(self, family: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        data = self._read_all()
        data.setdefault(family, {})[doc["id"]] = doc
        self._write_all(data)
        return copy.deepcopy(doc)

    def _remove(self, family: str, item_id: str) -> None:
        data = self._read_all()
        if data.get(family, {}).pop(item_id, None) is not None:
            self._write_all(data)
