import logging
from typing import Any, Dict, Optional


_LOGGER = logging.getLogger("launchos")


def log(level: int, plan_id: Optional[str], message: str, **dimensions: Any) -> None:
    dims: Dict[str, Any] = {"planId": plan_id} if plan_id else {}
    dims.update(dimensions)
    try:
        _LOGGER.log(level, message, extra={"custom_dimensions": dims})
    except Exception:
        # Fallback if extra/custom_dimensions not supported in the environment
        _LOGGER.log(level, f"{message} | {dims}")


def info(plan_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.INFO, plan_id, message, **dimensions)


def warning(plan_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.WARNING, plan_id, message, **dimensions)


def error(plan_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.ERROR, plan_id, message, **dimensions)
