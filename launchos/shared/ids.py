"""Identity generation for plans, phases, tasks and attachments."""
import random
import string
import time
import uuid
from typing import Any

PLACEHOLDER_ID = "undefined"

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def fallback_id() -> str:
    """Millisecond timestamp plus a random suffix.

    Used only when the uuid source is unavailable; two calls in the same
    millisecond collide with probability 36**-6.
    """
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choice(_BASE36) for _ in range(6))
    return f"id-{stamp}-{suffix}"


def generate_id() -> str:
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # os.urandom has no entropy source on this platform
        return fallback_id()


def is_valid_id(value: Any) -> bool:
    """True for a non-empty string that is not the placeholder."""
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return bool(stripped) and stripped != PLACEHOLDER_ID
