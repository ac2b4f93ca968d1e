from __future__ import annotations

import re
import uuid
from typing import Any

from .results import IdentityGenerationError

ID_LENGTH = 36

_CANONICAL_ID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def generate_id() -> str:
    """Return a new random identifier in lowercase 8-4-4-4-12 form."""

    try:
        value = uuid.uuid4()
    except (OSError, NotImplementedError) as exc:
        raise IdentityGenerationError("random source unavailable") from exc
    return str(value).lower()


def is_canonical_id(value: Any) -> bool:
    """True for a 36-character lowercase hyphenated UUID string."""
    return isinstance(value, str) and len(value) == ID_LENGTH and bool(_CANONICAL_ID_RE.match(value))
