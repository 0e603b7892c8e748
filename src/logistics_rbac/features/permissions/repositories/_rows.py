"""Row helpers shared by the asyncpg repositories."""

import json
from typing import Any, Dict, Optional


def dump_json(value: Optional[Dict[str, Any]]) -> str:
    return json.dumps(value or {})


def load_json(value: Any) -> Dict[str, Any]:
    """asyncpg returns JSONB as text unless a codec is registered."""
    if value is None:
        return {}
    if isinstance(value, (bytes, str)):
        return json.loads(value)
    return dict(value)
