"""Canonical scalar maps used for constraints, scopes and attributes.

Values are restricted to ``str``, ``int``, ``float``, ``bool`` and ``None``.
Comparison is tagged: a boolean never equals a number, numbers compare by
value across ``int``/``float``, and ``None`` only equals ``None``.
"""

import math
from typing import Any, Dict, Mapping, Optional, Union

from ....core.exceptions import InvalidConstraintError

Scalar = Union[str, int, float, bool, None]
ScalarMap = Dict[str, Scalar]

_MISSING = object()


def is_scalar(value: Any) -> bool:
    """Check whether a value is an allowed canonical scalar."""
    if value is None or isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return not math.isnan(value)
    return False


def normalize_scalar_map(values: Optional[Mapping[str, Any]], field_name: str = "constraints") -> ScalarMap:
    """Validate a scalar map and return a plain dict copy.

    Raises:
        InvalidConstraintError: if the map is not a mapping, has non-string
            keys, or holds a non-scalar value.
    """
    if values is None:
        return {}
    if not isinstance(values, Mapping):
        raise InvalidConstraintError(
            f"{field_name} must be a mapping, got {type(values).__name__}",
            details={"field": field_name}
        )

    normalized: ScalarMap = {}
    for key, value in values.items():
        if not isinstance(key, str) or not key:
            raise InvalidConstraintError(
                f"{field_name} keys must be non-empty strings",
                details={"field": field_name, "key": repr(key)}
            )
        if not is_scalar(value):
            raise InvalidConstraintError(
                f"{field_name}.{key} must be a string, number, boolean or null",
                details={"field": field_name, "key": key, "type": type(value).__name__}
            )
        normalized[key] = value
    return normalized


def scalars_equal(left: Any, right: Any) -> bool:
    """Tagged equality over canonical scalars."""
    if not (is_scalar(left) and is_scalar(right)):
        return False
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    return left == right


def matches(required: Mapping[str, Any], context: Mapping[str, Any]) -> bool:
    """Check that every required key is present in context with an equal value.

    An empty requirement matches any context.
    """
    for key, expected in required.items():
        actual = context.get(key, _MISSING)
        if actual is _MISSING or not scalars_equal(expected, actual):
            return False
    return True
