"""Helpers for reading loosely-typed JSON values coming from LLM output."""

import math
from typing import Any


def is_missing(value: Any) -> bool:
    """True for the values JSON producers use to mean "not there".

    ``None``, ``False``, zero, NaN and the empty string count as missing. Empty
    lists and objects do not: ``"whatYouNeed": []`` is a present (if short) list.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def json_type_name(value: Any) -> str:
    """Name a Python value by its JSON type ("string", "object", ...)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
