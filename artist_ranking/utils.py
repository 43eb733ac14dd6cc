"""Utility helpers for the ranking backend."""
from __future__ import annotations

import math
from typing import Any, Optional


def clean_query(value: Optional[str]) -> str:
    """Collapse whitespace in a free-text query; ``None`` becomes ``""``."""

    if not value:
        return ""
    return " ".join(value.split())


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid popularity
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value)
