"""Helpers shared by the API models."""

from __future__ import annotations

from typing import Any, Optional


def str_or_none(value: Any) -> Optional[str]:
    """Text form of a JSON scalar, keeping ``None`` as is.

    The API returns numeric ids; models keep every field as text.
    """
    if value is None:
        return None
    return str(value)
