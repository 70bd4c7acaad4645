"""Representation of a SoundCloud user as embedded in other resources.

See https://developers.soundcloud.com/docs/api/reference#users
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional

from pysoundcloud.models.base import str_or_none


@dataclass
class MiniUser:
    """Lightweight user record (``creator``, ``user`` and friends)."""

    id: Optional[str] = None
    kind: Optional[str] = None
    permalink: Optional[str] = None
    username: Optional[str] = None
    last_modified: Optional[str] = None
    uri: Optional[str] = None
    permalink_url: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MiniUser":
        """Build from a decoded JSON object, ignoring unknown keys."""
        return cls(**{f.name: str_or_none(data.get(f.name)) for f in fields(cls)})
