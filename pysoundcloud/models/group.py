"""Representation of a SoundCloud Group.

See https://developers.soundcloud.com/docs/api/reference#groups
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pysoundcloud.models.base import str_or_none
from pysoundcloud.models.user import MiniUser


@dataclass
class Group:
    id: Optional[str] = None
    created_at: Optional[str] = None
    permalink: Optional[str] = None
    name: Optional[str] = None
    short_description: Optional[str] = None
    description: Optional[str] = None
    uri: Optional[str] = None
    artwork_url: Optional[str] = None
    permalink_url: Optional[str] = None
    creator: Optional[MiniUser] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        creator = data.get("creator")
        return cls(
            id=str_or_none(data.get("id")),
            created_at=data.get("created_at"),
            permalink=data.get("permalink"),
            name=data.get("name"),
            short_description=data.get("short_description"),
            description=data.get("description"),
            uri=data.get("uri"),
            artwork_url=data.get("artwork_url"),
            permalink_url=data.get("permalink_url"),
            creator=MiniUser.from_dict(creator) if isinstance(creator, dict) else None,
        )
