"""Data-transfer objects mirroring SoundCloud API payloads."""

from pysoundcloud.models.base import str_or_none
from pysoundcloud.models.group import Group
from pysoundcloud.models.user import MiniUser

__all__ = ["Group", "MiniUser", "str_or_none"]
