"""Async config manager with file-based persistence.

Config is stored as JSON at ``~/.pysoundcloud/config.json``.  The manager
deep-merges user values over defaults and provides typed helpers for the
stored SoundCloud credentials and tokens.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional

import aiofiles

from pysoundcloud.config.defaults import DEFAULT_CONFIG

logger = logging.getLogger("pysoundcloud.config")

_PYSOUNDCLOUD_DIR = Path.home() / ".pysoundcloud"
_CONFIG_PATH = _PYSOUNDCLOUD_DIR / "config.json"

# Protects concurrent reads/writes.
_lock = asyncio.Lock()

_MISSING = object()


def _lookup(data: dict, keys: list[str]) -> Any:
    node: Any = data
    for k in keys:
        if not isinstance(node, dict) or k not in node:
            return _MISSING
        node = node[k]
    return node


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into a copy of *base*."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class Config:
    """Async configuration manager for pysoundcloud.

    Usage::

        cfg = await Config.load()
        client_id = cfg.get("auth.client_id")
        cfg.set("auth.redirect_uri", "http://localhost:8080/callback")
        await cfg.save()
    """

    __slots__ = ("_data", "_path")

    def __init__(self, data: dict, path: Path = _CONFIG_PATH) -> None:
        self._data = data
        self._path = path

    # ── Factory ─────────────────────────────────────────────────────

    @classmethod
    async def load(cls, path: Path | None = None) -> "Config":
        """Load config from disk, falling back to defaults if absent."""
        path = path or _CONFIG_PATH
        if path.exists():
            async with _lock:
                async with aiofiles.open(path, "r") as f:
                    raw = await f.read()
            try:
                user_data = json.loads(raw)
            except json.JSONDecodeError:
                user_data = {}
            data = _deep_merge(DEFAULT_CONFIG, user_data)
        else:
            data = copy.deepcopy(DEFAULT_CONFIG)
        return cls(data, path)

    @classmethod
    def defaults(cls, path: Path | None = None) -> "Config":
        """A fresh config holding only the defaults."""
        return cls(copy.deepcopy(DEFAULT_CONFIG), path or _CONFIG_PATH)

    # ── Persistence ─────────────────────────────────────────────────

    async def save(self) -> None:
        """Write the current config to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self._data, indent=2, default=str)
        async with _lock:
            async with aiofiles.open(self._path, "w") as f:
                await f.write(payload)

    # ── Accessors ───────────────────────────────────────────────────

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a value via dotted key, e.g. ``auth.client_id``."""
        node = _lookup(self._data, dotted_key.split("."))
        return default if node is _MISSING else node

    def set(self, dotted_key: str, value: Any) -> None:
        """Set a value via dotted key."""
        keys = dotted_key.split(".")
        node = self._data
        for k in keys[:-1]:
            if k not in node or not isinstance(node[k], dict):
                node[k] = {}
            node = node[k]
        node[keys[-1]] = value

    def unset(self, dotted_key: str) -> bool:
        """Restore *dotted_key* to its default, or drop it if it has none.

        Returns whether the key was present.
        """
        keys = dotted_key.split(".")
        node: Any = self._data
        for k in keys[:-1]:
            if not isinstance(node, dict) or k not in node:
                return False
            node = node[k]
        if not isinstance(node, dict) or keys[-1] not in node:
            return False
        default = _lookup(DEFAULT_CONFIG, keys)
        if default is _MISSING:
            del node[keys[-1]]
        else:
            node[keys[-1]] = copy.deepcopy(default)
        return True

    # ── Auth helpers ────────────────────────────────────────────────

    def has_credentials(self) -> bool:
        """Whether both the client id and secret are configured."""
        return bool(self.get("auth.client_id") and self.get("auth.client_secret"))

    @property
    def token_expiry(self) -> Optional[float]:
        """Stored access-token expiry in epoch seconds, ``None`` if unset."""
        raw = self.get("auth.token_expiry")
        if raw is None or raw == "":
            return None
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.warning("ignoring unreadable auth.token_expiry %r", raw)
            return None

    @property
    def data(self) -> dict:
        """Return the raw config dict (read-only view)."""
        return self._data

    @property
    def path(self) -> Path:
        return self._path

    @staticmethod
    def config_path() -> Path:
        return _CONFIG_PATH

    @staticmethod
    def is_known_key(dotted_key: str) -> bool:
        """Whether *dotted_key* names a setting that has a default."""
        return _lookup(DEFAULT_CONFIG, dotted_key.split(".")) is not _MISSING
