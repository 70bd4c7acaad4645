"""Async client for the SoundCloud REST API."""

from pysoundcloud.api.client import SoundCloudClient

__all__ = ["SoundCloudClient"]
