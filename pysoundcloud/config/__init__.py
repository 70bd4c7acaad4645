"""Config system — async config loader/saver with defaults merging."""

from pysoundcloud.config.config import Config
from pysoundcloud.config.defaults import DEFAULT_CONFIG

__all__ = ["Config", "DEFAULT_CONFIG"]
