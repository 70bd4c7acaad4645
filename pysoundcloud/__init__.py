"""pysoundcloud — a small SDK for the SoundCloud web API."""

__version__ = "0.1.0"
