"""Channel Digest: event-driven pipeline resolving YouTube channels and listing their latest videos."""

__version__ = "0.1.0"
