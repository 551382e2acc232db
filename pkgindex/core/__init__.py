"""Core utilities for SourcePkg.

- config: Configuration loading and section defaults
- network: HTTP session and timed single-attempt GET
- logs: Tagged logger wrapper and CLI logging setup
"""

__all__ = [
    "config",
    "network",
    "logs",
]
