"""Command-line front end for SourcePkg.

This package contains:
- cli: argparse entry point (search, list, tags, install, help)
- pipeline: Component wiring and the resolve -> download -> extract pipeline
"""

__all__ = [
    "cli",
    "pipeline",
]
