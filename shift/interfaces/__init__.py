"""Interfaces layer for Shift.

Adapters for external interaction. Currently only the Typer CLI, which
is responsible for:
- Parsing arguments and timestamps
- Calling application services
- Rendering sessions and mapping errors to exit codes
"""

from shift.interfaces.cli import app

__all__ = ["app"]
