"""CLI command modules for Shift.

- tracking: commands that write to the event log
- reports: read-only views and configuration
"""

from shift.interfaces.cli.commands import reports, tracking

__all__ = ["tracking", "reports"]
