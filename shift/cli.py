"""Shift CLI.

Re-exports the CLI from shift.interfaces.cli so ``python -m shift.cli``
works.
"""

from shift.interfaces.cli import app
from shift.interfaces.cli.main import main

__all__ = ["app", "main"]

if __name__ == "__main__":
    main()
