"""Entry point for the Shift CLI.

Usage:
    python -m shift.interfaces.cli.main

Or via installed entry point:
    st <command>
"""

from shift.interfaces.cli import app


def main() -> None:
    """Run the Shift CLI application."""
    app()


if __name__ == "__main__":
    main()
