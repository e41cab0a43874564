"""Shift - event-sourced personal task time tracking."""

__version__ = "0.4.0"
