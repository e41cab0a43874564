"""Domain layer for Shift.

Pure models and functions over the task event log. Nothing in this
package performs I/O.
"""
