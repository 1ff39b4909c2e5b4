"""Exit-code constants used by the CLI layer.

Every exit path uses one of these values rather than a bare integer.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed without error."""

GENERAL_ERROR: int = 1
"""A known JxError was caught and its message displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C outside a progress display (128 + SIGINT)."""
