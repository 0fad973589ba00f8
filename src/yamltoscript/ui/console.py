"""Console output formatting utilities for yaml-to-script."""

from __future__ import annotations

import sys
from typing import Optional

import click


def colorize(text: str, color: Optional[str]) -> str:
    """
    Wrap text in ANSI colour codes (reset afterwards).

    Returns the text unchanged for color=None. Does not print anything.
    """
    if not color:
        return text
    return click.style(text, fg=color)


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, color: bool = True):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            color: If False, never emit ANSI colour codes
        """
        self.debug = debug
        self.color = color

    def _style(self, text: str, color: Optional[str]) -> str:
        return colorize(text, color) if self.color else text

    def print_info(self, message: str, color: Optional[str] = None) -> None:
        """Print informational message."""
        print(self._style(message, color))

    def print_warning(self, message: str) -> None:
        print(self._style(f"Warning: {message}", "yellow"))

    def print_success(self, message: str) -> None:
        print(self._style(message, "green"))

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(self._style(f"\nERROR: {title}", "red"), file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
