"""Console output formatting utilities for smmake."""

from __future__ import annotations

import sys
import threading
from typing import Iterable, Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show debug lines and stack traces
        """
        self.debug = debug
        # Targets run on many threads; keep each message on its own line.
        self._lock = threading.Lock()

    def _emit(self, text: str, err: bool = False) -> None:
        stream = sys.stderr if err else sys.stdout
        with self._lock:
            print(text, file=stream, flush=True)

    def print_command(self, text: str) -> None:
        """Echo a command line before it runs."""
        self._emit(text)

    def print_targets(self, names: Iterable[str]) -> None:
        """Print one target name per line."""
        for name in names:
            self._emit(name)

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
        self._emit(f"ERROR: {title}", err=True)
        self._emit(message, err=True)
        if details:
            for detail in details:
                self._emit(f"  {detail}", err=True)
        if suggestion:
            self._emit(f"\n{suggestion}", err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            self._emit(f"Error: {exc}", err=True)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._emit(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._emit(f"[DEBUG] {message}", err=True)


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
