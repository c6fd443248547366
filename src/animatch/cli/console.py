"""Console utilities for CLI commands.

* ``ConsoleManager`` yields a Rich :class:`~rich.console.Console` configured for
  the current environment, with pretty tracebacks installed.
* Rich styling is disabled by the ``--no-rich`` flag (which sets
  ``ANIMATCH_NO_RICH``) or by that variable being set externally.
* ``is_interactive`` tells commands whether they may prompt the user.
"""

from __future__ import annotations

import os
import sys
from contextlib import AbstractContextManager
from typing import Any, Dict

from rich.console import Console
from rich.traceback import install as install_rich_traceback

__all__ = ["ConsoleManager", "is_interactive", "rich_enabled"]

_ENV_DISABLE_RICH = "ANIMATCH_NO_RICH"
_DISABLE_VALUES = {"1", "true", "yes"}


def rich_enabled() -> bool:
    """Return False when Rich output has been disabled via the environment."""
    return os.getenv(_ENV_DISABLE_RICH, "0").lower() not in _DISABLE_VALUES


def is_interactive() -> bool:
    """Return True when prompts make sense (a TTY, not CI, Rich enabled)."""
    if not rich_enabled() or os.getenv("CI"):
        return False
    return sys.stdin.isatty()


class ConsoleManager(AbstractContextManager):
    """Context manager that yields a configured Rich :class:`Console`.

    Parameters
    ----------
    record:
        Forwarded to :class:`rich.console.Console` so tests can read the
        output back with ``console.export_text``.
    force_use:
        Force Rich styling on (*True*) or off (*False*). *None* autodetects
        via ``ANIMATCH_NO_RICH``.
    """

    def __init__(
        self,
        *,
        record: bool = False,
        force_use: bool | None = None,
        **console_kwargs: Any,
    ) -> None:
        self._record = record
        self._force_use = force_use
        self._console_kwargs: Dict[str, Any] = console_kwargs
        self.console: Console | None = None

    def __enter__(self) -> Console:
        use_rich = self._force_use if self._force_use is not None else rich_enabled()
        if use_rich:
            self.console = Console(record=self._record, **self._console_kwargs)
        else:
            self.console = Console(
                record=self._record,
                color_system=None,
                force_terminal=False,
                **self._console_kwargs,
            )
        install_rich_traceback(show_locals=False, console=self.console)
        return self.console

    def __exit__(self, exc_type, exc_val, exc_tb):  # type: ignore[override]
        if self.console is not None:
            self.console.file.flush()
        # Exceptions (including typer.Exit) propagate.
        return False
