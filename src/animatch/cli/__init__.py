"""Command-line interface for animatch.

- app: the Typer application (see commands.py for every command).
- ConsoleManager: Rich console setup honouring ``--no-rich``.
"""

from animatch.cli.commands import app, main
from animatch.cli.console import ConsoleManager

__all__ = ["app", "main", "ConsoleManager"]
