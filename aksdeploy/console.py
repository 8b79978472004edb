"""Shared rich console and logging setup."""
import logging

from rich.console import Console
from rich.logging import RichHandler

# Initialize Rich console
console = Console()


def configure_logging(debug: bool = False) -> None:
    """Route stdlib logging through rich.

    Args:
        debug: If True, log every external command and its captured output.
    """
    level = logging.DEBUG if debug else logging.WARNING
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(RichHandler(console=console, show_path=False, markup=False))
    root.setLevel(level)
