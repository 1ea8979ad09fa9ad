"""Command line interface: sub-commands and the interactive shell."""

from .app import main

__all__ = ["main"]
