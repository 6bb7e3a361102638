"""CLI module for benchledger.

This module provides the command-line interface using Typer.
"""

from __future__ import annotations

from benchledger.cli.main import app

__all__ = ["app"]
