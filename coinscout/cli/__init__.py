"""CLI commands for CoinScout.

This package provides the command-line interface for scanning and
inspecting asset snapshot files.
"""

from coinscout.cli.main import cli, main

__all__ = ["cli", "main"]
