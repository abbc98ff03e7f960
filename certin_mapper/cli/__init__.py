"""CLI module for certin-mapper.

This module provides the command-line interface. It supports both CLI
arguments and environment variables for configuration.
"""

from .main import build_config, cli, initialize_sentry, main

__all__ = [
    "cli",
    "main",
    "build_config",
    "initialize_sentry",
]
