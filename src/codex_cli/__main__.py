"""
Main entry point for codex-cli.

This module allows the CLI to be run as:
    python -m codex_cli
"""

from .cli.main import main

if __name__ == "__main__":
    main()
