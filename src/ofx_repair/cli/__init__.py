"""Command-line interface module for ofx-repair.

This module provides the ``ofx-repair`` tool for repairing malformed
statement downloads and summarizing the statements they contain.
"""

from .main import main

__all__ = ["main"]
