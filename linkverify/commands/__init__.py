"""Command implementations for linkverify CLI."""

from .check import check

__all__ = ["check"]
