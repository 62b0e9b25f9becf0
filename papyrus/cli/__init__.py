"""Papyrus command line interface."""

from .cli import main

__all__ = ["main"]
