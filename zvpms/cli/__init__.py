"""
zvpms CLI module.

This module provides the command-line interface for zvpms.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
