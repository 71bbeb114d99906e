"""
Entry point for running the zvpms CLI as a module.

Usage: python -m zvpms.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
