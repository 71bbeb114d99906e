"""
Entry point for running zvpms as a module.

Usage: python -m zvpms [command] [options]
"""

from zvpms.cli.parser import main

if __name__ == "__main__":
    main()
