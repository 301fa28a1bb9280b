"""
Main entry point for the Battle Backgrounds package.

This module allows the package to be run as a module using:
python -m battle_backgrounds [args]
"""

import sys

from battle_backgrounds.main import main

if __name__ == "__main__":
    sys.exit(main())
