#!/usr/bin/env python
"""
Launcher script for the menu import command line.

This script ensures the package directory is on the Python path before
running the CLI from a source checkout.
"""

import sys
from pathlib import Path

# Add the src directory to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

# Now import and run the command line
from hotel_menu.utils.import_menu_cli import main

if __name__ == "__main__":
    sys.exit(main())
