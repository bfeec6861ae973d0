"""
Module execution entry point.

Allows running with: python -m basket_cli
"""

import sys
from basket_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
