"""
Module execution entry point.

Allows running with: python -m chainproof_cli
"""

import sys
from chainproof_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
