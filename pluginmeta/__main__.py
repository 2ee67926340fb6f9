"""
Entry point for running pluginmeta as a module.

Usage:
    python -m pluginmeta package.zip [options]
"""

import sys

from pluginmeta.cli import main

if __name__ == "__main__":
    sys.exit(main())
