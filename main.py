"""Command-line entrypoint for recipebook.

Installed environments use the ``recipebook`` console script; running
``python main.py <command> ...`` from a checkout does the same.
"""

import sys

from recipebook import main

if __name__ == "__main__":
    sys.exit(main())
