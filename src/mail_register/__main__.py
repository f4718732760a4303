"""
Package entry point for python -m execution.

USAGE:
    python -m mail_register            # Print statistics report
    python -m mail_register report     # Print statistics report
    python -m mail_register dashboard  # Launch web dashboard
"""

import sys

from mail_register.cli import main

if __name__ == "__main__":
    sys.exit(main())
