"""
NetSnmp - Module Entry Point.

Allows running the scanner as a module:
    python -m netsnmp scan <networks...>
    python -m netsnmp neighbors <switches...>
    python -m netsnmp test <target>
"""

import sys

from netsnmp.cli import main

if __name__ == '__main__':
    sys.exit(main())
