"""HomeTouch deploy entry point.

Usage::

    python -m htdeploy <ip> <name> [--manager ADDR] [--dry-run]
"""

from htdeploy.cli import main

if __name__ == "__main__":
    main()
