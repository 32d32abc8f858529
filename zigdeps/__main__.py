"""
Executable module for zigdeps.

Running ``python -m zigdeps`` is equivalent to ``zigdeps``.
"""

from __future__ import annotations

import sys


def main() -> int:
    """Forward to the CLI entry point and return its exit code."""
    from zigdeps.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
