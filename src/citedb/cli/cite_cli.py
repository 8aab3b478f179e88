#!/usr/bin/env python3
"""CLI entry point for the citedb command."""

import sys


def main() -> None:
    """Entry point for citedb command."""
    from citedb.cite import main as cite_main

    sys.exit(cite_main())


if __name__ == "__main__":
    main()
