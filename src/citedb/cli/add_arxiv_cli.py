#!/usr/bin/env python3
"""CLI entry point for citedb-add-arxiv command.

Adds an arXiv paper to the citation database.
"""

import sys


def main() -> None:
    """Entry point for citedb-add-arxiv command."""
    from citedb.cite import main as cite_main

    sys.exit(cite_main(["add-arxiv", *sys.argv[1:]]))


if __name__ == "__main__":
    main()
