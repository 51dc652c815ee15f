"""Package entry point for ``python -m autorenew_reconciler``."""
from __future__ import annotations

import sys

from . import cli


def main(argv: list[str] | None = None) -> int:
    """Invoke the reconciler CLI with the program name set for help output."""

    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] in {"-h", "--help"}:
        parser = cli.build_parser(prog="python -m autorenew_reconciler")
        parser.print_help()
        return 0

    return cli.main(argv)


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
