"""Entry point for ``python -m eapimgmt`` and the ``eapimgmt`` console script."""

from __future__ import annotations

import os
import sys

from tabulate import tabulate

from eapimgmt import __version__, configure_logging
from eapimgmt import glogger


def _print_startup_banner() -> None:
    startup_rows = [
        ["version", __version__],
        ["LOGURU_LEVEL", os.getenv("LOGURU_LEVEL", "")],
    ]

    host = os.environ.get("EAPI_HOST")
    if host:
        startup_rows.append(["EAPI_HOST", host])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "eapimgmt starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).debug(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Configure logging, show the banner and dispatch to the CLI."""
    configure_logging()
    _print_startup_banner()

    from eapimgmt.cli import main as cli_main

    cli_main(sys.argv[1:])


if __name__ == "__main__":
    main()
