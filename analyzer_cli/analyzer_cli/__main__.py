"""Entry point for `python -m analyzer_cli` and `sql-analyzer` console script."""

from __future__ import annotations

from analyzer_cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
