"""Entry point for `python -m querygraph_cli` and `querygraph` console script."""

from __future__ import annotations

from querygraph_cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
