"""Entry point for ``python -m meshmetrics``."""

from meshmetrics.cli.commands import app

if __name__ == "__main__":
    app()
