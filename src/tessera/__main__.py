"""Allow ``python -m tessera``."""

from tessera.cli.app import app

app()
