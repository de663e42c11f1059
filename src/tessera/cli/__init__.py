"""tessera command-line interface."""
