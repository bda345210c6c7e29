"""Command-line entry points, run with ``python -m scripts.<name>``."""
