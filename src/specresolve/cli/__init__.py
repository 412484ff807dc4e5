"""Command-line interface for specresolve."""
