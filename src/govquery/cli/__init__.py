"""Command-line interface for govquery."""
