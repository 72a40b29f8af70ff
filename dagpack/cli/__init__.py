"""Command-line interface for DagKit."""
