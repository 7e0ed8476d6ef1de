"""Command-line interface for mongoconf."""
