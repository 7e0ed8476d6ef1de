"""Utility helpers shared by the configuration engine and the CLI."""
