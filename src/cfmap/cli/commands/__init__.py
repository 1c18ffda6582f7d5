"""CLI command modules, one click command per module."""
