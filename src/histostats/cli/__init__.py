"""Command-line interface for histostats."""
