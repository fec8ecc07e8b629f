"""Command-line interface for tailshift."""
