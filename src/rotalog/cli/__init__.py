"""Command-line bootstrap."""
