"""Command-line interface for orgdo."""
