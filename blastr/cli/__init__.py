"""Command-line interface for blastr."""
