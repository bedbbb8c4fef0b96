"""Command line interface for directory-index."""
