"""HTTP API for directory-index."""
