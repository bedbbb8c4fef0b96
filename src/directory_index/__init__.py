"""directory-index - secondary indexes and relevance ranking for a business directory."""

__version__ = "0.3.0"
