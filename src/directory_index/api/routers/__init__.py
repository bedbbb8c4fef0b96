"""API routers."""

from . import businesses, categories, management, search

__all__ = ["businesses", "categories", "management", "search"]
