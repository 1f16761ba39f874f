"""
Search capability for page objects.

Public API: `from webharness.features.search import SearchPage, Searchable, supports_search`.
"""

from .service import BasePage, SearchPage, Searchable, supports_search

__all__ = ["BasePage", "SearchPage", "Searchable", "supports_search"]
