"""Pagination traversal and URL helpers."""

from gleaner.core.pagination.traversal import (
    PaginationTraverser,
    enumerate_pages,
    follow_next_links,
    link_value,
    traverse,
)
from gleaner.core.pagination.urls import normalize_url, resolve_url

__all__ = [
    'PaginationTraverser',
    'enumerate_pages',
    'follow_next_links',
    'link_value',
    'normalize_url',
    'resolve_url',
    'traverse',
]
