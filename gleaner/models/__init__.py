"""Pydantic models for descriptors and results."""

from gleaner.models.descriptors import (
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGINATION_TIMEOUT,
    ContainerDescriptor,
    ContentMode,
    FetchSettings,
    FieldDescriptor,
    Multiplicity,
    PaginationConfig,
    PipeInvocation,
    ScrapeConfig,
)
from gleaner.models.results import (
    ContentMetadata,
    FetchResult,
    PageResult,
    PaginatedResults,
    Record,
    SelectorCheck,
    StopReason,
    TraversalOutcome,
    TraversalStatus,
    ValidationReport,
)

__all__ = [
    'DEFAULT_MAX_PAGES',
    'DEFAULT_PAGINATION_TIMEOUT',
    'ContainerDescriptor',
    'ContentMode',
    'FetchSettings',
    'FieldDescriptor',
    'Multiplicity',
    'PaginationConfig',
    'PipeInvocation',
    'ScrapeConfig',
    'ContentMetadata',
    'FetchResult',
    'PageResult',
    'PaginatedResults',
    'Record',
    'SelectorCheck',
    'StopReason',
    'TraversalOutcome',
    'TraversalStatus',
    'ValidationReport',
]
