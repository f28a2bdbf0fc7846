"""Gleaner: declarative XPath extraction with fallback selectors, pipes and pagination."""

from gleaner.config import EnvMapping, load_config, parse_config
from gleaner.core.extraction import PatternExtractor, extract_records, to_models
from gleaner.core.fetcher import HTMLFetcher, SimpleFetcher, create_fetcher
from gleaner.core.pagination import PaginationTraverser, enumerate_pages, follow_next_links, traverse
from gleaner.core.pipes import PipeContext, PipeRegistry, get_pipe, list_pipes, register_pipe, unregister_pipe
from gleaner.core.scraper import Scraper, url_to_json
from gleaner.core.selector import JSONOptions, SelectorResolver, document_to_dict, document_to_json, parse_document
from gleaner.core.verification import SelectorVerifier
from gleaner.exceptions import (
    ConfigError,
    FetchError,
    GleanerError,
    PaginationError,
    ParseError,
    PipeError,
    RecordValidationError,
    SelectorSyntaxError,
    UnknownPipeError,
)
from gleaner.models import (
    ContainerDescriptor,
    ContentMode,
    FetchResult,
    FetchSettings,
    FieldDescriptor,
    Multiplicity,
    PageResult,
    PaginatedResults,
    PaginationConfig,
    PipeInvocation,
    ScrapeConfig,
    StopReason,
    TraversalOutcome,
    TraversalStatus,
    ValidationReport,
)

__version__ = '0.1.0'

__all__ = [
    'ConfigError',
    'ContainerDescriptor',
    'ContentMode',
    'EnvMapping',
    'FetchError',
    'FetchResult',
    'FetchSettings',
    'FieldDescriptor',
    'GleanerError',
    'HTMLFetcher',
    'JSONOptions',
    'Multiplicity',
    'PageResult',
    'PaginatedResults',
    'PaginationConfig',
    'PaginationError',
    'PaginationTraverser',
    'ParseError',
    'PatternExtractor',
    'PipeContext',
    'PipeError',
    'PipeInvocation',
    'PipeRegistry',
    'RecordValidationError',
    'ScrapeConfig',
    'Scraper',
    'SelectorResolver',
    'SelectorSyntaxError',
    'SelectorVerifier',
    'SimpleFetcher',
    'StopReason',
    'TraversalOutcome',
    'TraversalStatus',
    'UnknownPipeError',
    'ValidationReport',
    'create_fetcher',
    'document_to_dict',
    'document_to_json',
    'enumerate_pages',
    'extract_records',
    'follow_next_links',
    'get_pipe',
    'list_pipes',
    'load_config',
    'parse_config',
    'parse_document',
    'register_pipe',
    'to_models',
    'traverse',
    'unregister_pipe',
    'url_to_json',
]
