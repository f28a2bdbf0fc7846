"""Configured entry point tying extraction, fetching and pagination together."""

import logging
from typing import Any

import logfire
from pydantic import BaseModel

from gleaner.core.extraction import PatternExtractor, to_models
from gleaner.core.fetcher import HTMLFetcher, create_fetcher
from gleaner.core.pagination import PaginationTraverser
from gleaner.core.pipes import PipeRegistry, check_pipes
from gleaner.core.selector import JSONOptions, document_to_json, parse_document
from gleaner.core.verification import SelectorVerifier
from gleaner.exceptions import ConfigError, FetchError, PaginationError
from gleaner.models.descriptors import FetchSettings, ScrapeConfig
from gleaner.models.results import PaginatedResults, TraversalOutcome, TraversalStatus, ValidationReport

logger = logging.getLogger(__name__)


def fetch_document(fetcher: HTMLFetcher, url: str) -> Any:
    """Fetch a URL with the given fetcher and parse the body.

    Raises:
        FetchError: If the fetch fails
        ParseError: If the body cannot be parsed

    """
    result = fetcher.fetch(url)
    if not result.success:
        raise FetchError(url, result.error or 'empty response', result.status_code)
    logger.debug(f'Fetched {url} ({result.metadata.content_length} chars in {result.fetch_time:.2f}s)')
    return parse_document(result.html)


class Scraper:
    """Runs a scrape config against documents, URLs and paginated listings.

    The config is validated, selector syntax included, when the scraper is
    created, so configuration problems never surface mid-run.

    Attributes:
        config: Validated scrape config
        fetcher: Transport for URL-based methods
        extractor: Record extractor
        verifier: Selector verifier used by validate()
        logger: Logger instance for detailed run tracking

    """

    def __init__(
        self,
        config: ScrapeConfig,
        fetcher: HTMLFetcher | None = None,
        registry: PipeRegistry | None = None,
        verifier: SelectorVerifier | None = None,
    ):
        """Initialize the scraper.

        Args:
            config: Scrape config
            fetcher: Transport, defaults to a SimpleFetcher built from config.fetch
            registry: Pipe registry, defaults to the process-wide one
            verifier: Selector verifier, defaults to one without console output

        Raises:
            ConfigError: If any selector does not compile
            UnknownPipeError: If a field or pagination pipe is not registered

        """
        self.config = config.validate_for_run()
        self.extractor = PatternExtractor(registry=registry)
        self.extractor.require_pipes(config.fields)
        if config.pagination:
            check_pipes(config.pagination.pipes, self.extractor.registry)
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or create_fetcher('simple', settings=config.fetch)
        self.verifier = verifier or SelectorVerifier()
        self.logger = logging.getLogger(__name__)

    def close(self) -> None:
        """Close the fetcher if this scraper created it."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def scrape_html(
        self, document: Any, base_url: str | None = None, model: type[BaseModel] | None = None
    ) -> list[Any]:
        """Extract records from a document.

        Args:
            document: Raw HTML/XML or a parsed tree
            base_url: URL of the document, used to resolve relative links
            model: Optional pydantic model each record is validated into

        Returns:
            Records in document order, as model instances when a model is given

        Raises:
            RecordValidationError: If a record does not fit the model

        """
        records = self.extractor.extract(document, self.config.container, self.config.fields, base_url=base_url)
        if model is None:
            return records
        return to_models(records, model)

    def fetch_document(self, url: str) -> Any:
        """Fetch and parse a URL.

        Raises:
            FetchError: If the fetch fails
            ParseError: If the body cannot be parsed

        """
        return fetch_document(self.fetcher, url)

    def scrape_url(self, url: str, model: type[BaseModel] | None = None) -> list[Any]:
        """Fetch a URL and extract records from it, optionally into a model."""
        with logfire.span('scrape_url', url=url):
            self.logger.info(f'Scraping {url}')
            records = self.scrape_html(self.fetch_document(url), base_url=url, model=model)
            self.logger.info(f'Extracted {len(records)} records from {url}')
            return records

    def _traverser(self) -> PaginationTraverser:
        return PaginationTraverser(self.config, fetcher=self.fetcher, extractor=self.extractor)

    def run_pages(self, start_url: str) -> TraversalOutcome:
        """Traverse a paginated listing and return the tagged outcome.

        Raises:
            ConfigError: If the config has no pagination section

        """
        return self._traverser().run(start_url)

    def scrape_pages(self, start_url: str) -> PaginatedResults:
        """Scrape every page of a listing.

        Without a pagination section only the start page is scraped.

        Returns:
            Pages gathered; bounded stops are returned normally

        Raises:
            PaginationError: If a page fails, with everything gathered before it

        """
        if self.config.pagination is None:
            results = PaginatedResults()
            results.add_page(start_url, 1, self.scrape_url(start_url))
            return results

        outcome = self.run_pages(start_url)
        if outcome.status == TraversalStatus.FAILED:
            raise PaginationError(
                failing_url=outcome.failing_url,
                failing_page_number=outcome.failing_page_number,
                partial_items=outcome.items,
                cause=outcome.error,
                partial_pages=outcome.results.pages,
            ) from outcome.error
        return outcome.results

    def extract_page_urls(self, start_url: str) -> list[str]:
        """List page URLs without scraping records.

        Numbered pagination returns the page links found on the start page.
        Next-link pagination follows the chain and returns every URL in it,
        the start URL first.

        Raises:
            ConfigError: If the config has no pagination section

        """
        pagination = self.config.pagination
        if pagination is None:
            raise ConfigError('pagination config is required')
        traverser = self._traverser()
        if pagination.type == 'numbered':
            return traverser.enumerate_pages(start_url)
        return traverser.follow_next_links(start_url)

    def validate(self, document: Any = None, url: str | None = None) -> ValidationReport:
        """Check the config's selectors against a document or a fetched URL.

        Args:
            document: Raw HTML/XML or a parsed tree; fetched from url when omitted
            url: Where the document lives

        Returns:
            ValidationReport with one check per selector

        """
        if document is None:
            if url is None:
                raise ValueError('validate needs a document or a url')
            document = self.fetch_document(url)
        return self.verifier.verify(document, self.config, url=url)


def url_to_json(
    url: str,
    options: JSONOptions | None = None,
    fetcher: HTMLFetcher | None = None,
    settings: FetchSettings | None = None,
) -> str:
    """Fetch a page and convert its whole document to JSON.

    Args:
        url: Page to fetch
        options: Conversion options
        fetcher: Transport; a SimpleFetcher is created (and closed) when omitted
        settings: Fetch settings for the created fetcher

    Returns:
        JSON string of the document tree

    Raises:
        FetchError: If the fetch fails
        ParseError: If the body cannot be parsed

    """
    owned = fetcher is None
    fetcher = fetcher or create_fetcher('simple', settings=settings or FetchSettings())
    try:
        with logfire.span('url_to_json', url=url):
            return document_to_json(fetch_document(fetcher, url), options)
    finally:
        if owned:
            fetcher.close()
