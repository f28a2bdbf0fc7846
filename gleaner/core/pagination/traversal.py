"""Pagination traversal: follows next links or enumerates numbered pages."""

import logging
import time
from collections.abc import Callable
from typing import Any

import logfire

from gleaner.core.extraction import PatternExtractor
from gleaner.core.fetcher import HTMLFetcher, create_fetcher
from gleaner.core.pagination.urls import normalize_url, resolve_url
from gleaner.core.pipes import PipeContext, apply_pipes, check_pipes, stringify
from gleaner.core.selector import node_attribute, node_text, parse_document
from gleaner.exceptions import (
    ConfigError,
    FetchError,
    PaginationError,
    ParseError,
    PipeError,
    SelectorSyntaxError,
    UnknownPipeError,
)
from gleaner.models.descriptors import ScrapeConfig
from gleaner.models.results import PaginatedResults, StopReason, TraversalOutcome, TraversalStatus

logger = logging.getLogger(__name__)


def link_value(node: Any) -> str:
    """Raw link value of a matched node.

    Attribute and text selections yield their string; an element yields its
    ``href`` when it has one, otherwise its text.
    """
    href = node_attribute(node, 'href')
    if href is not None:
        return href.strip()
    return node_text(node)


class PaginationTraverser:
    """Walks the pages of a listing and extracts records from each.

    A traversal owns its own visited set and page counter, so one instance
    should not run concurrently with itself. Pages are fetched strictly in
    sequence.

    Attributes:
        config: Scrape config with a pagination section
        pagination: The pagination section of the config
        fetcher: Transport used for every page
        extractor: Record extractor applied to each page
        clock: Monotonic clock used for the wall-clock bound

    """

    def __init__(
        self,
        config: ScrapeConfig,
        fetcher: HTMLFetcher | None = None,
        extractor: PatternExtractor | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the traverser.

        Args:
            config: Scrape config; its pagination section is required
            fetcher: Transport, defaults to a SimpleFetcher built from config.fetch
            extractor: Record extractor, defaults to a PatternExtractor
            clock: Monotonic clock, injectable for tests

        Raises:
            ConfigError: If the config has no pagination section
            UnknownPipeError: If a field or pagination pipe is not registered

        """
        self.config = config
        self.pagination = config.require_pagination()
        self.extractor = extractor or PatternExtractor()
        self.extractor.require_pipes(config.fields)
        check_pipes(self.pagination.pipes, self.extractor.registry)
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or create_fetcher('simple', settings=config.fetch)
        self.clock = clock

    def close(self) -> None:
        """Close the fetcher if this traverser created it."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def run(self, start_url: str) -> TraversalOutcome:
        """Traverse from a start URL and report how the traversal ended.

        Next-link pagination follows the chain page by page. Numbered
        pagination scrapes the start page, then every page link found on it.
        Either way, reaching max_pages or the timeout is a bounded stop that
        keeps everything gathered, while a fetch or extraction failure is a
        failed stop carrying the partial results.

        Args:
            start_url: First page to fetch

        Returns:
            TraversalOutcome with status, stop reason and accumulated pages

        Raises:
            ConfigError: If the pagination type is not supported

        """
        with logfire.span(
            'traverse',
            start_url=start_url,
            pagination_type=self.pagination.type,
            max_pages=self.pagination.max_pages,
        ):
            logger.info(
                f'Pagination starting: {start_url} '
                f'(type={self.pagination.type}, max_pages={self.pagination.max_pages}, '
                f'timeout={self.pagination.timeout}s)'
            )
            if self.pagination.type == 'next-link':
                return self._run_next_link(start_url)
            if self.pagination.type == 'numbered':
                return self._run_numbered(start_url)
            raise ConfigError(f'unknown pagination type: {self.pagination.type}')

    def _run_next_link(self, start_url: str) -> TraversalOutcome:
        results = PaginatedResults()
        visited: set[str] = set()
        started = self.clock()
        url = start_url
        page_number = 1

        while True:
            stop = self._check_bounds(started, page_number)
            if stop:
                return self._finish(TraversalStatus.BOUNDED, stop, results, started)

            visited.add(normalize_url(url))
            try:
                root = self._scrape_page(url, page_number, results)
                next_url = self.find_next_url(root, url)
            except Exception as e:
                return self._fail(e, url, page_number, results, started)

            if next_url is None:
                return self._finish(TraversalStatus.COMPLETED, StopReason.NO_NEXT_LINK, results, started)
            if normalize_url(next_url) in visited:
                logger.warning(f'Pagination cycle detected: {next_url} already visited')
                return self._finish(TraversalStatus.COMPLETED, StopReason.CYCLE, results, started)

            logger.info(f'Pagination following next link: {next_url}')
            url = next_url
            page_number += 1

    def _run_numbered(self, start_url: str) -> TraversalOutcome:
        results = PaginatedResults()
        started = self.clock()

        stop = self._check_bounds(started, 1)
        if stop:
            return self._finish(TraversalStatus.BOUNDED, stop, results, started)
        try:
            root = self._scrape_page(start_url, 1, results)
            urls = self.page_urls(root, start_url)
        except Exception as e:
            return self._fail(e, start_url, 1, results, started)

        seen = {normalize_url(start_url)}
        page_number = 1
        for url in urls:
            if normalize_url(url) in seen:
                continue
            seen.add(normalize_url(url))
            page_number += 1

            stop = self._check_bounds(started, page_number)
            if stop:
                return self._finish(TraversalStatus.BOUNDED, stop, results, started)
            try:
                self._scrape_page(url, page_number, results)
            except Exception as e:
                return self._fail(e, url, page_number, results, started)

        return self._finish(TraversalStatus.COMPLETED, StopReason.EXHAUSTED, results, started)

    def _check_bounds(self, started: float, page_number: int) -> StopReason | None:
        elapsed = self.clock() - started
        if elapsed >= self.pagination.timeout:
            logger.warning(f'Pagination timeout exceeded after {elapsed:.1f}s')
            return StopReason.TIMEOUT
        if page_number > self.pagination.max_pages:
            logger.warning(f'Pagination max pages reached ({self.pagination.max_pages})')
            return StopReason.MAX_PAGES
        return None

    def load(self, url: str) -> Any:
        """Fetch and parse one page.

        Raises:
            FetchError: If the fetch fails
            ParseError: If the body cannot be parsed

        """
        with logfire.span('fetch_page', url=url):
            result = self.fetcher.fetch(url)
        if not result.success:
            raise FetchError(url, result.error or 'empty response', result.status_code)
        return parse_document(result.html)

    def _scrape_page(self, url: str, page_number: int, results: PaginatedResults) -> Any:
        root = self.load(url)
        items = self.extractor.extract(root, self.config.container, self.config.fields, base_url=url)
        results.add_page(url, page_number, items)
        logger.info(f'Pagination page scraped: page {page_number} ({url}), {len(items)} items')
        return root

    def _finish(
        self, status: TraversalStatus, reason: StopReason, results: PaginatedResults, started: float
    ) -> TraversalOutcome:
        elapsed = self.clock() - started
        logger.info(
            f'Pagination complete: {results.total_pages} pages, {results.total_items} items '
            f'in {elapsed:.2f}s ({reason.value})'
        )
        logfire.info(
            'Pagination complete',
            status=status.value,
            stop_reason=reason.value,
            total_pages=results.total_pages,
            total_items=results.total_items,
        )
        return TraversalOutcome(status=status, stop_reason=reason, results=results, elapsed=elapsed)

    def _fail(
        self, error: Exception, url: str, page_number: int, results: PaginatedResults, started: float
    ) -> TraversalOutcome:
        logger.error(f'Pagination failed on page {page_number} ({url}): {error}')
        logfire.error('Pagination failed', url=url, page_number=page_number, error=str(error))
        return TraversalOutcome(
            status=TraversalStatus.FAILED,
            stop_reason=StopReason.ERROR,
            results=results,
            elapsed=self.clock() - started,
            error=error,
            failing_url=url,
            failing_page_number=page_number,
        )

    def _link_from_node(self, node: Any, base_url: str) -> str | None:
        raw = link_value(node)
        if not raw:
            return None
        try:
            processed = stringify(
                apply_pipes(raw, self.pagination.pipes, PipeContext(base_url=base_url), self.extractor.registry)
            ).strip()
        except UnknownPipeError:
            raise
        except PipeError as e:
            logger.debug(f'Skipping link {raw!r}: {e}')
            return None
        if not processed:
            return None
        try:
            return resolve_url(base_url, processed)
        except ValueError as e:
            logger.debug(f'Skipping unresolvable link {processed!r}: {e}')
            return None

    def find_next_url(self, root: Any, current_url: str) -> str | None:
        """Locate the absolute URL of the next page.

        Candidate selectors are tried in order and the first node of a
        matching selector is used. A candidate whose value is empty, fails its
        pipes or cannot be resolved is skipped in favour of the next one.

        Args:
            root: Parsed current page
            current_url: URL of the current page, used to resolve relative links

        Returns:
            Absolute next-page URL, or None when there is none

        Raises:
            UnknownPipeError: If a field or pagination pipe is not registered

        """
        resolver = self.extractor.resolver
        for selector in self.pagination.link_selectors:
            try:
                nodes = resolver.evaluate(selector, root)
            except SelectorSyntaxError as e:
                logger.debug(f'Skipping next selector: {e}')
                continue
            if not nodes:
                continue
            url = self._link_from_node(nodes[0], current_url)
            if url:
                return url
        return None

    def page_urls(self, root: Any, base_url: str) -> list[str]:
        """Every distinct page link on a page, in document order.

        Links are deduplicated by their normalized form; the first spelling
        seen is kept.
        """
        nodes = self.extractor.resolver.resolve(self.pagination.link_selectors, root)
        urls: list[str] = []
        seen: set[str] = set()
        for node in nodes:
            url = self._link_from_node(node, base_url)
            if not url:
                continue
            key = normalize_url(url)
            if key in seen:
                continue
            seen.add(key)
            urls.append(url)
        return urls

    def enumerate_pages(self, start_url: str) -> list[str]:
        """List page URLs linked from the start page (numbered pagination).

        Only the start page is fetched.

        Raises:
            ConfigError: If the pagination type is not numbered
            FetchError: If the start page cannot be fetched
            ParseError: If the start page cannot be parsed

        """
        if self.pagination.type != 'numbered':
            raise ConfigError(f'enumerating pages requires numbered pagination, got {self.pagination.type}')
        with logfire.span('enumerate_pages', start_url=start_url):
            urls = self.page_urls(self.load(start_url), start_url)
        logger.info(f'Found {len(urls)} page URLs on {start_url}')
        return urls

    def follow_next_links(self, start_url: str) -> list[str]:
        """Collect the chain of next-page URLs without extracting records.

        The start URL is always first. The chain ends at the last page, on a
        cycle, at max_pages, at the timeout, or quietly when a later page
        cannot be fetched.

        Raises:
            ConfigError: If the pagination type is not next-link
            FetchError: If the start page cannot be fetched

        """
        if self.pagination.type != 'next-link':
            raise ConfigError(f'following next links requires next-link pagination, got {self.pagination.type}')

        started = self.clock()
        urls: list[str] = []
        visited: set[str] = set()
        url = start_url
        with logfire.span('follow_next_links', start_url=start_url):
            root = self.load(start_url)
            while True:
                visited.add(normalize_url(url))
                urls.append(url)
                if self._check_bounds(started, len(urls) + 1):
                    break
                next_url = self.find_next_url(root, url)
                if next_url is None or normalize_url(next_url) in visited:
                    break
                try:
                    root = self.load(next_url)
                except (FetchError, ParseError) as e:
                    logger.warning(f'Stopping link chain at {next_url}: {e}')
                    break
                url = next_url
        return urls


def traverse(
    start_url: str,
    config: ScrapeConfig,
    fetcher: HTMLFetcher | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> PaginatedResults:
    """Run a traversal and return its results, raising on hard failure.

    Args:
        start_url: First page to fetch
        config: Scrape config with a pagination section
        fetcher: Transport, defaults to a SimpleFetcher built from config.fetch
        clock: Monotonic clock, injectable for tests

    Returns:
        Pages gathered; bounded stops are returned normally

    Raises:
        PaginationError: If a page fails, with everything gathered before it

    """
    with PaginationTraverser(config, fetcher=fetcher, clock=clock) as traverser:
        outcome = traverser.run(start_url)

    if outcome.status == TraversalStatus.FAILED:
        raise PaginationError(
            failing_url=outcome.failing_url,
            failing_page_number=outcome.failing_page_number,
            partial_items=outcome.items,
            cause=outcome.error,
            partial_pages=outcome.results.pages,
        ) from outcome.error
    return outcome.results


def enumerate_pages(start_url: str, config: ScrapeConfig, fetcher: HTMLFetcher | None = None) -> list[str]:
    """List page URLs linked from the start page (numbered pagination)."""
    with PaginationTraverser(config, fetcher=fetcher) as traverser:
        return traverser.enumerate_pages(start_url)


def follow_next_links(start_url: str, config: ScrapeConfig, fetcher: HTMLFetcher | None = None) -> list[str]:
    """Collect the chain of next-page URLs from a start page."""
    with PaginationTraverser(config, fetcher=fetcher) as traverser:
        return traverser.follow_next_links(start_url)
