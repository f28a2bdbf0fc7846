"""Result containers for fetches, traversals and selector verification."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

Record = dict[str, Any]


@dataclass
class ContentMetadata:
    """Metadata about fetched content.

    Attributes:
        content_type: 'html' or 'xml'
        content_length: Length of the body in characters

    """

    content_type: str = 'html'
    content_length: int = 0

    @property
    def is_xml(self) -> bool:
        """True if the body looks like an XML document (feeds, sitemaps)."""
        return self.content_type == 'xml'


@dataclass
class FetchResult:
    """Result of a fetch operation.

    Attributes:
        url: URL that was requested
        html: Body of the response, None on failure
        status_code: HTTP status of the final response, if any
        error: Why the fetch failed
        fetch_time: Seconds spent fetching, retries included
        metadata: Content metadata for successful fetches

    """

    url: str
    html: str | None = None
    status_code: int | None = None
    error: str | None = None
    fetch_time: float = 0.0
    metadata: ContentMetadata = field(default_factory=ContentMetadata)

    @property
    def success(self) -> bool:
        """Whether the body was fetched."""
        return self.html is not None and self.error is None


class TraversalStatus(str, Enum):
    """Terminal state of a pagination traversal."""

    COMPLETED = 'completed'
    BOUNDED = 'bounded'
    FAILED = 'failed'


class StopReason(str, Enum):
    """Why a traversal stopped."""

    NO_NEXT_LINK = 'no_next_link'
    CYCLE = 'cycle'
    MAX_PAGES = 'max_pages'
    EXHAUSTED = 'exhausted'
    TIMEOUT = 'timeout'
    ERROR = 'error'


@dataclass
class PageResult:
    """Records extracted from a single page.

    Attributes:
        url: Page URL as fetched
        page_number: 1-based position in the traversal
        items: Records in document order
        fetched_at: When the page was scraped (UTC)

    """

    url: str
    page_number: int
    items: list[Record] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class PaginatedResults:
    """Records gathered across a pagination traversal.

    Attributes:
        pages: Per-page results in visiting order
        total_pages: Number of pages scraped
        total_items: Number of records across all pages

    """

    pages: list[PageResult] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def total_items(self) -> int:
        return sum(len(page.items) for page in self.pages)

    @property
    def items(self) -> list[Record]:
        """All records flattened in page order."""
        return [item for page in self.pages for item in page.items]

    def add_page(self, url: str, page_number: int, items: list[Record]) -> PageResult:
        """Append the records of one page."""
        page = PageResult(url=url, page_number=page_number, items=items)
        self.pages.append(page)
        return page


@dataclass
class TraversalOutcome:
    """Everything a traversal produced, including how it ended.

    Attributes:
        status: completed, bounded or failed
        stop_reason: The specific condition that ended the run
        results: Records of every page scraped before stopping
        elapsed: Wall-clock seconds the traversal took
        error: The underlying failure when status is failed
        failing_url: Page being processed when the failure occurred
        failing_page_number: Its 1-based page number

    """

    status: TraversalStatus
    stop_reason: StopReason
    results: PaginatedResults
    elapsed: float = 0.0
    error: BaseException | None = None
    failing_url: str | None = None
    failing_page_number: int | None = None

    @property
    def items(self) -> list[Record]:
        return self.results.items

    @property
    def succeeded(self) -> bool:
        """Completed and bounded runs both count as success."""
        return self.status != TraversalStatus.FAILED


class SelectorCheck(BaseModel):
    """Outcome of testing one selector against a document.

    Attributes:
        target: What the selector belongs to ('container', a field key, or 'pagination')
        level: 'primary' or 'alternative'
        selector: The selector expression
        status: 'matched', 'no_match' or 'invalid'
        match_count: Number of nodes the selector produced
        reason: Compile error text for invalid selectors

    """

    target: str = Field(description='Container, field key or pagination')
    level: Literal['primary', 'alternative'] = Field(description='Selector level')
    selector: str = Field(description='The selector expression')
    status: Literal['matched', 'no_match', 'invalid'] = Field(description='Check outcome')
    match_count: int = Field(default=0, description='Nodes matched')
    reason: str | None = Field(default=None, description='Why the selector is invalid')


class ValidationReport(BaseModel):
    """Selector checks for a whole scrape config.

    Attributes:
        url: Document the checks ran against, if fetched
        container_count: Container nodes found by the winning container selector
        checks: Every selector check in config order

    """

    url: str | None = Field(default=None, description='Document URL')
    container_count: int | None = Field(default=None, description='Containers matched')
    checks: list[SelectorCheck] = Field(default_factory=list, description='Per-selector results')

    @property
    def invalid(self) -> list[SelectorCheck]:
        """Checks whose selector does not compile."""
        return [check for check in self.checks if check.status == 'invalid']

    @property
    def unmatched_targets(self) -> list[str]:
        """Targets for which no selector matched anything."""
        targets: dict[str, bool] = {}
        for check in self.checks:
            targets[check.target] = targets.get(check.target, False) or check.status == 'matched'
        return [target for target, matched in targets.items() if not matched]

    @property
    def success(self) -> bool:
        """True when every selector compiles and every target matched something."""
        return not self.invalid and not self.unmatched_targets

    @property
    def winners(self) -> dict[str, SelectorCheck]:
        """For each target, the first matching check: the selector extraction would use."""
        winners: dict[str, SelectorCheck] = {}
        for check in self.checks:
            if check.status == 'matched' and check.target not in winners:
                winners[check.target] = check
        return winners
