"""Custom exceptions for Gleaner."""

from typing import Any


class GleanerError(Exception):
    """Base class for all Gleaner exceptions."""

    pass


class ConfigError(GleanerError):
    """Raised when a scrape configuration is invalid.

    Configuration problems are detected before any extraction or traversal
    starts, never mid-run.
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        """Initialize configuration error.

        Args:
            message: Summary of what is wrong
            problems: Optional list of individual problems found

        """
        self.problems = problems or []
        if self.problems:
            message = f'{message}: {"; ".join(self.problems)}'
        super().__init__(message)


class ParseError(GleanerError):
    """Raised when a document cannot be parsed."""

    pass


class PipeError(GleanerError):
    """Raised when a pipe is unknown or fails to process its input."""

    def __init__(self, pipe_name: str, message: str, input_value: str | None = None, params: list[str] | None = None):
        """Initialize pipe error.

        Args:
            pipe_name: Name of the pipe that failed
            message: What went wrong
            input_value: Raw string fed to the pipe, if it ran
            params: Parameters the pipe was invoked with

        """
        self.pipe_name = pipe_name
        self.input = input_value
        self.params = params or []
        detail = f"pipe '{pipe_name}' {message}"
        if input_value is not None:
            detail += f' (input={input_value!r}, params={self.params})'
        super().__init__(detail)


class FetchError(GleanerError):
    """Raised when a page cannot be fetched."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        """Initialize fetch error.

        Args:
            url: URL that failed
            reason: Why the fetch failed
            status_code: HTTP status code, if a response was received

        """
        self.url = url
        self.reason = reason
        self.status_code = status_code
        status = f' (status={status_code})' if status_code is not None else ''
        super().__init__(f'Failed to fetch {url}{status}: {reason}')


class PaginationError(GleanerError):
    """Raised when a traversal fails part-way through.

    Carries everything accumulated before the failure so callers can keep
    the partial dataset.
    """

    def __init__(
        self,
        failing_url: str,
        failing_page_number: int,
        partial_items: list[dict[str, Any]],
        cause: BaseException,
        partial_pages: list | None = None,
    ):
        """Initialize pagination error.

        Args:
            failing_url: URL of the page that could not be processed
            failing_page_number: 1-based number of that page
            partial_items: Records collected from every earlier page
            cause: The underlying fetch or extraction error
            partial_pages: PageResult objects collected before the failure

        """
        self.failing_url = failing_url
        self.failing_page_number = failing_page_number
        self.partial_items = partial_items
        self.partial_pages = partial_pages or []
        self.total_scraped = len(partial_items)
        self.cause = cause
        super().__init__(
            f'Pagination failed on page {failing_page_number} ({failing_url}) '
            f'after {self.total_scraped} items: {cause}'
        )


class SelectorSyntaxError(ConfigError):
    """Raised when a selector expression does not compile."""

    def __init__(self, selector: str, reason: str):
        """Initialize selector syntax error.

        Args:
            selector: The offending selector expression
            reason: Compiler message

        """
        self.selector = selector
        self.reason = reason
        super().__init__(f'invalid selector {selector!r}: {reason}')


class UnknownPipeError(PipeError):
    """Raised when a pipe name is not registered."""

    def __init__(self, pipe_name: str, available: list[str] | None = None):
        """Initialize unknown pipe error.

        Args:
            pipe_name: The name that was looked up
            available: Names currently registered

        """
        self.available = available or []
        super().__init__(pipe_name, 'is not registered')


class RecordValidationError(GleanerError):
    """Raised when an extracted record does not fit the requested model."""

    def __init__(self, model_name: str, index: int, record: dict[str, Any], errors: list[dict[str, Any]]):
        """Initialize record validation error.

        Args:
            model_name: Name of the target model
            index: 0-based position of the record in the extraction result
            record: The record that failed validation
            errors: Validation errors as reported by pydantic

        """
        self.model_name = model_name
        self.index = index
        self.record = record
        self.errors = errors
        fields = ', '.join('.'.join(str(part) for part in error.get('loc', ())) or '<record>' for error in errors)
        super().__init__(f'record {index} does not fit {model_name} ({fields})')
