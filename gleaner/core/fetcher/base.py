"""Abstract base class for fetchers and content analyzer."""

from abc import ABC, abstractmethod

from gleaner.core.selector.document import detect_content_type
from gleaner.models.results import ContentMetadata, FetchResult


class ContentAnalyzer:
    """Derives metadata from a fetched body."""

    @staticmethod
    def analyze(body: str) -> ContentMetadata:
        """Analyze fetched content.

        Args:
            body: Response text

        Returns:
            Content type and length of the body

        """
        return ContentMetadata(content_type=detect_content_type(body), content_length=len(body))


class HTMLFetcher(ABC):
    """Abstract base class for fetchers.

    Implement this interface to plug a custom transport into the scraper and
    the pagination engine. Failures are reported through
    ``FetchResult.error`` rather than raised.
    """

    @abstractmethod
    def fetch(self, url: str) -> FetchResult:
        """Fetch a document.

        Args:
            url: URL to fetch

        Returns:
            FetchResult with the body on success, or the error on failure

        """
        pass

    def close(self) -> None:
        """Release transport resources."""
        return None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
