"""Fetcher factory and exports."""

from gleaner.core.fetcher.base import ContentAnalyzer, HTMLFetcher
from gleaner.core.fetcher.security import is_private_ip, validate_url
from gleaner.core.fetcher.simple import SimpleFetcher


def create_fetcher(fetcher_type: str = 'simple', **kwargs) -> HTMLFetcher:
    """Create a fetcher.

    Args:
        fetcher_type: Type of fetcher ('simple')
        **kwargs: Additional arguments for the fetcher

    Returns:
        HTMLFetcher instance

    """
    fetchers: dict[str, type[HTMLFetcher]] = {
        'simple': SimpleFetcher,
    }

    if fetcher_type not in fetchers:
        raise ValueError(f'Unknown fetcher type: {fetcher_type}. Choose from: {list(fetchers.keys())}')

    return fetchers[fetcher_type](**kwargs)


__all__ = ['ContentAnalyzer', 'HTMLFetcher', 'SimpleFetcher', 'create_fetcher', 'is_private_ip', 'validate_url']
