"""URL helpers for pagination: resolution and canonical comparison."""

from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit


def resolve_url(base_url: str, reference: str) -> str:
    """Resolve a possibly relative reference against a page URL.

    Raises:
        ValueError: If either URL cannot be parsed

    """
    # urljoin swallows most malformed input, urlsplit does not
    urlsplit(base_url)
    urlsplit(reference)
    return urljoin(base_url, reference)


def normalize_url(url: str) -> str:
    """Canonical form of a URL used for visited-page comparison.

    Drops the fragment, strips one trailing slash from a non-root path and
    sorts query parameters by key, then value. Unparseable URLs are returned
    unchanged.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    path = parts.path
    if path != '/' and path.endswith('/'):
        path = path[:-1]

    query = parts.query
    if query:
        query = urlencode(sorted(parse_qsl(query, keep_blank_values=True)))

    return urlunsplit((parts.scheme, parts.netloc, path, query, ''))
