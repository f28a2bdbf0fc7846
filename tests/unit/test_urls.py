import pytest

from gleaner.core.pagination import normalize_url, resolve_url


@pytest.mark.parametrize(
    'url,expected',
    [
        ('https://example.com/list/', 'https://example.com/list'),
        ('https://example.com/', 'https://example.com/'),
        ('https://example.com/list#top', 'https://example.com/list'),
        ('https://example.com/list?b=2&a=1', 'https://example.com/list?a=1&b=2'),
        ('https://example.com/list?a=2&a=1', 'https://example.com/list?a=1&a=2'),
        ('https://example.com/list?q=&a=1', 'https://example.com/list?a=1&q='),
        ('https://example.com/a//', 'https://example.com/a/'),
    ],
)
def test_normalize_url(url, expected):
    assert normalize_url(url) == expected


def test_normalize_url_equivalence():
    assert normalize_url('https://example.com/p/?page=2&sort=asc#x') == normalize_url(
        'https://example.com/p?sort=asc&page=2'
    )


def test_normalize_unparseable_url_is_unchanged():
    assert normalize_url('http://[::1') == 'http://[::1'


def test_resolve_url():
    base = 'https://example.com/catalog/page/2'
    assert resolve_url(base, '3') == 'https://example.com/catalog/page/3'
    assert resolve_url(base, '/p/3') == 'https://example.com/p/3'
    assert resolve_url(base, '?page=3') == 'https://example.com/catalog/page/2?page=3'
    assert resolve_url(base, 'https://other.example.org/x') == 'https://other.example.org/x'
    assert resolve_url(base, '//cdn.example.com/p') == 'https://cdn.example.com/p'


def test_resolve_url_rejects_malformed():
    with pytest.raises(ValueError):
        resolve_url('https://example.com/', 'http://[::1')
