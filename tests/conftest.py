import logfire
import pytest

from gleaner.core.fetcher import HTMLFetcher
from gleaner.models import FetchResult, ScrapeConfig

logfire.configure(send_to_logfire=False, console=False)


class FakeFetcher(HTMLFetcher):
    """Serves canned pages from a dict; unknown URLs fail like a 404."""

    def __init__(self, pages: dict[str, str], errors: dict[str, str] | None = None):
        self.pages = pages
        self.errors = errors or {}
        self.requested: list[str] = []
        self.closed = False

    def fetch(self, url: str) -> FetchResult:
        self.requested.append(url)
        if url in self.errors:
            return FetchResult(url=url, error=self.errors[url])
        if url not in self.pages:
            return FetchResult(url=url, status_code=404, error='HTTP 404')
        return FetchResult(url=url, html=self.pages[url], status_code=200)

    def close(self) -> None:
        self.closed = True


def listing_page(products: list[str], next_href: str | None = None) -> str:
    """A product listing page with an optional next link."""
    items = '\n'.join(f'<div class="product"><h2>{name}</h2></div>' for name in products)
    link = f'<a class="next" href="{next_href}">Next</a>' if next_href else ''
    return f'<html><body><div id="list">{items}</div>{link}</body></html>'


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_listing():
    return listing_page


@pytest.fixture
def product_html():
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Products</title>
    </head>
    <body>
        <div class="product">
            <h2>Widget</h2>
            <span class="price">$1,299.50</span>
            <a class="link" href="/products/widget">details</a>
            <ul class="tags"><li>new</li><li>sale</li><li>popular</li></ul>
        </div>
        <div class="product">
            <h1>Fallback</h1>
            <span class="price">$15</span>
            <a class="link" href="https://shop.example.com/gadget">details</a>
            <ul class="tags"><li>clearance</li></ul>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def listing_config():
    return ScrapeConfig.model_validate(
        {
            'container': '//div[@class="product"]',
            'fields': {'name': './/h2/text()'},
            'pagination': {'type': 'next-link', 'next_selector': '//a[@class="next"]/@href'},
        }
    )


@pytest.fixture
def listing_site():
    return {
        'https://shop.example.com/p/1': listing_page(['A', 'B'], '/p/2'),
        'https://shop.example.com/p/2': listing_page(['C', 'D', 'E'], '/p/3'),
        'https://shop.example.com/p/3': listing_page(['F']),
    }


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line('markers', 'integration: marks tests as integration tests')
    config.addinivalue_line('markers', 'unit: marks tests as unit tests')


def pytest_collection_modifyitems(config, items):
    """Apply directory-based marks to collected test items."""

    for item in items:
        # Get the test file path
        if hasattr(item, 'fspath'):
            file_path = str(item.fspath)

            # Add marks based on directory
            if '/tests/integration/' in file_path:
                item.add_marker(pytest.mark.integration)
            elif '/tests/unit/' in file_path:
                item.add_marker(pytest.mark.unit)
