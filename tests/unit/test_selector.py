import pytest
from lxml import etree

from gleaner.core.selector import (
    SelectorResolver,
    as_node_list,
    detect_content_type,
    ensure_tree,
    node_attribute,
    node_content,
    node_html,
    node_text,
    parse_document,
)
from gleaner.exceptions import ConfigError, ParseError, SelectorSyntaxError

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <item><title>First</title><link>https://example.com/1</link></item>
    <item><title>Second</title><link>https://example.com/2</link></item>
  </channel>
</rss>
"""


@pytest.fixture
def resolver():
    return SelectorResolver()


@pytest.fixture
def root(product_html):
    return parse_document(product_html)


def test_detect_content_type():
    assert detect_content_type('<html><body></body></html>') == 'html'
    assert detect_content_type(RSS) == 'xml'
    assert detect_content_type(b'\xef\xbb\xbf<?xml version="1.0"?><urlset></urlset>') == 'xml'
    assert detect_content_type('<?xml version="1.0"?><!DOCTYPE html><html></html>') == 'html'


def test_parse_html(root):
    assert root.tag == 'html'
    assert len(root.xpath('//div[@class="product"]')) == 2


def test_parse_xml_feed():
    root = parse_document(RSS)
    assert root.tag == 'rss'
    assert [node_text(n) for n in root.xpath('//item/title')] == ['First', 'Second']


def test_parse_bytes_and_forced_kind():
    root = parse_document(b'<p>caf\xc3\xa9</p>', kind='html')
    assert node_text(root.xpath('//p')[0]) == 'café'


@pytest.mark.parametrize('content', ['', '   \n', b''])
def test_parse_empty_document(content):
    with pytest.raises(ParseError):
        parse_document(content)


def test_parse_unknown_kind():
    with pytest.raises(ParseError):
        parse_document('<p>x</p>', kind='pdf')


def test_ensure_tree_accepts_parsed_documents(root):
    assert ensure_tree(root) is root
    assert ensure_tree(etree.ElementTree(root)) is root
    assert ensure_tree('<p>x</p>').tag == 'html'


def test_node_text_variants(root):
    price = root.xpath('//span[@class="price"]')[0]
    assert node_text(price) == '$1,299.50'
    assert node_text('  spaced  ') == 'spaced'
    assert node_text(2.0) == '2'
    assert node_text(2.5) == '2.5'
    assert node_text(True) == 'true'


def test_node_text_concatenates_descendants(root):
    tags = root.xpath('//ul[@class="tags"]')[0]
    assert node_text(tags) == 'newsalepopular'


def test_node_html_and_attribute(root):
    link = root.xpath('//a[@class="link"]')[0]
    assert node_html(link) == '<a class="link" href="/products/widget">details</a>'
    assert node_attribute(link, 'href') == '/products/widget'
    assert node_attribute(link, 'missing') is None
    assert node_attribute('text', 'href') is None
    assert node_content(link, 'html').startswith('<a ')
    assert node_content(link, 'text') == 'details'


def test_as_node_list():
    assert as_node_list([1, 2]) == [1, 2]
    assert as_node_list('') == []
    assert as_node_list(False) == []
    assert as_node_list(None) == []
    assert as_node_list(0.0) == [0.0]
    assert as_node_list('x') == ['x']


def test_resolve_first_match_wins(resolver, root):
    nodes = resolver.resolve(['//h3', '//h2/text()', '//h1/text()'], root)
    assert nodes == ['Widget']


def test_resolve_does_not_merge_candidates(resolver, root):
    nodes, selector = resolver.resolve_with_selector(['//h2', '//h1'], root)
    assert selector == '//h2'
    assert len(nodes) == 1


def test_resolve_skips_bad_syntax(resolver, root):
    nodes, selector = resolver.resolve_with_selector(['//div[', '//h1/text()'], root)
    assert nodes == ['Fallback']
    assert selector == '//h1/text()'


def test_resolve_nothing(resolver, root):
    assert resolver.resolve([], root) == []
    assert resolver.resolve(['//table', '', '//nav'], root) == []


def test_resolve_within_scope(resolver, root):
    second = root.xpath('//div[@class="product"]')[1]
    assert resolver.resolve(['.//h2/text()', './/h1/text()'], second) == ['Fallback']


def test_scalar_results(resolver, root):
    assert resolver.evaluate('count(//div[@class="product"])', root) == [2.0]
    assert resolver.evaluate('string(//h5)', root) == []
    assert resolver.evaluate('boolean(//h5)', root) == []


def test_compile_errors(resolver):
    with pytest.raises(SelectorSyntaxError) as exc_info:
        resolver.compile('//div[')
    assert isinstance(exc_info.value, ConfigError)
    assert exc_info.value.selector == '//div['
    assert resolver.check('//div[') is not None
    assert resolver.check('//div') is None


def test_compile_cache(resolver):
    assert resolver.compile('//a') is resolver.compile('//a')

    small = SelectorResolver(max_cache_size=2)
    first = small.compile('//a')
    small.compile('//b')
    small.compile('//c')
    assert small.compile('//a') is not first
