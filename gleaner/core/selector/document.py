"""Parse documents into lxml trees and read values off matched nodes."""

from typing import Any

from lxml import etree
from lxml import html as lxml_html

from gleaner.exceptions import ParseError

XML_INDICATORS = (
    '<?xml',
    '<rss',
    '<feed',
    '<urlset',
    '<sitemapindex',
    '<rdf:rdf',
)

_XML_PARSER = etree.XMLParser(recover=True, resolve_entities=False, no_network=True)


def detect_content_type(content: str | bytes) -> str:
    """Sniff whether a document is HTML or XML from its leading bytes.

    Args:
        content: Raw document

    Returns:
        'xml' for feeds, sitemaps and other XML documents, otherwise 'html'

    """
    head = content[:1024]
    if isinstance(head, bytes):
        head = head.decode('utf-8', errors='ignore')
    head = head.lstrip('\ufeff \t\r\n').lower()

    if not head.startswith(XML_INDICATORS):
        return 'html'
    # XHTML pages often carry an XML declaration
    if '<html' in head or '<!doctype html' in head:
        return 'html'
    return 'xml'


def _is_utf8(data: bytes) -> bool:
    # libxml2 assumes latin-1 for undeclared HTML bytes
    try:
        data.decode('utf-8')
    except UnicodeDecodeError:
        return False
    return True


def parse_document(content: str | bytes, kind: str | None = None) -> etree._Element:
    """Parse raw HTML or XML into an lxml tree.

    Args:
        content: Raw document text or bytes
        kind: Force 'html' or 'xml' instead of sniffing

    Returns:
        Root element of the parsed document

    Raises:
        ParseError: If the document is empty or cannot be parsed

    """
    if content is None or not content.strip():
        raise ParseError('document is empty')

    kind = kind or detect_content_type(content)
    if kind not in ('html', 'xml'):
        raise ParseError(f'unknown document kind: {kind}')

    data = content.encode('utf-8') if isinstance(content, str) else content
    try:
        if kind == 'xml':
            root = etree.fromstring(data, parser=_XML_PARSER)
        else:
            parser = lxml_html.HTMLParser(encoding='utf-8') if _is_utf8(data) else None
            root = lxml_html.document_fromstring(data, parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        raise ParseError(f'could not parse {kind} document: {e}') from e

    if root is None:
        raise ParseError(f'could not parse {kind} document')
    return root


def ensure_tree(document: Any) -> etree._Element:
    """Return an lxml element for raw content or an already parsed tree."""
    if isinstance(document, etree._ElementTree):
        return document.getroot()
    if isinstance(document, etree._Element):
        return document
    return parse_document(document)


def is_element(node: Any) -> bool:
    return isinstance(node, etree._Element)


def node_text(node: Any) -> str:
    """Whitespace-trimmed text content of a matched node.

    Element nodes yield their concatenated descendant text; string results of
    ``text()`` or ``@attr`` selectors are returned trimmed; numeric and boolean
    XPath results are rendered as plain strings.

    Args:
        node: Element, string or scalar XPath result

    Returns:
        Text content

    """
    if isinstance(node, bool):
        return 'true' if node else 'false'
    if isinstance(node, float):
        return str(int(node)) if node.is_integer() else str(node)
    if isinstance(node, str):
        return node.strip()
    if is_element(node):
        # Comments and processing instructions have no descendants
        if not isinstance(node.tag, str):
            return (node.text or '').strip()
        return ''.join(node.itertext()).strip()
    return str(node).strip()


def node_html(node: Any) -> str:
    """Serialized markup of a matched node, falling back to text for non-elements."""
    if not is_element(node):
        return node_text(node)
    method = 'html' if isinstance(node, lxml_html.HtmlElement) else 'xml'
    return etree.tostring(node, encoding='unicode', method=method, with_tail=False).strip()


def node_attribute(node: Any, name: str) -> str | None:
    """Attribute value of an element node, or None."""
    if not is_element(node):
        return None
    return node.get(name)


def node_content(node: Any, mode: str = 'text') -> str:
    """Text or markup of a node depending on the content mode."""
    if mode == 'html':
        return node_html(node)
    return node_text(node)
