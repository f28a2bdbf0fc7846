"""XPath selector engine built on lxml."""

from gleaner.core.selector.convert import JSONOptions, document_to_dict, document_to_json, node_to_dict
from gleaner.core.selector.document import (
    detect_content_type,
    ensure_tree,
    node_attribute,
    node_content,
    node_html,
    node_text,
    parse_document,
)
from gleaner.core.selector.resolver import SelectorResolver, as_node_list, default_resolver

__all__ = [
    'JSONOptions',
    'SelectorResolver',
    'as_node_list',
    'default_resolver',
    'detect_content_type',
    'document_to_dict',
    'document_to_json',
    'ensure_tree',
    'node_attribute',
    'node_content',
    'node_html',
    'node_text',
    'node_to_dict',
    'parse_document',
]
