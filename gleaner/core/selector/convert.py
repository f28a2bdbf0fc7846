"""Converts parsed documents into nested, JSON-ready dictionaries."""

import json
from typing import Any

from lxml import etree
from pydantic import BaseModel, Field

from gleaner.core.selector.document import ensure_tree


class JSONOptions(BaseModel):
    """Controls what the document-to-JSON conversion keeps."""

    include_attributes: bool = Field(default=False, description='Add an attributes mapping to elements')
    include_text: bool = Field(default=True, description="Add a text list with each element's own text nodes")
    trim_whitespace: bool = Field(default=True, description='Strip text nodes and drop whitespace-only ones')
    pretty: bool = Field(default=True, description='Indent the JSON output')


def _is_tag(node: Any) -> bool:
    # Comments and processing instructions have a callable tag
    return isinstance(node.tag, str)


def _own_text(element: etree._Element, options: JSONOptions) -> list[str]:
    parts = [element.text, *(child.tail for child in element)]
    texts = []
    for text in parts:
        if text is None:
            continue
        if options.trim_whitespace:
            text = text.strip()
        if text:
            texts.append(text)
    return texts


def node_to_dict(element: etree._Element, options: JSONOptions | None = None) -> dict[str, Any]:
    """Convert an element and its descendants to nested dictionaries.

    Each element becomes ``{'tag': ...}`` plus, when present, ``attributes``,
    ``children`` (element children in document order) and ``text`` (the
    element's own text nodes, not its descendants'). Comments are skipped.

    Args:
        element: lxml element to convert
        options: Conversion options, defaults to JSONOptions()

    Returns:
        Nested dictionary

    """
    options = options or JSONOptions()
    result: dict[str, Any] = {'tag': element.tag}
    if options.include_attributes and element.attrib:
        result['attributes'] = dict(element.attrib)

    children = [node_to_dict(child, options) for child in element if _is_tag(child)]
    if children:
        result['children'] = children

    if options.include_text:
        texts = _own_text(element, options)
        if texts:
            result['text'] = texts
    return result


def document_to_dict(document: Any, options: JSONOptions | None = None) -> dict[str, Any]:
    """Convert raw HTML/XML or a parsed tree, starting at its root element."""
    return node_to_dict(ensure_tree(document), options)


def document_to_json(document: Any, options: JSONOptions | None = None) -> str:
    """Convert raw HTML/XML or a parsed tree to a JSON string.

    Raises:
        ParseError: If raw content cannot be parsed

    """
    options = options or JSONOptions()
    return json.dumps(document_to_dict(document, options), indent=2 if options.pretty else None, ensure_ascii=False)
