import json

import pytest

from gleaner.core.selector import JSONOptions, document_to_dict, document_to_json, node_to_dict, parse_document
from gleaner.exceptions import ParseError

ARTICLE = """
<html><body>
  <div id="main" class="box">Hello <b>bold</b> world<!-- note --><p>Para</p>tail</div>
</body></html>
"""


@pytest.fixture
def box():
    return parse_document(ARTICLE).xpath('//div')[0]


def test_default_conversion(box):
    assert node_to_dict(box) == {
        'tag': 'div',
        'children': [{'tag': 'b', 'text': ['bold']}, {'tag': 'p', 'text': ['Para']}],
        'text': ['Hello', 'world', 'tail'],
    }


def test_attributes_are_opt_in(box):
    converted = node_to_dict(box, JSONOptions(include_attributes=True))
    assert converted['attributes'] == {'id': 'main', 'class': 'box'}
    assert 'attributes' not in converted['children'][0]


def test_text_can_be_left_out(box):
    assert node_to_dict(box, JSONOptions(include_text=False)) == {
        'tag': 'div',
        'children': [{'tag': 'b'}, {'tag': 'p'}],
    }


def test_whitespace_handling():
    root = parse_document('<ul>\n  <li>a</li>\n</ul>').xpath('//ul')[0]

    assert node_to_dict(root) == {'tag': 'ul', 'children': [{'tag': 'li', 'text': ['a']}]}
    assert node_to_dict(root, JSONOptions(trim_whitespace=False))['text'] == ['\n  ', '\n']


def test_document_starts_at_root_element():
    converted = document_to_dict(ARTICLE)

    assert converted['tag'] == 'html'
    assert converted['children'][0]['tag'] == 'body'


def test_xml_document():
    feed = '<?xml version="1.0" encoding="UTF-8"?><feed><item>x</item></feed>'
    assert document_to_dict(feed) == {'tag': 'feed', 'children': [{'tag': 'item', 'text': ['x']}]}


def test_json_output_formats():
    compact = document_to_json(ARTICLE, JSONOptions(pretty=False))
    pretty = document_to_json(ARTICLE)

    assert '\n' not in compact
    assert '\n  ' in pretty
    assert json.loads(compact) == json.loads(pretty) == document_to_dict(ARTICLE)


def test_empty_document_is_rejected():
    with pytest.raises(ParseError):
        document_to_json('   ')
