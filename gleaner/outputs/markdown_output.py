"""Markdown output formatter for extracted records."""

import os
from datetime import datetime

from gleaner.models.results import PaginatedResults, Record


def format_markdown(source: str, records: list[Record], title: str | None = None) -> str:
    """Format extracted records as Markdown.

    Each record becomes a section; each field a bold label followed by its
    value, with array values rendered as lists.

    Args:
        source: URL or file the records came from
        records: Extracted records
        title: Document heading, defaults to 'Extracted records'

    Returns:
        Formatted markdown string.

    """
    lines = [f'# {title or "Extracted records"}', '']
    lines += _metadata(source, f'**Items:** {len(records)}')
    lines += _format_records(records, heading='##')
    return '\n'.join(lines)


def format_pages_markdown(source: str, results: PaginatedResults) -> str:
    """Format paginated results as Markdown, one section per page."""
    lines = ['# Extracted pages', '']
    lines += _metadata(source, f'**Pages:** {results.total_pages}', f'**Items:** {results.total_items}')
    for page in results.pages:
        lines.append(f'## Page {page.page_number}')
        lines.append('')
        lines.append(f'<{page.url}>')
        lines.append('')
        lines += _format_records(page.items, heading='###')
    return '\n'.join(lines)


def save_markdown(filepath: str, content: str):
    """Save formatted Markdown to a file, creating the directory."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(content)


def _metadata(source: str, *extra: str) -> list[str]:
    return [
        '---',
        f'**Source:** {source}',
        f'**Extracted:** {datetime.now().isoformat()}',
        *extra,
        '---',
        '',
    ]


def _format_records(records: list[Record], heading: str) -> list[str]:
    if not records:
        return ['_No records extracted._', '']

    lines = []
    for index, record in enumerate(records, 1):
        lines.append(f'{heading} Record {index}')
        lines.append('')
        for key, value in record.items():
            lines.extend(_format_value(key, value))
        lines.append('')
    return lines


def _format_field_name(field: str) -> str:
    """Convert snake_case to Title Case."""
    return field.replace('_', ' ').title()


def _format_value(key: str, value) -> list[str]:
    label = f'**{_format_field_name(key)}:**'
    if isinstance(value, list):
        return [label] + [f'- {item}' for item in value]
    if isinstance(value, datetime):
        return [f'{label} {value.isoformat()}']
    return [f'{label} {value}']
