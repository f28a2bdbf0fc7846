"""JSON output formatter for extracted records."""

import json
import os
from datetime import date, datetime
from typing import Any

from gleaner.models.results import PaginatedResults, Record


def _json_default(value: Any) -> Any:
    """Serialize values the json module does not know (pipe results such as datetimes)."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value)


def format_json(source: str, records: list[Record]) -> dict:
    """Format extracted records as JSON with metadata.

    Args:
        source: URL or file the records came from
        records: Extracted records

    Returns:
        Dictionary with metadata and records, ready for JSON serialization.

    """
    return {
        'source': source,
        'extracted_at': datetime.now().isoformat(),
        'total_items': len(records),
        'items': records,
    }


def format_pages_json(source: str, results: PaginatedResults) -> dict:
    """Format paginated results as JSON, keeping the per-page breakdown."""
    return {
        'source': source,
        'extracted_at': datetime.now().isoformat(),
        'total_pages': results.total_pages,
        'total_items': results.total_items,
        'pages': [
            {
                'url': page.url,
                'page_number': page.page_number,
                'fetched_at': page.fetched_at.isoformat(),
                'items': page.items,
            }
            for page in results.pages
        ],
    }


def dumps(data: Any) -> str:
    """Serialize formatted output to a JSON string."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=_json_default)


def save_json(filepath: str, data: dict):
    """Save formatted output as a JSON file, creating the directory.

    Args:
        filepath: Path to save the file
        data: Output of format_json or format_pages_json

    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(dumps(data))
