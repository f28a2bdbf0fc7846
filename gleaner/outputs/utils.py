"""Utility functions for formatting and saving extracted records."""

from gleaner.models.results import PaginatedResults, Record
from gleaner.outputs.json_output import dumps, format_json, format_pages_json, save_json
from gleaner.outputs.markdown_output import format_markdown, format_pages_markdown, save_markdown

OUTPUT_FORMATS = ('json', 'markdown')


def render(source: str, data: list[Record] | PaginatedResults, output_format: str = 'json') -> str:
    """Render records or paginated results as text in the given format.

    Args:
        source: URL or file the data came from
        data: Records from a single document, or paginated results
        output_format: 'json' or 'markdown'. Defaults to 'json'.

    Returns:
        Rendered text

    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f'Unknown output format: {output_format}. Choose from: {list(OUTPUT_FORMATS)}')

    if isinstance(data, PaginatedResults):
        if output_format == 'markdown':
            return format_pages_markdown(source, data)
        return dumps(format_pages_json(source, data))

    if output_format == 'markdown':
        return format_markdown(source, data)
    return dumps(format_json(source, data))


def save_formatted(
    filepath: str, source: str, data: list[Record] | PaginatedResults, output_format: str = 'json'
) -> str:
    """Format and save records or paginated results to a file.

    Returns:
        Path to the saved file.

    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f'Unknown output format: {output_format}. Choose from: {list(OUTPUT_FORMATS)}')

    if output_format == 'markdown':
        save_markdown(filepath, render(source, data, 'markdown'))
    elif isinstance(data, PaginatedResults):
        save_json(filepath, format_pages_json(source, data))
    else:
        save_json(filepath, format_json(source, data))
    return filepath
