"""File and directory helpers for Gleaner's working directory."""

import re
from pathlib import Path
from urllib.parse import urlparse

WORKDIR_NAME = '.gleaner'


def get_project_root() -> Path:
    """Find the project root by searching upwards from the Current Working Directory.

    Stops at the first directory containing a marker file.
    """
    current_path = Path.cwd()
    markers = {'.git', 'pyproject.toml', WORKDIR_NAME, 'requirements.txt'}

    for parent in [current_path] + list(current_path.parents):
        if any((parent / marker).exists() for marker in markers):
            return parent

    # No markers (e.g. running in /tmp)
    return current_path


def get_workdir() -> Path:
    return get_project_root() / WORKDIR_NAME


def get_logs_path() -> Path:
    """Return the path to the logs directory in .gleaner."""
    return get_workdir() / 'logs'


def get_output_path() -> Path:
    """Return the path to the default output directory in .gleaner."""
    return get_workdir() / 'output'


def init_workdir() -> Path:
    """Create the .gleaner directory structure and return its path."""
    workdir = get_workdir()
    get_logs_path().mkdir(parents=True, exist_ok=True)
    get_output_path().mkdir(parents=True, exist_ok=True)

    # Keep generated files out of source control
    gitignore = workdir / '.gitignore'
    if not gitignore.exists():
        gitignore.write_text('# Automatically created by gleaner\n*\n')

    return workdir


def output_filename(source: str, extension: str) -> str:
    """Derive a filesystem-safe file name from a URL or file path.

    Args:
        source: URL or path the records came from
        extension: File extension without the dot

    Returns:
        Name such as 'example.com_products.json'

    """
    parsed = urlparse(source)
    if parsed.scheme in ('http', 'https'):
        stem = f'{parsed.netloc}{parsed.path}'
    else:
        stem = Path(source).stem
    stem = re.sub(r'[^A-Za-z0-9._-]+', '_', stem).strip('_.') or 'output'
    return f'{stem[:120]}.{extension}'
