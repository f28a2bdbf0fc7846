"""Utility components for Gleaner."""

from gleaner.utils.files import get_output_path, get_project_root, init_workdir, output_filename
from gleaner.utils.headers import HeaderGenerator, UserAgentRotator
from gleaner.utils.logging import setup_local_logging

__all__ = [
    'HeaderGenerator',
    'UserAgentRotator',
    'get_output_path',
    'get_project_root',
    'init_workdir',
    'output_filename',
    'setup_local_logging',
]
