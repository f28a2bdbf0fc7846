"""Output formatting for extracted records."""

from gleaner.outputs.utils import OUTPUT_FORMATS, render, save_formatted

__all__ = ['OUTPUT_FORMATS', 'render', 'save_formatted']
