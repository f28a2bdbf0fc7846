"""Record extraction."""

from gleaner.core.extraction.extractor import PatternExtractor, extract_records, is_empty, to_models

__all__ = ['PatternExtractor', 'extract_records', 'is_empty', 'to_models']
