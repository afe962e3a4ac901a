"""
Keyword extraction service.

Derives a ranked tag list from note text using Korean/English pattern
heuristics and frequency weighting.
"""

from .extractor import (
    KeywordExtractor,
    extract_general_keywords,
    extract_numbers,
    extract_proper_nouns,
)

__all__ = [
    'KeywordExtractor',
    'extract_general_keywords',
    'extract_numbers',
    'extract_proper_nouns',
]
