"""Content extraction helpers shared by the site extractors."""

from .date_extractor import DateExtractor, date_extractor
from .extraction_utils import ExtractionUtils, extraction_utils
from .html_processor import HTMLProcessor, html_processor

__all__ = [
    'DateExtractor',
    'date_extractor',
    'ExtractionUtils',
    'extraction_utils',
    'HTMLProcessor',
    'html_processor',
]
