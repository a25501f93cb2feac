"""Site-specific extractors and the registry that dispatches to them."""

from .base import BaseExtractor
from .generic import GenericExtractor
from .registry import ExtractorRegistry, create_default_registry, get_extractor_registry

__all__ = [
    'BaseExtractor',
    'GenericExtractor',
    'ExtractorRegistry',
    'create_default_registry',
    'get_extractor_registry',
]
