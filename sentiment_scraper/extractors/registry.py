"""Registry that dispatches URLs to site-specific extractors."""

import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import ExtractorRegistrationError
from ..models import ExtractionResult
from .autocarindia import AutocarIndiaExtractor
from .base import BaseExtractor
from .carandbike import CarAndBikeExtractor
from .cardekho import CarDekhoExtractor
from .evoindia import EvoIndiaExtractor
from .hindustantimes import HindustanTimesExtractor
from .moneycontrol import MoneyControlExtractor
from .msn import MSNExtractor
from .zeebiz import ZeeBizExtractor


logger = logging.getLogger(__name__)


# Registration order is match order
DEFAULT_EXTRACTORS = (
    CarAndBikeExtractor,
    AutocarIndiaExtractor,
    EvoIndiaExtractor,
    ZeeBizExtractor,
    MoneyControlExtractor,
    HindustanTimesExtractor,
    CarDekhoExtractor,
    MSNExtractor,
)


class ExtractorRegistry:
    """Ordered extractor list; the first extractor that can handle a URL wins."""

    def __init__(self):
        self.extractors: List[BaseExtractor] = []

    def __len__(self) -> int:
        return len(self.extractors)

    def register(self, extractor) -> None:
        """Append an extractor, failing fast if it lacks ``can_handle`` or ``extract``."""
        if not callable(getattr(extractor, 'can_handle', None)) or not callable(getattr(extractor, 'extract', None)):
            raise ExtractorRegistrationError(
                f"Extractor {extractor!r} must implement can_handle() and extract()"
            )

        self.extractors.append(extractor)
        domains = ', '.join(getattr(extractor, 'domains', ()))
        logger.debug(f"📝 Registered extractor: {getattr(extractor, 'name', extractor)} for domains: {domains}")

    def find_extractor(self, url: str) -> Optional[BaseExtractor]:
        for extractor in self.extractors:
            if extractor.can_handle(url):
                return extractor
        return None

    async def extract_content(self, html: str, url: str) -> Optional[ExtractionResult]:
        """Run the matched extractor; None means the caller should use generic extraction."""
        extractor = self.find_extractor(url)
        if extractor is None:
            logger.debug(f"💡 No specific extractor found for {url}")
            return None

        logger.info(f"🎯 Using {extractor.name} for {url}")
        return await extractor.extract(html, url)

    def get_supported_domains(self) -> List[str]:
        domains = set()
        for extractor in self.extractors:
            domains.update(extractor.domains)
        return sorted(domains)

    def get_extractor_info(self) -> List[Dict[str, Any]]:
        return [
            {
                'name': extractor.name,
                'domains': list(extractor.domains),
                'canHandle': callable(getattr(extractor, 'can_handle', None)),
                'hasExtract': callable(getattr(extractor, 'extract', None)),
            }
            for extractor in self.extractors
        ]


def create_default_registry(fetcher=None) -> ExtractorRegistry:
    """Registry with every built-in site extractor, sharing one page fetcher."""
    registry = ExtractorRegistry()
    for extractor_class in DEFAULT_EXTRACTORS:
        registry.register(extractor_class(fetcher=fetcher))
    logger.info(f"Extractor registry ready with {len(registry)} extractors")
    return registry


# Global instance
_extractor_registry: Optional[ExtractorRegistry] = None


def get_extractor_registry() -> ExtractorRegistry:
    """Get the process-wide registry (without a fetcher; AMP passes are skipped)."""
    global _extractor_registry
    if _extractor_registry is None:
        _extractor_registry = create_default_registry()
    return _extractor_registry
