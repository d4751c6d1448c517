"""
Driver name providers.

The default provider reads a newline-delimited UTF-8 list of names from a
local file or an http(s) URL and returns one at random per call.
"""

import logging
import random
from typing import List, Optional

import requests
from faker import Faker

from .config import InvoiceSettings
from .errors import NameProviderError
from .sampler import default_rng

logger = logging.getLogger(__name__)


def parse_names(text: str) -> List[str]:
    """Split a names resource into trimmed, non-blank lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class TextFileNameProvider:
    """Random names from a line-delimited text resource."""

    def __init__(self, source: str, timeout: float = 10.0,
                 rng: Optional[random.Random] = None, cache: bool = True):
        """
        Args:
            source: Local file path or http(s) URL
            timeout: Request timeout in seconds for URL sources
            rng: Random source used to pick a name
            cache: Keep the list after the first successful load
        """
        self.source = source
        self.timeout = timeout
        self.rng = rng or default_rng()
        self.cache = cache
        self._names: Optional[List[str]] = None

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    def _read_source(self) -> str:
        if self.is_remote:
            try:
                response = requests.get(self.source, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise NameProviderError(f"Could not fetch driver names from {self.source}: {e}") from e
            response.encoding = response.encoding or 'utf-8'
            return response.text

        try:
            with open(self.source, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise NameProviderError(f"Could not read driver names from {self.source}: {e}") from e

    def load_names(self) -> List[str]:
        """Return the name list, loading it if needed.

        Raises:
            NameProviderError: if the source is unreadable or holds no names.
        """
        if self._names is not None:
            return self._names

        names = parse_names(self._read_source())
        if not names:
            raise NameProviderError(f"No driver names found in {self.source}")

        logger.info(f"Loaded {len(names)} driver names from {self.source}")
        if self.cache:
            self._names = names
        return names

    def refresh(self):
        """Forget cached names so the next call reloads the source."""
        self._names = None

    def get_random_name(self) -> str:
        names = self.load_names()
        return names[int(self.rng.random() * len(names))]


class FakerNameProvider:
    """Synthetic Indian names from Faker, for demos without a names file."""

    def __init__(self, seed: Optional[int] = None):
        self.fake = Faker('en_IN')
        if seed is not None:
            self.fake.seed_instance(seed)

    def get_random_name(self) -> str:
        return self.fake.name()


def create_name_provider(settings: InvoiceSettings, rng: Optional[random.Random] = None,
                         seed: Optional[int] = None):
    """Build the provider selected by ``settings.driver_names_source``."""
    if settings.driver_names_source == "faker":
        logger.info("Using Faker en_IN driver names")
        return FakerNameProvider(seed=seed)
    return TextFileNameProvider(
        settings.driver_names_source,
        timeout=settings.driver_names_timeout,
        rng=rng,
    )
