"""
Centralized loading and caching of the marketing dataset.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from business_logic.error_handler import DataLoadError
from models.data_models import MarketingData
from .parsers import MarketingDataParser

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_DATA_SOURCE = "sample_data/marketing_data.json"


@dataclass
class DataCacheEntry:
    """Represents a cached dataset with metadata."""
    data: MarketingData
    source: str
    content_hash: str
    last_updated: datetime
    last_accessed: datetime


class DataManager:
    """
    Fetches the marketing dataset from a local JSON file or an HTTP(S) URL.

    Parsed datasets are kept in memory. A cache hit returns the very same
    MarketingData object, so dataset identity is stable between reruns.
    """

    def __init__(self, source: Optional[str] = None, cache_ttl_minutes: int = 15,
                 request_timeout: float = 10.0):
        """
        Initialize the DataManager.

        Args:
            source: Default file path or URL of the dataset
            cache_ttl_minutes: Time-to-live for the in-memory cache
            request_timeout: Timeout in seconds for HTTP fetches
        """
        self.default_source = source or DEFAULT_DATA_SOURCE
        self.cache_ttl = timedelta(minutes=cache_ttl_minutes)
        self.request_timeout = request_timeout
        self.parser = MarketingDataParser()

        self._cache: Optional[DataCacheEntry] = None

    @staticmethod
    def is_remote(source: str) -> bool:
        return source.lower().startswith(("http://", "https://"))

    @staticmethod
    def _hash_bytes(content: bytes) -> str:
        return hashlib.md5(content).hexdigest()

    def _read_file(self, source: str) -> bytes:
        path = Path(source)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise DataLoadError(f"Marketing data file not found: {source}", source=source) from e
        except IsADirectoryError as e:
            raise DataLoadError(f"Marketing data path is a directory: {source}", source=source) from e
        except PermissionError as e:
            raise DataLoadError(f"Permission denied reading marketing data: {source}", source=source) from e
        except OSError as e:
            raise DataLoadError(f"Could not read marketing data from {source}: {str(e)}", source=source) from e

    def _fetch_remote(self, source: str) -> bytes:
        try:
            response = requests.get(source, timeout=self.request_timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise DataLoadError(f"Timed out fetching marketing data from {source}", source=source) from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise DataLoadError(f"Failed to fetch marketing data: HTTP {status}", source=source) from e
        except requests.exceptions.RequestException as e:
            raise DataLoadError(f"Failed to fetch marketing data: {str(e)}", source=source) from e
        return response.content

    def _is_cache_valid(self, entry: DataCacheEntry, source: str) -> bool:
        if entry.source != source:
            return False

        if datetime.now() - entry.last_updated > self.cache_ttl:
            logger.info(f"Cache has expired for: {source}")
            return False

        if not self.is_remote(source):
            try:
                current_hash = self._hash_bytes(Path(source).read_bytes())
            except OSError:
                logger.warning(f"Cached file no longer readable: {source}")
                return False
            if current_hash != entry.content_hash:
                logger.info(f"File has been modified: {source}")
                return False

        return True

    def load_marketing_data(self, source: Optional[str] = None) -> MarketingData:
        """
        Load and cache the marketing dataset.

        Args:
            source: File path or URL. Uses the default source if None.

        Returns:
            Parsed MarketingData

        Raises:
            DataLoadError: If the dataset cannot be fetched or is malformed
        """
        if source is None:
            source = self.default_source

        if self._cache and self._is_cache_valid(self._cache, source):
            self._cache.last_accessed = datetime.now()
            logger.info("Using in-memory marketing data cache")
            return self._cache.data

        logger.info(f"Loading marketing data from: {source}")
        content = self._fetch_remote(source) if self.is_remote(source) else self._read_file(source)

        try:
            text = content.decode("utf-8-sig")
            data = self.parser.parse_text(text)
        except UnicodeDecodeError as e:
            raise DataLoadError(f"Marketing data is not valid UTF-8 text: {source}", source=source) from e
        except ValueError as e:
            raise DataLoadError(str(e), source=source) from e

        now = datetime.now()
        self._cache = DataCacheEntry(
            data=data,
            source=source,
            content_hash=self._hash_bytes(content),
            last_updated=now,
            last_accessed=now,
        )
        logger.info("Marketing data loaded and cached successfully")
        return data

    def clear_cache(self):
        """Clear the cached dataset."""
        self._cache = None
        logger.info("Marketing data cache cleared")

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the cached dataset.

        Returns:
            Dictionary containing cache statistics
        """
        stats = {
            'in_memory': self._cache is not None,
            'source': None,
            'last_updated': None,
            'last_accessed': None,
            'campaigns': 0,
        }

        if self._cache:
            stats['source'] = self._cache.source
            stats['last_updated'] = self._cache.last_updated.isoformat()
            stats['last_accessed'] = self._cache.last_accessed.isoformat()
            stats['campaigns'] = len(self._cache.data.campaigns)

        return stats
