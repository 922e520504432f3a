"""
Overpass response caching

Handles caching of raw Overpass API responses to disk, keyed by query text
"""

import os
import json
import hashlib
from typing import Dict, Any, Optional
from loguru import logger


class OverpassCache:
    """Handles caching of Overpass responses to disk"""

    def __init__(self, cache_dir: Optional[str] = None):
        self.cache_dir = cache_dir

    @property
    def enabled(self) -> bool:
        return bool(self.cache_dir)

    def get_cache_path(self, query: str) -> Optional[str]:
        """Get cache file path for an Overpass query"""
        if not self.cache_dir:
            return None
        cache_hash = hashlib.sha1(query.strip().encode("utf-8")).hexdigest()[:16]
        return os.path.join(self.cache_dir, f"overpass_{cache_hash}.json")

    def load(self, query: str) -> Optional[Dict[str, Any]]:
        """Load a cached response for this query if one exists"""
        cache_path = self.get_cache_path(query)
        if cache_path and os.path.exists(cache_path):
            try:
                with open(cache_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                logger.debug(f"Loaded Overpass response from cache: {cache_path}")
                return data
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load cache {cache_path}: {e}")
        return None

    def save(self, query: str, data: Dict[str, Any]):
        """Save an Overpass response to cache"""
        cache_path = self.get_cache_path(query)
        if not cache_path:
            return
        try:
            os.makedirs(os.path.dirname(cache_path), exist_ok=True)
            with open(cache_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            logger.debug(f"Saved Overpass response to cache: {cache_path}")
        except OSError as e:
            logger.warning(f"Failed to save cache {cache_path}: {e}")
