"""
Manifest persistence

The manifest is merged across runs: existing entries are read back and only
the countries processed in the current run are updated.
"""

import json
import os
from datetime import datetime, timezone
from loguru import logger
from pydantic import ValidationError

from .models import Manifest


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ManifestStore:
    """Reads and writes data/manifest.json"""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Manifest:
        """Load the previous manifest; a missing or unreadable file gives an empty one"""
        if not os.path.exists(self.path):
            return Manifest()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return Manifest.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable manifest {self.path}: {e}")
            return Manifest()

    def save(self, manifest: Manifest) -> str:
        """Stamp the generation time and write the manifest pretty-printed"""
        manifest.generated = utc_now_iso()
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(manifest.model_dump(by_alias=True, exclude_none=True), f, indent=2, ensure_ascii=False)
        logger.info(f"📋 Manifest: {self.path}")
        return self.path
