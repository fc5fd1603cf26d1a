"""Persistent lookup cache for resolved user mentions.

The cache is a flat JSON object mapping a mention token (``@<GUID>``) to
its display text (``@Jane Doe``). Lookups for one file run in parallel, so
every write goes through a lock and is persisted immediately.
"""

import json
import logging
import os
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = 'devops-cache.json'


class UserCache:
    """Thread-safe mention → display text mapping backed by a JSON file."""

    def __init__(self, cache_path: str = DEFAULT_CACHE_FILE):
        self.cache_path = cache_path
        self._lock = threading.Lock()
        self._entries: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        try:
            with open(self.cache_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No users loaded from cache")
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable user cache {self.cache_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring user cache {self.cache_path}: expected a JSON object")
            return {}

        entries = {str(k): str(v) for k, v in data.items()}
        logger.info(f"Loaded {len(entries)} users from cache")
        return entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: str) -> bool:
        return token in self._entries

    def get(self, token: str) -> Optional[str]:
        return self._entries.get(token)

    def put(self, token: str, display: str) -> None:
        with self._lock:
            self._entries[token] = display
            self._persist()

    def _persist(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.cache_path))
        try:
            os.makedirs(directory, exist_ok=True)
            with open(self.cache_path, 'w', encoding='utf-8') as f:
                json.dump(self._entries, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.warning(f"Could not persist user cache to {self.cache_path}: {e}")
