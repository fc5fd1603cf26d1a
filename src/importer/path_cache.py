"""Folder page memoization for the import pipeline.

This module maps the directory part of each imported file onto a chain of
Notion "folder" pages, creating each folder page at most once per run.
"""

import logging
from typing import Dict, Hashable, List, Optional

from src.notion_service.api_wrapper import APIWrapper
from src.notion_service.payloads import FOLDER_ICON

from .errors import FolderCreationError
from .models import FolderCacheMode, FolderPage, ImportTarget, PathKey
from .titles import folder_title

logger = logging.getLogger(__name__)


class PathKeyCache:
    """Resolves path segment chains to folder page IDs, creating pages lazily.

    In SEGMENT mode the cache key is the bare segment name: two branches
    that contain a folder with the same name (``a/images`` and
    ``b/images``) resolve to the same remote page, created under whichever
    parent referenced it first. PATH mode keys by the whole chain prefix.

    A failed creation is cached as None for the rest of the run. Every
    descendant of that folder is then created against a missing parent and
    fails in turn; nothing is retried.

    Example:
        >>> cache = PathKeyCache(api)
        >>> cache.resolve(("guides", "setup"), target)
        'b1c2...'
    """

    def __init__(self, api: APIWrapper, mode: FolderCacheMode = FolderCacheMode.SEGMENT):
        """Initialize the cache.

        Args:
            api: APIWrapper used to create folder pages
            mode: Cache keying policy
        """
        self.api = api
        self.mode = mode
        self._page_ids: Dict[Hashable, Optional[str]] = {}
        self._folders: List[FolderPage] = []

    def _key(self, path_key: PathKey, index: int) -> Hashable:
        if self.mode is FolderCacheMode.PATH:
            return tuple(path_key[:index + 1])
        return path_key[index]

    def __contains__(self, key: Hashable) -> bool:
        return key in self._page_ids

    def __len__(self) -> int:
        return len(self._page_ids)

    @property
    def folders(self) -> List[FolderPage]:
        """Folder pages created (or attempted) so far, in creation order."""
        return list(self._folders)

    def resolve(self, path_key: PathKey, import_target: ImportTarget) -> Optional[str]:
        """Resolve a chain of segments to the ID of its last folder page.

        Args:
            path_key: Directory segments relative to the base path
            import_target: Root page for the first segment

        Returns:
            Page ID of the deepest folder, the import target's ID for an
            empty chain, or None if a folder in the chain could not be created
        """
        return self.resolve_chain(path_key, import_target)[-1] if path_key else import_target.page_id

    def resolve_chain(self, path_key: PathKey, import_target: ImportTarget) -> List[Optional[str]]:
        """Resolve every prefix of path_key, left to right.

        Returns:
            One page ID (or None) per segment
        """
        resolved: List[Optional[str]] = []
        parent_id: Optional[str] = import_target.page_id

        for index, segment in enumerate(path_key):
            key = self._key(path_key, index)
            if key not in self._page_ids:
                self._page_ids[key] = self._create_folder(segment, parent_id)
            else:
                logger.debug(f"Folder cache hit for '{segment}'")
            parent_id = self._page_ids[key]
            resolved.append(parent_id)

        return resolved

    def _create_folder(self, segment: str, parent_id: Optional[str]) -> Optional[str]:
        title = folder_title(segment)
        logger.debug(f"Creating folder page: {segment} ...")
        page_id: Optional[str] = None
        try:
            page_id = self.api.create_page(parent_id=parent_id, title=title, icon=FOLDER_ICON)
        except Exception as e:
            logger.warning(str(FolderCreationError(segment, str(e))))

        self._folders.append(FolderPage(
            segment_name=segment,
            title=title,
            remote_page_id=page_id,
            parent_remote_page_id=parent_id,
        ))
        return page_id
