"""API wrapper for the Notion public API.

This module wraps the notion-client SDK and provides error translation from
SDK exceptions to our typed exception hierarchy. It integrates with the
retry logic for handling rate limits and exposes only the narrow set of
operations the importer needs.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from notion_client import Client
from notion_client.errors import (
    APIErrorCode,
    APIResponseError,
    HTTPResponseError,
    RequestTimeoutError,
)

from src.models import Column, ColumnKind, PageRef

from .auth import Authenticator
from .errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    NotionError,
    PageNotFoundError,
)
from .payloads import (
    chunk_blocks,
    emoji_icon,
    page_title_properties,
    plain_text,
    rich_text,
)
from .retry_logic import _is_rate_limit_error, retry_on_rate_limit

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 60_000


class APIWrapper:
    """Wrapper around the notion-client SDK with error translation.

    This class provides a thin wrapper over the Notion client that:
    1. Handles authentication using the Authenticator
    2. Translates SDK errors to typed exceptions
    3. Integrates retry logic for 429 rate limits
    4. Applies a per-call timeout to every request

    Example:
        >>> auth = Authenticator()
        >>> api = APIWrapper(auth)
        >>> pages = api.search_pages("Engineering")
    """

    def __init__(
        self,
        authenticator: Authenticator,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        client: Optional[Client] = None,
    ):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator instance for loading credentials
            timeout_ms: Per-request timeout in milliseconds
            client: Pre-built notion Client (tests inject a mock here)
        """
        self._authenticator = authenticator
        self._timeout_ms = timeout_ms
        self._client = client

    def _get_client(self) -> Client:
        """Get or create the Notion client.

        Raises:
            InvalidCredentialsError: If the token is missing
        """
        if self._client is None:
            creds = self._authenticator.get_credentials()
            self._client = Client(auth=creds.token, timeout_ms=self._timeout_ms)
        return self._client

    @staticmethod
    def _sanitize_credentials(text: str) -> str:
        """Mask integration secrets and bearer tokens in error text."""
        if not text:
            return text
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+', 'Bearer ***REDACTED***', text, flags=re.IGNORECASE
        )
        sanitized = re.sub(r'\b(secret|ntn)_[A-Za-z0-9]{8,}\b', '***REDACTED***', sanitized)
        return sanitized

    def _translate_error(self, exception: Exception, operation: str) -> Exception:
        """Translate SDK exceptions to typed Notion exceptions.

        Rate limit errors are returned unchanged so the retry logic can
        recognise them.

        Args:
            exception: The original exception from the SDK
            operation: Description of the operation that failed (for logging)

        Returns:
            Exception: Translated exception
        """
        if isinstance(exception, NotionError):
            return exception

        if _is_rate_limit_error(exception):
            return exception

        if isinstance(exception, RequestTimeoutError):
            return APIUnreachableError()

        if isinstance(exception, APIResponseError):
            if exception.code == APIErrorCode.Unauthorized:
                return InvalidCredentialsError(str(exception))
            if exception.code == APIErrorCode.ObjectNotFound:
                match = re.search(r'\(([^)]+)\)', operation)
                return PageNotFoundError(match.group(1) if match else "unknown")
            safe_error_msg = self._sanitize_credentials(str(exception))
            logger.debug(f"API operation failed: {operation} - {safe_error_msg}")
            return APIAccessError(f"Notion API rejected {operation}: {safe_error_msg}")

        if isinstance(exception, HTTPResponseError):
            if exception.status == 401:
                return InvalidCredentialsError()
            return APIAccessError(f"Notion API failure during {operation} (HTTP {exception.status})")

        error_msg = str(exception).lower()
        if any(keyword in error_msg for keyword in [
            'connection',
            'timeout',
            'timed out',
            'unreachable',
            'network',
        ]):
            return APIUnreachableError()

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.debug(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(f"Notion API failure during {operation}: {safe_error_msg}")

    def _call(self, operation: str, func_name: str, **kwargs) -> Dict[str, Any]:
        """Invoke a client endpoint with error translation and rate-limit retry.

        Args:
            operation: Description used in error messages
            func_name: Dotted endpoint path on the client (e.g. "pages.create")
            **kwargs: Request body parameters
        """
        def _invoke():
            try:
                target: Any = self._get_client()
                for part in func_name.split('.'):
                    target = getattr(target, part)
                return target(**kwargs)
            except Exception as e:
                translated = self._translate_error(e, operation)
                if translated is e:
                    raise
                raise translated from e

        return retry_on_rate_limit(_invoke)

    @staticmethod
    def _require_parent(parent_id: Optional[str], operation: str) -> str:
        if not parent_id or not str(parent_id).strip():
            raise APIAccessError(f"Cannot {operation}: missing parent id")
        return str(parent_id).strip()

    def search_pages(self, query: str) -> List[PageRef]:
        """Search pages visible to the integration.

        Args:
            query: Title search term ("" lists every shared page)

        Returns:
            List of PageRef in the order Notion returned them. Pages without
            a title property are reported with the title "invalid page".
        """
        logger.info(f"Notion API: search pages matching '{query}'")
        response = self._call(
            f"search({query})",
            "search",
            query=query,
            filter={"property": "object", "value": "page"},
        )

        pages = []
        for result in response.get("results", []):
            if result.get("archived") or result.get("in_trash"):
                continue
            title = self._extract_title(result)
            pages.append(PageRef(page_id=result["id"], title=title))
        return pages

    @staticmethod
    def _extract_title(page: Dict[str, Any]) -> str:
        for prop in (page.get("properties") or {}).values():
            if isinstance(prop, dict) and prop.get("type") == "title":
                text = plain_text(prop.get("title", []))
                if text:
                    return text
        return "invalid page"

    def create_page(
        self,
        parent_id: Optional[str],
        title: str,
        icon: Optional[str] = None,
        children: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """Create a page under another page.

        Only the first 100 children are sent with the create request; the
        remainder is appended in batches afterwards.

        Args:
            parent_id: Parent page ID
            title: Page title
            icon: Optional emoji icon
            children: Optional block children

        Returns:
            The new page ID

        Raises:
            APIAccessError: If parent_id is missing or the request fails
        """
        parent = self._require_parent(parent_id, f"create page '{title}'")
        batches = list(chunk_blocks(children or []))

        body: Dict[str, Any] = {
            "parent": {"page_id": parent},
            "properties": page_title_properties(title),
        }
        if icon:
            body["icon"] = emoji_icon(icon)
        if batches:
            body["children"] = batches[0]

        response = self._call(f"create_page({title})", "pages.create", **body)
        page_id = response["id"]

        for batch in batches[1:]:
            self.append_blocks(page_id, batch)

        return page_id

    def append_blocks(self, block_id: str, children: List[Dict[str, Any]]) -> None:
        """Append children to an existing page or block, 100 at a time."""
        for batch in chunk_blocks(children):
            self._call(
                f"append_blocks({block_id})",
                "blocks.children.append",
                block_id=block_id,
                children=batch,
            )

    def create_database(
        self,
        parent_id: Optional[str],
        title: str,
        columns: List[Column],
    ) -> str:
        """Create an inline database under a page.

        Args:
            parent_id: Parent page ID
            title: Database title
            columns: Ordered schema; exactly one TITLE column is expected

        Returns:
            The new database ID
        """
        parent = self._require_parent(parent_id, f"create database '{title}'")
        properties: Dict[str, Any] = {}
        for column in columns:
            if column.kind is ColumnKind.TITLE:
                properties[column.name] = {"title": {}}
            else:
                properties[column.name] = {"rich_text": {}}

        response = self._call(
            f"create_database({title})",
            "databases.create",
            parent={"type": "page_id", "page_id": parent},
            title=rich_text(title),
            properties=properties,
        )
        return response["id"]

    def create_record(self, database_id: str, properties: Dict[str, Any]) -> str:
        """Create one row in a database.

        Args:
            database_id: Target database ID
            properties: Property values keyed by column name

        Returns:
            The new row (page) ID
        """
        response = self._call(
            f"create_record({database_id})",
            "pages.create",
            parent={"database_id": database_id},
            properties=properties,
        )
        return response["id"]
