"""Unit tests for notion_service.api_wrapper module."""

from unittest.mock import MagicMock, patch

import pytest

from src.models import Column, ColumnKind, PageRef
from src.notion_service.api_wrapper import APIWrapper
from src.notion_service.auth import Authenticator
from src.notion_service.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def api(client):
    return APIWrapper(MagicMock(spec=Authenticator), client=client)


def search_result(page_id, title=None, **extra):
    properties = {}
    if title is not None:
        properties["title"] = {"type": "title", "title": [{"plain_text": title}]}
    return {"object": "page", "id": page_id, "properties": properties, **extra}


class TestClientCreation:
    """Test cases for lazy client creation."""

    @patch('src.notion_service.api_wrapper.Client')
    def test_client_built_with_token_and_timeout(self, mock_client_cls):
        """The Notion client is created on first use with the configured timeout."""
        auth = MagicMock(spec=Authenticator)
        auth.get_credentials.return_value = MagicMock(token="secret_abc")
        mock_client_cls.return_value.search.return_value = {"results": []}

        api = APIWrapper(auth, timeout_ms=5000)
        api.search_pages("x")

        mock_client_cls.assert_called_once_with(auth="secret_abc", timeout_ms=5000)

    def test_missing_token_propagates(self):
        """Credential errors surface unchanged."""
        auth = MagicMock(spec=Authenticator)
        auth.get_credentials.side_effect = InvalidCredentialsError("no token")

        with pytest.raises(InvalidCredentialsError):
            APIWrapper(auth).search_pages("x")


class TestSearchPages:
    """Test cases for APIWrapper.search_pages."""

    def test_returns_page_refs_in_order(self, api, client):
        """Results keep Notion's order."""
        client.search.return_value = {"results": [search_result("p1", "Eng"), search_result("p2", "Engineering")]}

        pages = api.search_pages("Eng")

        assert pages == [PageRef("p1", "Eng"), PageRef("p2", "Engineering")]
        kwargs = client.search.call_args.kwargs
        assert kwargs["query"] == "Eng"
        assert kwargs["filter"] == {"property": "object", "value": "page"}

    def test_archived_pages_skipped(self, api, client):
        """Archived and trashed pages are not offered as targets."""
        client.search.return_value = {"results": [
            search_result("p1", "Old", archived=True),
            search_result("p2", "Bin", in_trash=True),
            search_result("p3", "Live"),
        ]}

        assert [p.page_id for p in api.search_pages("")] == ["p3"]

    def test_untitled_page_reported_as_invalid(self, api, client):
        """Pages without a title property are labelled 'invalid page'."""
        client.search.return_value = {"results": [search_result("p1")]}

        assert api.search_pages("")[0].title == "invalid page"


class TestCreatePage:
    """Test cases for APIWrapper.create_page."""

    def test_creates_under_parent(self, api, client):
        """Pages are created under the parent page with a title."""
        client.pages.create.return_value = {"id": "new"}

        page_id = api.create_page("parent", "Intro", icon="📁")

        assert page_id == "new"
        kwargs = client.pages.create.call_args.kwargs
        assert kwargs["parent"] == {"page_id": "parent"}
        assert kwargs["properties"]["title"]["title"][0]["text"]["content"] == "Intro"
        assert kwargs["icon"] == {"type": "emoji", "emoji": "📁"}
        assert "children" not in kwargs

    def test_children_over_limit_appended_in_batches(self, api, client):
        """The first 100 children go with the create call, the rest are appended."""
        client.pages.create.return_value = {"id": "new"}
        children = [{"type": "paragraph", "n": i} for i in range(150)]

        api.create_page("parent", "Long", children=children)

        assert len(client.pages.create.call_args.kwargs["children"]) == 100
        append_kwargs = client.blocks.children.append.call_args.kwargs
        assert append_kwargs["block_id"] == "new"
        assert len(append_kwargs["children"]) == 50

    @pytest.mark.parametrize("parent_id", [None, "", "   "])
    def test_missing_parent_rejected(self, api, client, parent_id):
        """A page cannot be created without a parent."""
        with pytest.raises(APIAccessError):
            api.create_page(parent_id, "Orphan")

        client.pages.create.assert_not_called()


class TestCreateDatabase:
    """Test cases for APIWrapper.create_database and create_record."""

    def test_schema_properties(self, api, client):
        """The title column maps to a title property, others to rich_text."""
        client.databases.create.return_value = {"id": "db"}
        columns = [Column("Name", ColumnKind.TITLE), Column("Role", ColumnKind.TEXT)]

        assert api.create_database("page", "Table 1", columns) == "db"

        kwargs = client.databases.create.call_args.kwargs
        assert kwargs["parent"] == {"type": "page_id", "page_id": "page"}
        assert kwargs["properties"] == {"Name": {"title": {}}, "Role": {"rich_text": {}}}
        assert kwargs["title"][0]["text"]["content"] == "Table 1"

    def test_missing_parent_rejected(self, api, client):
        """A database needs a parent page."""
        with pytest.raises(APIAccessError):
            api.create_database(None, "Table 1", [Column("Name", ColumnKind.TITLE)])

    def test_create_record(self, api, client):
        """Rows are pages whose parent is the database."""
        client.pages.create.return_value = {"id": "row"}
        properties = {"Name": {"title": []}}

        assert api.create_record("db", properties) == "row"
        client.pages.create.assert_called_once_with(parent={"database_id": "db"}, properties=properties)


class TestErrorTranslation:
    """Test cases for SDK error translation."""

    def test_network_failure_becomes_unreachable(self, api, client):
        """Connection problems raise APIUnreachableError."""
        client.search.side_effect = Exception("Connection refused")

        with pytest.raises(APIUnreachableError):
            api.search_pages("x")

    def test_other_failure_becomes_access_error(self, api, client):
        """Unrecognised failures raise APIAccessError with the operation name."""
        client.pages.create.side_effect = Exception("validation failed")

        with pytest.raises(APIAccessError) as exc_info:
            api.create_page("parent", "Intro")

        assert "create_page(Intro)" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, Exception)

    def test_secrets_redacted_from_messages(self, api, client):
        """Integration secrets never appear in error text."""
        client.search.side_effect = Exception("bad header Bearer secret_abcdefghijkl")

        with pytest.raises(APIAccessError) as exc_info:
            api.search_pages("x")

        assert "secret_abcdefghijkl" not in str(exc_info.value)

    @patch('time.sleep')
    def test_rate_limit_retried(self, mock_sleep, api, client):
        """429 responses are retried before succeeding."""
        rate_limited = Exception("rate limited")
        rate_limited.status = 429
        client.search.side_effect = [rate_limited, {"results": []}]

        assert api.search_pages("x") == []
        mock_sleep.assert_called_once_with(1)

    @patch('time.sleep')
    def test_rate_limit_exhausted(self, mock_sleep, api, client):
        """Persistent rate limiting raises APIAccessError."""
        rate_limited = Exception("429")
        client.search.side_effect = rate_limited

        with pytest.raises(APIAccessError):
            api.search_pages("x")

        assert client.search.call_count == 4
