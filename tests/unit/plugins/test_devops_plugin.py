"""Unit tests for plugins.devops module."""

import logging
from unittest.mock import Mock, patch

import pytest

from src.plugins.base import PluginContext, PluginOptions
from src.plugins.devops import DevopsPlugin, create_plugin
from src.plugins.errors import ExternalCommandError
from src.plugins.user_cache import UserCache

GUID = "0f1e2d3c-aaaa-bbbb-cccc-1234567890ab"


@pytest.fixture
def cache(tmp_path):
    return UserCache(str(tmp_path / "devops-cache.json"))


@pytest.fixture
def plugin(cache):
    return DevopsPlugin(user_cache=cache, max_workers=2)


@pytest.fixture
def context():
    return PluginContext(file_path="page.md", observer=Mock())


def image_block(url):
    return {"object": "block", "type": "image", "image": {"type": "external", "external": {"url": url}}}


class TestPreParse:
    """Test cases for DevopsPlugin.pre_parse."""

    def test_adds_space_after_hashes(self, plugin, context):
        """Headers written without a space are fixed."""
        assert plugin.pre_parse("#Title\n##Sub\n", context) == "# Title\n## Sub\n"

    def test_well_formed_headers_unchanged(self, plugin, context):
        """Headers that already have a space are left alone."""
        assert plugin.pre_parse("# Title\n", context) == "# Title\n"

    def test_tabs_become_two_spaces(self, plugin, context):
        """Tabs are replaced so nested lists parse."""
        assert plugin.pre_parse("-\titem\n", context) == "-  item\n"

    @patch("src.plugins.devops.run_az_json")
    def test_mentions_resolved(self, mock_az, plugin, context):
        """@<GUID> mentions are replaced with the user's display name."""
        mock_az.return_value = {"displayName": "Jane Doe"}

        result = plugin.pre_parse(f"Owner: @<{GUID}>\n", context)

        assert result == "Owner: @Jane Doe\n"
        args = mock_az.call_args.args[0]
        assert args[:5] == ["devops", "user", "show", "--user", GUID]

    @patch("src.plugins.devops.run_az_json")
    def test_repeated_mention_looked_up_once(self, mock_az, plugin, context):
        """The same mention is resolved once per file."""
        mock_az.return_value = {"displayName": "Jane Doe"}

        result = plugin.pre_parse(f"@<{GUID}> and @<{GUID}>", context)

        assert result == "@Jane Doe and @Jane Doe"
        assert mock_az.call_count == 1

    @patch("src.plugins.devops.run_az_json")
    def test_cached_mention_not_looked_up(self, mock_az, plugin, cache, context):
        """A mention already in the cache does not call az."""
        cache.put(f"@<{GUID}>", "@Cached User")

        assert plugin.pre_parse(f"@<{GUID}>", context) == "@Cached User"
        mock_az.assert_not_called()

    @patch("src.plugins.devops.run_az_json")
    def test_failed_lookup_leaves_token(self, mock_az, plugin, cache, context):
        """A failed lookup keeps the original token and is not cached."""
        mock_az.side_effect = ExternalCommandError("az devops user", "not logged in")

        assert plugin.pre_parse(f"@<{GUID}>", context) == f"@<{GUID}>"
        assert f"@<{GUID}>" not in cache

    @pytest.mark.parametrize("output", [["unexpected"], "Jane Doe", 42, None])
    @patch("src.plugins.devops.run_az_json")
    def test_non_object_output_leaves_token(self, mock_az, output, plugin, cache, context):
        """az output that is not a JSON object keeps the token and is not cached."""
        mock_az.return_value = output

        assert plugin.pre_parse(f"hi @<{GUID}>", context) == f"hi @<{GUID}>"
        assert f"@<{GUID}>" not in cache

    @patch("src.plugins.devops.run_az_json")
    def test_successful_lookup_persisted(self, mock_az, plugin, cache, context):
        """Resolved names are written to the cache file."""
        mock_az.return_value = {"displayName": "Jane Doe"}

        plugin.pre_parse(f"@<{GUID}>", context)

        reloaded = UserCache(cache.cache_path)
        assert reloaded.get(f"@<{GUID}>") == "@Jane Doe"


class TestPostParse:
    """Test cases for DevopsPlugin.post_parse."""

    def test_remote_image_with_allowed_type_kept(self, plugin, context):
        """A remote PNG is kept as-is."""
        block = image_block("https://example.com/a.png")

        result = plugin.post_parse([block], Mock(), PluginOptions(), context)

        assert result == [block]

    def test_remote_image_with_other_type_dropped(self, plugin, context):
        """A remote image without a known extension is removed."""
        result = plugin.post_parse([image_block("https://example.com/a.php")], Mock(), PluginOptions(), context)

        assert result == []

    def test_non_image_blocks_untouched(self, plugin, context):
        """Only image blocks are processed."""
        paragraph = {"object": "block", "type": "paragraph", "paragraph": {"rich_text": []}}

        assert plugin.post_parse([paragraph], Mock(), PluginOptions(), context) == [paragraph]

    def test_missing_local_image_dropped(self, plugin, context, tmp_path, caplog):
        """A local image that does not exist is dropped with a warning."""
        options = PluginOptions(base_path=str(tmp_path))

        with caplog.at_level(logging.WARNING, logger="src.plugins.devops"):
            result = plugin.post_parse([image_block("/.attachments/missing.png")], Mock(), options, context)

        assert result == []
        assert "Could not find image" in caplog.text

    @patch("src.plugins.devops.run_az")
    def test_local_image_uploaded(self, mock_az, plugin, context, tmp_path):
        """A local image is uploaded and its URL rewritten."""
        attachments = tmp_path / ".attachments"
        attachments.mkdir()
        (attachments / "my image.png").write_bytes(b"png")
        options = PluginOptions(
            base_path=str(tmp_path),
            images_path=str(tmp_path),
            azure_blob_url="https://acct.z13.web.core.windows.net/",
            azure_blob_account="acct",
        )

        result = plugin.post_parse([image_block("/.attachments/my%20image.png")], Mock(), options, context)

        assert result[0]["image"]["external"]["url"] == "https://acct.z13.web.core.windows.net/my%20image.png"
        args = mock_az.call_args.args[0]
        assert args[:3] == ["storage", "blob", "upload"]
        assert "--account-name" in args and "acct" in args

    @patch("src.plugins.devops.run_az")
    def test_failed_upload_dropped(self, mock_az, plugin, context, tmp_path):
        """An image whose upload fails is removed."""
        (tmp_path / "a.png").write_bytes(b"png")
        mock_az.side_effect = ExternalCommandError("az storage blob", "denied")
        options = PluginOptions(base_path=str(tmp_path), azure_blob_url="https://x/", azure_blob_account="x")

        assert plugin.post_parse([image_block("a.png")], Mock(), options, context) == []

    def test_upload_without_storage_settings_dropped(self, plugin, context, tmp_path):
        """Without blob settings local images cannot be uploaded and are dropped."""
        (tmp_path / "a.png").write_bytes(b"png")

        result = plugin.post_parse([image_block("a.png")], Mock(), PluginOptions(base_path=str(tmp_path)), context)

        assert result == []


class TestCreatePlugin:
    """Test cases for the devops plugin factory."""

    def test_declares_both_hooks(self, tmp_path):
        """The devops plugin provides pre_parse and post_parse."""
        plugin = create_plugin(PluginOptions(extra={"devops_cache": str(tmp_path / "c.json")}))

        assert plugin.name == "devops"
        assert plugin.pre_parse is not None
        assert plugin.post_parse is not None
