"""Azure DevOps wiki plugin.

pre_parse:
    - adds the missing space in headers (``#Title`` → ``# Title``)
    - replaces tabs with two spaces
    - resolves ``@<GUID>`` user mentions to ``@Display Name`` through the
      Azure CLI, in parallel, with a persistent cache
post_parse:
    - keeps remote images with a known image extension
    - uploads local images to Azure blob storage and points the block at
      the uploaded copy
    - drops images that cannot be kept (logged)

Requires the Azure CLI (``az``) with the devops extension.
"""

import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote, urlparse

from .azure_cli import run_az, run_az_json
from .base import Blocks, Plugin, PluginContext, PluginOptions
from .errors import ExternalCommandError, UploadError, UserLookupError
from .user_cache import DEFAULT_CACHE_FILE, UserCache

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r'(^|[ ])(#{1,5})(?!#)(\S.*?)', re.MULTILINE)
MENTION_PATTERN = re.compile(r'@<([a-zA-Z\-0-9]*)>')

ALLOWED_IMAGE_TYPES = (
    '.png',
    '.jpg',
    '.jpeg',
    '.gif',
    '.tif',
    '.tiff',
    '.bmp',
    '.svg',
    '.heic',
)

MAX_LOOKUP_WORKERS = 8
BLOB_CONTAINER = '$web'


class DevopsPlugin:
    """Hooks for importing an Azure DevOps wiki export."""

    def __init__(self, user_cache: Optional[UserCache] = None, max_workers: int = MAX_LOOKUP_WORKERS):
        self.user_cache = user_cache if user_cache is not None else UserCache()
        self.max_workers = max_workers

    def lookup_user(self, token: str) -> str:
        """Resolve one mention token; failures leave the token unchanged."""
        cached = self.user_cache.get(token)
        if cached:
            return cached

        user_guid = token.replace('@<', '').replace('>', '')
        try:
            user_data = run_az_json(['devops', 'user', 'show', '--user', user_guid, '--query', 'user'])
            if not isinstance(user_data, dict):
                raise UserLookupError('az devops user show', f"unexpected output for {user_guid}")
            display_name = user_data.get('displayName')
            if not display_name:
                raise UserLookupError('az devops user show', f"no displayName for {user_guid}")
        except ExternalCommandError as e:
            logger.warning(f"Failed for {token} with {e}")
            return token

        display = f"@{display_name}"
        self.user_cache.put(token, display)
        return display

    def resolve_mentions(self, text: str, context: PluginContext) -> str:
        tokens = list(dict.fromkeys(match.group(0) for match in MENTION_PATTERN.finditer(text)))
        if not tokens:
            return text

        context.observer.on_message(f"Looking up {len(tokens)} user(s) ...")
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tokens))) as executor:
            resolved = list(executor.map(self.lookup_user, tokens))

        for token, display in zip(tokens, resolved):
            text = text.replace(token, display)
        return text

    def pre_parse(self, text: str, context: PluginContext) -> str:
        text = HEADER_PATTERN.sub(r'\2 \3', text)
        text = text.replace('\t', '  ')
        return self.resolve_mentions(text, context)

    def upload_image(self, file_path: str, options: PluginOptions) -> str:
        """Upload file_path to the blob container and return its public URL."""
        if not options.azure_blob_account or not options.azure_blob_url:
            raise UploadError(
                'az storage blob upload',
                'azureBlobAccount and azureBlobUrl must be configured to upload images',
            )
        run_az([
            'storage', 'blob', 'upload',
            '--file', file_path,
            '-c', BLOB_CONTAINER,
            '--account-name', options.azure_blob_account,
        ])
        return f"{options.azure_blob_url}{quote(os.path.basename(file_path))}"

    def _process_image(self, block: Dict[str, Any], options: PluginOptions, context: PluginContext) -> bool:
        """Rewrite an image block in place; return False if it must be dropped."""
        image = block.get('image', {})
        source = image.get(image.get('type', 'external'), {}) or {}
        image_url = unquote(source.get('url', ''))

        parsed = urlparse(image_url)
        if parsed.scheme and parsed.netloc:
            file_type = os.path.splitext(parsed.path)[1].lower()
            if file_type in ALLOWED_IMAGE_TYPES:
                return True
            logger.debug(f"Dropping image with unsupported type: {image_url}")
            return False

        images_root = options.images_path or options.base_path
        file_path = os.path.join(images_root, image_url.lstrip('/'))
        if not os.path.exists(file_path):
            logger.warning(f"Could not find image {file_path} ... check the images path?")
            return False

        try:
            context.observer.on_message(f"Uploading {file_path} ...")
            new_url = self.upload_image(file_path, options)
        except ExternalCommandError as e:
            logger.error(f"Error uploading file: {e}")
            return False

        block['image'] = {'type': 'external', 'external': {'url': new_url}}
        logger.info(f"File available at {new_url} ...")
        return True

    def post_parse(self, blocks: Blocks, api: Any, options: PluginOptions, context: PluginContext) -> Blocks:
        kept: List[Dict[str, Any]] = []
        for block in blocks:
            if block.get('type') == 'image':
                if self._process_image(block, options, context):
                    kept.append(block)
            else:
                kept.append(block)
        return kept


def create_plugin(options: PluginOptions) -> Plugin:
    cache_path = options.extra.get('devops_cache', DEFAULT_CACHE_FILE)
    plugin = DevopsPlugin(user_cache=UserCache(cache_path))
    return Plugin(name='devops', pre_parse=plugin.pre_parse, post_parse=plugin.post_parse)
