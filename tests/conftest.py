"""Root pytest configuration for all tests."""

import logging

# notion-client logs every request at DEBUG/WARNING; keep test output readable
logging.getLogger("notion_client").setLevel(logging.ERROR)
