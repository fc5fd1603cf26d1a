"""Authentication module for loading the Notion integration token.

This module loads the Notion integration token from the environment using
python-dotenv. A token passed explicitly (CLI flag or config file) takes
precedence over the environment.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError


class Credentials(NamedTuple):
    """Notion API credentials."""
    token: str


class Authenticator:
    """Loads and validates the Notion integration token.

    The token is read from a .env file using python-dotenv (or from the
    process environment) and is never cached or logged.

    Required environment variables (unless a token is passed explicitly):
        NOTION_TOKEN: Internal integration secret (https://www.notion.so/my-integrations)

    Raises:
        InvalidCredentialsError: If no token is available

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
    """

    TOKEN_ENV_VAR = 'NOTION_TOKEN'

    def __init__(self, token: Optional[str] = None):
        """Initialize the authenticator.

        Args:
            token: Explicit token; overrides the environment when provided
        """
        load_dotenv()
        self._token = token

    def get_credentials(self) -> Credentials:
        """Get the Notion credentials.

        Returns:
            Credentials: A named tuple containing the token

        Raises:
            InvalidCredentialsError: If the token is missing
        """
        token = self._token or os.getenv(self.TOKEN_ENV_VAR)
        if not token or not token.strip():
            raise InvalidCredentialsError(
                f"no token provided (use --token or set {self.TOKEN_ENV_VAR})"
            )
        return Credentials(token=token.strip())
