"""JSON token store for the single Google Home grant.

Storage Location: ./token.json (configurable via GOOGLE_HOME_MCP_TOKEN_PATH)

One token set per deployment. Each save replaces the file atomically: the
new content is written to a temporary file in the same directory and moved
over the old one, so readers see either the previous or the new token set.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from google_home_mcp.auth.models import TokenSet

logger = logging.getLogger(__name__)


class TokenStorage:
    """File-backed storage for the persisted ``TokenSet``.

    Attributes:
        token_path: Path to the token JSON file.

    Example:
        ```python
        storage = TokenStorage(Path("token.json"))
        storage.save(TokenSet(access_token="abc123"))

        token = storage.load()
        if token:
            print(token.access_token)
        ```
    """

    def __init__(self, token_path: Path) -> None:
        self.token_path = Path(token_path)

    def exists(self) -> bool:
        return self.token_path.exists()

    def load(self) -> TokenSet | None:
        """Load the persisted token set.

        Returns:
            TokenSet if the file exists and is valid, None otherwise.
        """
        if not self.token_path.exists():
            return None

        try:
            with open(self.token_path) as f:
                data = json.load(f)
            return TokenSet.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable token file {self.token_path}: {e}")
            return None

    def save(self, token: TokenSet) -> None:
        """Persist a token set, replacing any previous one.

        Args:
            token: Token set to write.

        Raises:
            OSError: If the file cannot be written. The previous file is left intact.
        """
        directory = self.token_path.parent
        directory.mkdir(parents=True, exist_ok=True)

        payload = token.model_dump(mode="json", exclude_none=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.token_path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            # Owner read/write only (600)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.token_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Stored token at {self.token_path}")
