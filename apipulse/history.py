"""Recently used target URLs."""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import aiofiles

MAX_HISTORY_SIZE = 5
HISTORY_FILE_NAME = "url_history.json"


def default_history_path() -> Path:
    """History file location, overridable with the APIPULSE_HOME variable."""
    home = os.environ.get("APIPULSE_HOME") or Path.home() / ".apipulse"
    return Path(home) / HISTORY_FILE_NAME


class UrlHistory:
    """Keeps the most recently tested URLs, newest first."""

    def __init__(self, path: Optional[Union[str, Path]] = None, max_size: int = MAX_HISTORY_SIZE):
        self.path = Path(path) if path else default_history_path()
        self.max_size = max_size
        self.urls: List[str] = []
        self.logger = logging.getLogger(__name__)

    async def load(self) -> List[str]:
        """
        Load history from disk.

        A missing file leaves the history empty. A corrupted file is
        ignored with a warning.
        """
        if not self.path.exists():
            return self.recent()

        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            content = await f.read()

        try:
            urls = json.loads(content)
        except json.JSONDecodeError as e:
            self.logger.warning(f"Ignoring corrupted URL history {self.path}: {e}")
            return self.recent()

        if not isinstance(urls, list):
            self.logger.warning(f"Ignoring URL history {self.path}: expected a list")
            return self.recent()

        self.urls = [u for u in urls if isinstance(u, str)][: self.max_size]
        return self.recent()

    async def save(self) -> None:
        """Write history to disk, creating the parent directory if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self.urls, indent=2))

    def add(self, url: str) -> None:
        """Move ``url`` to the front, dropping the oldest entry past max_size."""
        if not url or not url.strip():
            return
        if url in self.urls:
            self.urls.remove(url)
        self.urls.insert(0, url)
        del self.urls[self.max_size:]

    def recent(self) -> List[str]:
        return list(self.urls)

    def __len__(self) -> int:
        return len(self.urls)
