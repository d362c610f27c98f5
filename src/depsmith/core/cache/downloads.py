"""Download cache for immutable remote files.

Extension URLs and registry artifacts are fetched once per URL and reused
by every project on the machine. Entries live at
``<cache_root>/downloads/<sha256(url)[:16]>/<filename>``.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

import httpx

from depsmith.registry.http_client import DEFAULT_TIMEOUT, download

logger = logging.getLogger(__name__)

DOWNLOADS_DIRNAME = "downloads"


def filename_from_url(url: str, fallback: str = "download") -> str:
    tail = url.split("?", 1)[0].split("#", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    return tail or fallback


class DownloadCache:
    """URL-keyed cache of downloaded files."""

    def __init__(
        self,
        cache_root: Path,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.root = cache_root / DOWNLOADS_DIRNAME
        self.timeout = timeout
        self.transport = transport

    def path_for(self, url: str) -> Path:
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
        return self.root / digest / filename_from_url(url)

    def fetch(self, url: str, refresh: bool = False) -> Path:
        """Return the cached file for ``url``, downloading it if needed.

        Raises:
            SourceFetchError: If the download fails.
        """
        path = self.path_for(url)
        if path.is_file() and not refresh:
            logger.debug("Download cache hit for %s", url)
            return path
        return download(url, path, timeout=self.timeout, transport=self.transport)
