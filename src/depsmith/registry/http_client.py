"""Shared HTTP client utilities for downloads.

Provides a thin wrapper around ``httpx.Client`` with standardised timeouts,
user-agent headers, and error handling. Every installer that fetches over
HTTP (direct archives, extension URLs, registry artifacts) goes through this
module so that HTTP behaviour is consistent and testable.

Raises ``SourceFetchError`` (a subclass of ``DepsmithError``) on
unrecoverable HTTP failures. Tests inject an ``httpx.MockTransport``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import httpx

from depsmith import __version__
from depsmith.exceptions import SourceFetchError

logger = logging.getLogger(__name__)

# Timeout for all HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = f"depsmith/{__version__}"


def make_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Build the client used for every download."""
    return httpx.Client(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        transport=transport,
    )


def download(
    url: str,
    dest: Path,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> Path:
    """Stream ``url`` into ``dest``.

    The body is written to a temporary sibling first and moved into place
    once complete, so ``dest`` never holds a partial download.

    Args:
        url: The URL to fetch.
        dest: Destination file; parent directories are created.
        timeout: Request timeout in seconds.
        transport: Optional transport override (tests).

    Returns:
        ``dest``.

    Raises:
        SourceFetchError: On HTTP errors, timeouts, or connection failures.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".part", dir=dest.parent)
    try:
        with os.fdopen(fd, "wb") as handle, make_client(
            timeout=timeout, transport=transport
        ) as client:
            with client.stream("GET", url) as resp:
                resp.raise_for_status()
                for chunk in resp.iter_bytes():
                    handle.write(chunk)
        os.replace(tmp_name, dest)
    except httpx.TimeoutException as exc:
        Path(tmp_name).unlink(missing_ok=True)
        logger.warning("Timeout fetching %s", url)
        raise SourceFetchError(f"Timeout fetching {url}") from exc
    except httpx.HTTPStatusError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        logger.warning("HTTP %d from %s", exc.response.status_code, url)
        raise SourceFetchError(
            f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except httpx.HTTPError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        logger.warning("Request error for %s: %s", url, exc)
        raise SourceFetchError(f"Could not fetch {url}: {exc}") from exc
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Downloaded %s -> %s", url, dest)
    return dest
