"""
HTTP fetch utilities

This module downloads playlist and guide bodies from upstream sources with
retry logic. Every failure is reported as a FetchError.
"""
import asyncio
import gzip
import logging
import zlib

import httpx

from tvloo.utils.logging_helpers import sanitize_url_for_logging


logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
_GZIP_MAGIC = b"\x1f\x8b"


class FetchError(Exception):
    """Raised when an upstream source cannot be downloaded or decoded"""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"{message} ({sanitize_url_for_logging(url)})")


async def fetch_text(
    url: str,
    timeout: float = 30.0,
    max_retries: int = 2,
    backoff_factor: float = 2.0,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None
) -> str:
    """
    Download a text document with exponential backoff retry logic

    Retries on transient network errors (timeouts, connection errors) and on
    5xx responses. Does NOT retry on 4xx HTTP errors (client errors).
    Bodies that are gzip files (e.g. ``guide.xml.gz``) are decompressed.

    Args:
        url: URL to download from
        timeout: HTTP timeout in seconds
        max_retries: Maximum number of attempts
        backoff_factor: Exponential backoff multiplier (wait = backoff_factor ^ attempt)
        headers: Extra request headers
        transport: Optional httpx transport (used by tests)

    Returns:
        Decoded response body

    Raises:
        FetchError: If download fails after all retries
    """
    safe_url = sanitize_url_for_logging(url)
    request_headers = {"User-Agent": BROWSER_USER_AGENT, "Accept-Encoding": "gzip, deflate"}
    request_headers.update(headers or {})

    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                headers=request_headers,
                follow_redirects=True,
                transport=transport
            ) as client:
                response = await client.get(url)
                response.raise_for_status()

            logger.debug(f"Downloaded {len(response.content) / 1024:.1f} KB from {safe_url}")
            return _decode_body(url, response)

        except httpx.HTTPStatusError as e:
            # HTTP errors - don't retry on 4xx (client error), retry on 5xx (server error)
            if 400 <= e.response.status_code < 500:
                logger.error(f"HTTP {e.response.status_code} (client error) from {safe_url}")
                raise FetchError(url, f"HTTP {e.response.status_code}") from e
            last_error = e

        except httpx.HTTPError as e:
            # Timeouts, connection errors and other transport failures
            last_error = e

        if attempt < max_retries - 1:
            wait_time = backoff_factor ** attempt
            logger.warning(
                f"Download attempt {attempt + 1}/{max_retries} failed: {type(last_error).__name__}. "
                f"Retrying in {wait_time:.1f}s..."
            )
            await asyncio.sleep(wait_time)
        else:
            logger.error(f"Download of {safe_url} failed after {max_retries} attempts")

    if last_error:
        raise FetchError(url, f"{type(last_error).__name__}: {last_error}") from last_error

    raise FetchError(url, f"Failed to download after {max_retries} attempts")


def _decode_body(url: str, response: httpx.Response) -> str:
    """Decompress gzip payloads and decode to text"""
    content = response.content
    if content[:2] == _GZIP_MAGIC:
        try:
            content = gzip.decompress(content)
        except (OSError, EOFError, zlib.error) as e:
            raise FetchError(url, f"Invalid gzip body: {e}") from e

    encoding = response.charset_encoding or "utf-8"
    try:
        return content.decode(encoding, errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")
