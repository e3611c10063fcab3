"""Fetch page HTML over HTTP."""

import logging
from urllib.parse import urlparse

import requests

from common.errors import MalformedInputError, SourceUnreachableError
from extract_content.models import RawDocument

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_USER_AGENT = "page-distiller/1.0"


def validate_url(url: str) -> str:
    """Return the stripped URL, or raise MalformedInputError if it is not absolute http(s)."""
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise MalformedInputError(f"Not an absolute http(s) URL: {url!r}")
    return url


def declared_charset(content_type: str | None) -> str | None:
    """Get the charset parameter of a Content-Type header, if any."""
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"\'')
    return None


def fetch_page(
    url: str,
    timeout: int = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> RawDocument:
    """
    Fetch the HTML at `url`.

    The encoding is only set when the server declares a charset; otherwise
    it is left for the extractor to sniff from the markup.

    Raises:
        MalformedInputError: url is not an absolute http(s) URL
        SourceUnreachableError: the request failed or returned an error status
    """
    url = validate_url(url)
    logger.info("Fetching %s", url)
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": user_agent})
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnreachableError(f"Could not fetch {url}: {e}") from e

    encoding = declared_charset(response.headers.get("Content-Type"))
    logger.info("Fetched %d bytes from %s (encoding: %s)", len(response.content), url, encoding)
    return RawDocument(content=response.content, encoding=encoding, url=response.url or url)
