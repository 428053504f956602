"""
Download of the Lua class reference page.

A single blocking GET; failures are reported to the caller as FetchError and
never retried.
"""

import requests

from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

DEFAULT_REFERENCE_URL = "https://manual.ardour.org/lua-scripting/class_reference/"
DEFAULT_TIMEOUT = 60.0

HEADERS = {
    "User-Agent": "ardour-emmylua/0.1 (+EmmyLua annotation generator)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def fetch_reference(url: str = DEFAULT_REFERENCE_URL, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    Fetch the reference page.

    Args:
        url: Page URL
        timeout: Request timeout in seconds

    Returns:
        Raw response body (decoded later with the page's declared charset)

    Raises:
        FetchError: network failure or non-2xx response
    """
    logger.info(f"Fetching {url}")
    try:
        response = requests.get(url, headers=HEADERS, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}", url=url)

    logger.info(f"Fetched {len(response.content)} bytes from {url}")
    return response.content
