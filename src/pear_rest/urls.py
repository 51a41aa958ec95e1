"""REST locations of channel documents.

A PEAR channel serves its REST documents below ``<channel>/rest/``. This
module only builds the URLs; fetching them is left to the caller's HTTP
client of choice (see ``examples/fetch_channel.py``).

Resolution of the channel base URL:
        1. Explicit ``channel_url`` argument
        2. ``PEAR_CHANNEL_URL`` environment variable
        3. :data:`DEFAULT_CHANNEL_URL` (the PECL channel)

Example:
        from pear_rest.urls import rest_url

        rest_url("https://pecl.php.net/", "release", package="protobuf", version="4.27.0")
        # 'https://pecl.php.net/rest/r/protobuf/4.27.0.xml'
"""

import logging
import os
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_URL = "https://pecl.php.net/"

# Path segments below ``/rest`` per document kind.
REST_PATHS: Dict[str, Tuple[str, ...]] = {
    "package-list": ("p", "packages.xml"),
    "package-info": ("p", "{package}", "info.xml"),
    "release-list": ("r", "{package}", "allreleases.xml"),
    "release-list2": ("r", "{package}", "allreleases2.xml"),
    "release": ("r", "{package}", "{version}.xml"),
}


def default_channel_url() -> str:
    """Return the channel URL from ``PEAR_CHANNEL_URL`` or the PECL default."""
    env_url = os.getenv("PEAR_CHANNEL_URL")
    if env_url:
        logger.debug(f"Using channel URL from environment: {env_url}")
        return env_url
    return DEFAULT_CHANNEL_URL


def rest_url(
    channel_url: Optional[str],
    kind: str,
    package: Optional[str] = None,
    version: Optional[str] = None,
) -> str:
    """Build the URL of a REST document.

    Args:
        channel_url: Channel base URL; ``None`` uses :func:`default_channel_url`.
        kind: Document kind, one of :data:`REST_PATHS`.
        package: Package name (lower-cased in the path, as channels serve it).
        version: Release version, for the ``release`` kind.

    Returns:
        Absolute URL string.

    Raises:
        ValueError: Unknown kind, or a required package/version is missing.
    """
    if kind not in REST_PATHS:
        raise ValueError(f"Unknown document kind: {kind}. Available: {list(REST_PATHS)}")
    template = REST_PATHS[kind]
    if any("{package}" in segment for segment in template) and not package:
        raise ValueError(f"Document kind {kind} requires a package name")
    if any("{version}" in segment for segment in template) and not version:
        raise ValueError(f"Document kind {kind} requires a version")

    segments: List[str] = [
        quote(
            segment.format(package=(package or "").lower(), version=version or ""),
            safe="",
        )
        for segment in template
    ]
    parsed = urlsplit(channel_url or default_channel_url())
    path = "/".join([parsed.path.rstrip("/"), "rest", *segments])
    return urlunsplit((parsed.scheme, parsed.netloc, path, "", ""))
