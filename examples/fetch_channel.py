#!/usr/bin/env python3
"""
Example client fetching and decoding PEAR channel REST documents.

This script demonstrates how to pair an HTTP client with the decoders:
the library builds URLs and decodes payloads, the caller owns transport,
timeouts and retries.

Usage:
    python examples/fetch_channel.py protobuf
"""

import argparse
import logging
from typing import Optional

import httpx

from pear_rest import DecodeError, decode
from pear_rest.models import PackageInfo, PackageListing, Release, ReleaseListing
from pear_rest.urls import default_channel_url, rest_url

logger = logging.getLogger(__name__)


class ChannelClient:
    """Client for reading one PEAR channel."""

    def __init__(self, channel_url: Optional[str] = None, timeout: float = 30.0):
        """Initialize the client with the channel base URL."""
        self.channel_url = channel_url or default_channel_url()
        self.client = httpx.Client(timeout=timeout, follow_redirects=True)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close the client."""
        self.client.close()

    def _fetch(self, kind: str, package: Optional[str] = None, version: Optional[str] = None):
        url = rest_url(self.channel_url, kind, package=package, version=version)
        logger.info(f"GET {url}")
        response = self.client.get(url)
        response.raise_for_status()
        return decode(kind, response.content)

    def get_packages(self) -> PackageListing:
        """Fetch every package of the channel."""
        return self._fetch("package-list")

    def get_package_info(self, package: str) -> PackageInfo:
        """Fetch general information on a package."""
        return self._fetch("package-info", package=package)

    def get_releases(self, package: str) -> ReleaseListing:
        """Fetch every release of a package."""
        return self._fetch("release-list", package=package)

    def get_release(self, package: str, version: str) -> Release:
        """Fetch details of one release."""
        return self._fetch("release", package=package, version=version)


def main():
    parser = argparse.ArgumentParser(description="Show the latest stable release of a package")
    parser.add_argument("package", help="Package name, e.g. protobuf")
    parser.add_argument("--channel", default=None, help="Channel base URL")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

    with ChannelClient(args.channel) as client:
        try:
            info = client.get_package_info(args.package)
            print(f"{info.name} ({info.channel}): {info.summary}")
            if info.deprecation:
                print(
                    "  deprecated in favour of "
                    f"{info.deprecation.recommended_channel}/{info.deprecation.recommended_package}"
                )

            releases = client.get_releases(args.package)
            latest = releases.latest("stable")
            if latest is None:
                print("  no stable release")
                return 0

            release = client.get_release(args.package, latest.version)
            print(f"  latest stable: {release.version} released {release.time}")
            print(f"  archive: {release.archive.link} ({release.archive.size} bytes)")
        except httpx.HTTPError as e:
            print(f"✗ Request failed: {e}")
            return 1
        except DecodeError as e:
            print(f"✗ Unexpected response: {e}")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
