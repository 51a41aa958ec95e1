"""One-call decoding by document kind.

:data:`DOCUMENT_KINDS` ties each REST document kind to its root element and
decoder so callers holding raw bytes (an HTTP response body, a file on disk)
do not need to know which decoder applies.

Example:
        from pear_rest.decode import decode

        listing = decode("release-list", response.content)
        print(listing.package, len(listing.items))

Notes:
* Document kinds cannot be detected from the payload: package and release
    listings share the root ``<a>``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .errors import DecodeError
from .package import decode_package_info, decode_package_listing
from .release import decode_release, decode_release_listing, decode_release_listing2
from .tree import DecodeConfig, TreeNode, parse_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentKind:
    name: str
    root: str
    record: str
    decoder: Callable[[TreeNode, Optional[DecodeConfig]], Any]
    description: str


DOCUMENT_KINDS: Dict[str, DocumentKind] = {
    kind.name: kind
    for kind in (
        DocumentKind(
            "package-list", "a", "PackageListing", decode_package_listing,
            "All packages of a channel (p/packages.xml)",
        ),
        DocumentKind(
            "package-info", "p", "PackageInfo", decode_package_info,
            "General package information (p/<package>/info.xml)",
        ),
        DocumentKind(
            "release-list", "a", "ReleaseListing", decode_release_listing,
            "All releases of a package (r/<package>/allreleases.xml)",
        ),
        DocumentKind(
            "release-list2", "a", "ReleaseListing", decode_release_listing2,
            "All releases with minimum PHP version (r/<package>/allreleases2.xml)",
        ),
        DocumentKind(
            "release", "r", "Release", decode_release,
            "Details of one release (r/<package>/<version>.xml)",
        ),
    )
}


def get_available_kinds() -> List[str]:
    return list(DOCUMENT_KINDS.keys())


def decode(
    kind: str,
    source: Union[bytes, str, Path, TreeNode],
    config: Optional[DecodeConfig] = None,
) -> Any:
    """Parse (if needed) and decode a document of the given kind.

    Args:
        kind: One of :func:`get_available_kinds`.
        source: Raw XML (bytes/str), a path to an XML file, or an already
            built document node.
        config: Optional :class:`DecodeConfig`.

    Returns:
        The decoded record.

    Raises:
        ValueError: Unknown ``kind``.
        DecodeError: Malformed XML or a document violating its schema order.
    """
    if kind not in DOCUMENT_KINDS:
        raise ValueError(f"Unknown document kind: {kind}. Available: {get_available_kinds()}")
    document_kind = DOCUMENT_KINDS[kind]
    if isinstance(source, (bytes, str, Path)):
        document: TreeNode = parse_document(source)
    else:
        document = source
    try:
        return document_kind.decoder(document, config)
    except DecodeError as exc:
        logger.debug(f"Failed to decode {kind} document: {exc}")
        raise


def decode_file(kind: str, path: Path, config: Optional[DecodeConfig] = None) -> Any:
    """Decode the XML document stored at ``path``."""
    return decode(kind, Path(path), config=config)

