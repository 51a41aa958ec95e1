"""Decoders for package release documents.

* ``/rest/r/<package>/allreleases.xml`` (``rest.allreleases.xsd``, root ``<a>``)
    → :class:`~pear_rest.models.ReleaseListing`
* ``/rest/r/<package>/allreleases2.xml`` (``rest.allreleases2.xsd``, root
    ``<a>``) → :class:`~pear_rest.models.ReleaseListing` whose items carry the
    minimum PHP version
* ``/rest/r/<package>/<version>.xml`` (``rest.release.xsd``, root ``<r>``) →
    :class:`~pear_rest.models.Release`

Release blocks inside a listing are decoded by :func:`short_release_from_element`;
a failing block surfaces as :class:`~pear_rest.errors.NestedDecodeError` with
the block's child index, the block error being available as ``__cause__``.

Example:
        from pathlib import Path
        from pear_rest.tree import parse_document
        from pear_rest.release import decode_release_listing

        listing = decode_release_listing(parse_document(Path("allreleases.xml")))
        newest_stable = listing.latest("stable")
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .errors import InvalidArchiveSizeError
from .fields import Field, FieldContext, nested, read_link, read_text, require, walk_fields
from .models import Release, ReleaseArchive, ReleaseListing, ReleasePackage, ShortRelease
from .tree import DecodeConfig, TreeNode, find_root

logger = logging.getLogger(__name__)

RELEASE_LISTING_ROOT = "a"
RELEASE_ROOT = "r"

MAX_ARCHIVE_SIZE = 2**64 - 1
_ARCHIVE_SIZE_RE = re.compile(r"\+?[0-9]+")

SHORT_RELEASE_FIELDS = (
    Field("v", "version", "version node <v>"),
    Field("s", "stability", "stability node <s>", after="version"),
)

SHORT_RELEASE2_FIELDS = SHORT_RELEASE_FIELDS + (
    Field("m", "min_php", "minimum PHP version node <m>", after="stability"),
)


def short_release_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> ShortRelease:
    """Decode one ``<r>`` block of an ``allreleases`` listing."""
    slots = walk_fields(element, SHORT_RELEASE_FIELDS, "ShortRelease", config)
    require(slots, SHORT_RELEASE_FIELDS, "ShortRelease")
    return ShortRelease(version=slots["version"], stability=slots["stability"])


def short_release2_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> ShortRelease:
    """Decode one ``<r>`` block of an ``allreleases2`` listing."""
    slots = walk_fields(element, SHORT_RELEASE2_FIELDS, "ShortRelease", config)
    require(slots, SHORT_RELEASE2_FIELDS, "ShortRelease")
    return ShortRelease(
        version=slots["version"], stability=slots["stability"], min_php=slots["min_php"]
    )


def _listing_fields(block_reader) -> tuple:
    return (
        Field("p", "package", "package node <p>"),
        Field("c", "channel", "channel node <c>", after="package"),
        Field(
            "r",
            "items",
            "release node <r>",
            after="channel",
            repeated=True,
            reader=nested(block_reader),
        ),
    )


RELEASE_LISTING_FIELDS = _listing_fields(short_release_from_element)
RELEASE_LISTING2_FIELDS = _listing_fields(short_release2_from_element)


def _read_package(
    field: Field, element: TreeNode, index: int, context: FieldContext
) -> ReleasePackage:
    name = read_text(field, element, index, context)
    link = read_link(field, element, index, context)
    return ReleasePackage(name=name, link=link)


def _read_archive_size(
    field: Field, element: TreeNode, index: int, context: FieldContext
) -> int:
    text = read_text(field, element, index, context)
    if not _ARCHIVE_SIZE_RE.fullmatch(text):
        raise InvalidArchiveSizeError(text, index=index, record=context.record)
    size = int(text)
    if size > MAX_ARCHIVE_SIZE:
        raise InvalidArchiveSizeError(text, index=index, record=context.record)
    return size


RELEASE_FIELDS = (
    Field("p", "package", "package node <p>", reader=_read_package),
    Field("c", "channel", "channel node <c>", after="package"),
    Field("v", "version", "version node <v>", after="channel"),
    Field("st", "status", "status node <st>", after="version"),
    Field("l", "license", "license node <l>", after="status"),
    Field("m", "maintainer", "maintainer node <m>", after="license"),
    Field("s", "summary", "summary node <s>", after="maintainer"),
    Field("d", "description", "description node <d>", after="summary"),
    Field("da", "time", "date node <da>", after="description"),
    Field("n", "release_notes", "release notes node <n>", after="time"),
    Field(
        "f",
        "archive_size",
        "archive size node <f>",
        after="release_notes",
        reader=_read_archive_size,
    ),
    Field("g", "archive_link", "archive link node <g>", after="archive_size"),
    Field(
        "x",
        "extracted_link",
        "extracted link node <x>",
        after="archive_link",
        reader=read_link,
    ),
)


def release_listing_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> ReleaseListing:
    """Decode an ``allreleases`` ``<a>`` element."""
    slots = walk_fields(element, RELEASE_LISTING_FIELDS, "ReleaseListing", config)
    require(slots, RELEASE_LISTING_FIELDS, "ReleaseListing")
    return ReleaseListing(
        package=slots["package"], channel=slots["channel"], items=tuple(slots["items"])
    )


def release_listing2_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> ReleaseListing:
    """Decode an ``allreleases2`` ``<a>`` element."""
    slots = walk_fields(element, RELEASE_LISTING2_FIELDS, "ReleaseListing", config)
    require(slots, RELEASE_LISTING2_FIELDS, "ReleaseListing")
    return ReleaseListing(
        package=slots["package"], channel=slots["channel"], items=tuple(slots["items"])
    )


def release_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> Release:
    """Decode a ``<r>`` release element.

    Thirteen children in strict order, from ``<p>`` to ``<x>``. The package
    element must carry exactly one ``xlink:href`` locator, as must the
    extracted-link element, and ``<f>`` must hold an unsigned 64-bit integer.
    """
    slots = walk_fields(element, RELEASE_FIELDS, "Release", config)
    require(slots, RELEASE_FIELDS, "Release")
    return Release(
        package=slots["package"],
        channel=slots["channel"],
        version=slots["version"],
        status=slots["status"],
        license=slots["license"],
        maintainer=slots["maintainer"],
        summary=slots["summary"],
        description=slots["description"],
        time=slots["time"],
        release_notes=slots["release_notes"],
        archive=ReleaseArchive(size=slots["archive_size"], link=slots["archive_link"]),
        extracted_link=slots["extracted_link"],
    )


def decode_release_listing(
    document: TreeNode, config: Optional[DecodeConfig] = None
) -> ReleaseListing:
    """Decode an ``allreleases.xml`` document (root ``<a>``).

    Raises:
        DecodeError: If the root is missing/duplicated or any field is invalid.
    """
    root = find_root(document, RELEASE_LISTING_ROOT, record="ReleaseListing")
    listing = release_listing_from_element(root, config)
    logger.debug(
        f"Decoded release listing for {listing.channel}/{listing.package} "
        f"({len(listing.items)} releases)"
    )
    return listing


def decode_release_listing2(
    document: TreeNode, config: Optional[DecodeConfig] = None
) -> ReleaseListing:
    """Decode an ``allreleases2.xml`` document (root ``<a>``)."""
    root = find_root(document, RELEASE_LISTING_ROOT, record="ReleaseListing")
    listing = release_listing2_from_element(root, config)
    logger.debug(
        f"Decoded release listing (v2) for {listing.channel}/{listing.package} "
        f"({len(listing.items)} releases)"
    )
    return listing


def decode_release(document: TreeNode, config: Optional[DecodeConfig] = None) -> Release:
    """Decode a ``<version>.xml`` release document (root ``<r>``)."""
    root = find_root(document, RELEASE_ROOT, record="Release")
    release = release_from_element(root, config)
    logger.debug(f"Decoded release {release.package.name} {release.version}")
    return release
