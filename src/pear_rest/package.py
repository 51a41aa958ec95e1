"""Decoders for channel package documents.

* ``/rest/p/packages.xml`` (schema ``rest.allpackages.xsd``, root ``<a>``) →
    :class:`~pear_rest.models.PackageListing`
* ``/rest/p/<package>/info.xml`` (schema ``rest.package.xsd``, root ``<p>``) →
    :class:`~pear_rest.models.PackageInfo`

Example:
        from pathlib import Path
        from pear_rest.tree import parse_document
        from pear_rest.package import decode_package_listing

        listing = decode_package_listing(parse_document(Path("packages.xml")))
        print(listing.category, len(listing.items))
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from .errors import DuplicateAttributeError, DuplicateLinkError, MissingFieldError
from .fields import Field, FieldContext, read_text, require, walk_fields
from .models import DeprecationInfo, PackageInfo, PackageListing
from .tree import DecodeConfig, TreeNode, find_root, get_link_attribute

logger = logging.getLogger(__name__)

PACKAGE_LISTING_ROOT = "a"
PACKAGE_INFO_ROOT = "p"

PACKAGE_LISTING_FIELDS = (
    Field("c", "category", "category node <c>"),
    Field("p", "items", "package node <p>", after="category", repeated=True),
)


def _read_release(
    field: Field, element: TreeNode, index: int, context: FieldContext
) -> Tuple[str, Optional[str]]:
    """Read the text of ``<r>`` together with its optional locator."""
    text = read_text(field, element, index, context)
    try:
        link = get_link_attribute(element.attributes, context.config.link_namespace)
    except DuplicateAttributeError as exc:
        raise DuplicateLinkError(
            field.slot, field.label, index, record=context.record
        ) from exc
    return text, link


# ``lu`` and ``s`` both follow ``l`` because the license uri is optional; the
# same holds for ``pa``/``dc`` after ``r``.
PACKAGE_INFO_FIELDS = (
    Field("n", "name", "name node <n>"),
    Field("c", "channel", "channel node <c>", after="name"),
    Field("ca", "category", "category node <ca>", after="channel"),
    Field("l", "license", "license node <l>", after="category"),
    Field("lu", "license_uri", "license uri node <lu>", after="license", required=False),
    Field("s", "summary", "summary node <s>", after="license"),
    Field("d", "description", "description node <d>", after="summary"),
    Field(
        "r",
        "release_uri",
        "release node <r>",
        after="description",
        reader=_read_release,
    ),
    Field("pa", "parent_package", "parent node <pa>", after="release_uri", required=False),
    Field(
        "dc",
        "deprecation_channel",
        "deprecation channel node <dc>",
        after="release_uri",
        required=False,
    ),
    Field(
        "dp",
        "deprecation_package",
        "deprecation package node <dp>",
        after="deprecation_channel",
        required=False,
    ),
)


def package_listing_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> PackageListing:
    """Decode a ``<a>`` package listing element."""
    slots = walk_fields(element, PACKAGE_LISTING_FIELDS, "PackageListing", config)
    require(slots, PACKAGE_LISTING_FIELDS, "PackageListing")
    return PackageListing(category=slots["category"], items=tuple(slots["items"]))


def package_info_from_element(
    element: TreeNode, config: Optional[DecodeConfig] = None
) -> PackageInfo:
    """Decode a ``<p>`` package information element.

    The deprecation pair is all-or-nothing: ``<dc>`` without ``<dp>`` raises
    :class:`MissingFieldError` for ``deprecation_package`` (the reverse case
    is caught while walking, since ``<dp>`` must follow ``<dc>``).
    """
    slots = walk_fields(element, PACKAGE_INFO_FIELDS, "PackageInfo", config)
    require(slots, PACKAGE_INFO_FIELDS, "PackageInfo")

    deprecation: Optional[DeprecationInfo] = None
    if "deprecation_channel" in slots:
        if "deprecation_package" not in slots:
            raise MissingFieldError(
                "deprecation_package",
                "deprecation package node <dp>",
                record="PackageInfo",
            )
        deprecation = DeprecationInfo(
            recommended_channel=slots["deprecation_channel"],
            recommended_package=slots["deprecation_package"],
        )

    release_uri, release_link = slots["release_uri"]
    return PackageInfo(
        name=slots["name"],
        channel=slots["channel"],
        category=slots["category"],
        license=slots["license"],
        license_uri=slots.get("license_uri"),
        summary=slots["summary"],
        description=slots["description"],
        release_uri=release_uri,
        parent_package=slots.get("parent_package"),
        deprecation=deprecation,
        release_link=release_link,
    )


def decode_package_listing(
    document: TreeNode, config: Optional[DecodeConfig] = None
) -> PackageListing:
    """Decode a package listing document (root ``<a>``).

    Args:
        document: Document node, e.g. from :func:`pear_rest.tree.parse_document`.
        config: Optional :class:`DecodeConfig`.

    Returns:
        The decoded :class:`PackageListing`.

    Raises:
        DecodeError: If the root is missing/duplicated or any field is invalid.
    """
    root = find_root(document, PACKAGE_LISTING_ROOT, record="PackageListing")
    listing = package_listing_from_element(root, config)
    logger.debug(
        f"Decoded package listing for {listing.category} ({len(listing.items)} packages)"
    )
    return listing


def decode_package_info(
    document: TreeNode, config: Optional[DecodeConfig] = None
) -> PackageInfo:
    """Decode a package information document (root ``<p>``)."""
    root = find_root(document, PACKAGE_INFO_ROOT, record="PackageInfo")
    info = package_info_from_element(root, config)
    logger.debug(f"Decoded package info for {info.channel}/{info.name}")
    return info
