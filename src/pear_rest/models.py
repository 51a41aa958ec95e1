"""Records decoded from PEAR channel REST documents.

These frozen dataclasses are produced by the decoders in
:mod:`pear_rest.package` and :mod:`pear_rest.release` and consumed by client
code, the CLI JSON output, or any higher layer. They hold plain ``str`` copies
of the source text and no reference back to the document tree, so the tree
can be discarded as soon as decoding returns.

Overview:
        * ``PackageListing`` – every package published on a channel
            (``/rest/p/packages.xml``).
        * ``PackageInfo`` – general information on one package
            (``/rest/p/<package>/info.xml``), optionally with ``DeprecationInfo``.
        * ``ReleaseListing`` / ``ShortRelease`` – every release of a package
            (``/rest/r/<package>/allreleases.xml`` and ``allreleases2.xml``).
        * ``Release`` – details of one release (``/rest/r/<package>/<version>.xml``)
            with its ``ReleasePackage`` and ``ReleaseArchive`` parts.

Typical construction (normally done by a decoder)::

        from pear_rest.models import ReleaseListing, ShortRelease

        listing = ReleaseListing(
                package="protobuf",
                channel="pecl.php.net",
                items=(ShortRelease("4.27.0", "stable"), ShortRelease("4.27.0RC2", "beta")),
        )
        listing.latest().version  # '4.27.0'
        payload = listing.to_dict()

Design notes:
        * Ordered collections are tuples so records stay hashable and immutable.
        * ``to_dict`` produces stable keys for JSON encoding.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from packaging.version import InvalidVersion, Version

RELEASE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class PackageListing:
    """All packages of a channel category.

    Attributes:
        category: Channel name the listing belongs to (``<c>``).
        items: Package names in document order (``<p>``).
    """

    category: str
    items: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "items": list(self.items)}


@dataclass(frozen=True)
class DeprecationInfo:
    """Replacement recommended for a deprecated package.

    Attributes:
        recommended_channel: Channel of the recommended replacement (``<dc>``).
        recommended_package: Name of the recommended replacement (``<dp>``).
    """

    recommended_channel: str
    recommended_package: str


@dataclass(frozen=True)
class PackageInfo:
    """General information on a single package.

    Attributes:
        name: Package name (``<n>``).
        channel: Channel the package is published on (``<c>``).
        category: Category name (``<ca>``).
        license: License name (``<l>``).
        license_uri: Optional license location (``<lu>``).
        summary: One-line summary (``<s>``).
        description: Long description (``<d>``).
        release_uri: Text of the release listing element (``<r>``), often
            empty.
        parent_package: Optional parent package (``<pa>``).
        deprecation: Replacement info when the package is deprecated
            (``<dc>`` + ``<dp>``).
        release_link: ``xlink:href`` locator of ``<r>``, if present.

    Example:
        >>> info = PackageInfo("protobuf", "pecl.php.net", "Tools", "BSD", None,
        ...                    "summary", "description", "/rest/r/protobuf")
        >>> info.is_deprecated
        False
    """

    name: str
    channel: str
    category: str
    license: str
    license_uri: Optional[str]
    summary: str
    description: str
    release_uri: str
    parent_package: Optional[str] = None
    deprecation: Optional[DeprecationInfo] = None
    release_link: Optional[str] = None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ShortRelease:
    """Minimal release entry nested in a :class:`ReleaseListing`.

    ``min_php`` is only populated by ``allreleases2`` listings.
    """

    version: str
    stability: str
    min_php: Optional[str] = None


@dataclass(frozen=True)
class ReleaseListing:
    """All releases of a package, newest first as served by the channel."""

    package: str
    channel: str
    items: Tuple[ShortRelease, ...] = ()

    def latest(self, stability: Optional[str] = None) -> Optional[ShortRelease]:
        """Return the release with the highest version.

        Args:
            stability: Only consider releases with this stability
                (e.g. ``"stable"``); ``None`` considers every release.

        Returns:
            The matching :class:`ShortRelease` or ``None`` when no release
            qualifies. Versions that ``packaging`` cannot parse are skipped.

        Example:
            >>> listing = ReleaseListing("p", "c", (ShortRelease("1.0.0", "stable"),
            ...                                    ShortRelease("1.1.0RC1", "beta")))
            >>> listing.latest().version
            '1.1.0RC1'
            >>> listing.latest("stable").version
            '1.0.0'
        """
        best: Optional[ShortRelease] = None
        best_version: Optional[Version] = None
        for item in self.items:
            if stability is not None and item.stability != stability:
                continue
            try:
                parsed = Version(item.version)
            except InvalidVersion:
                continue
            if best_version is None or parsed > best_version:
                best, best_version = item, parsed
        return best

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ReleasePackage:
    name: str
    link: str


@dataclass(frozen=True)
class ReleaseArchive:
    """Downloadable archive of a release (``<f>`` size, ``<g>`` location)."""

    size: int
    link: str


@dataclass(frozen=True)
class Release:
    """Details of a single release.

    Attributes:
        package: Package name and its ``xlink:href`` location (``<p>``).
        channel: Channel name (``<c>``).
        version: Release version (``<v>``).
        status: Stability (``<st>``).
        license: License name (``<l>``).
        maintainer: Releasing maintainer handle (``<m>``).
        summary: One-line summary (``<s>``).
        description: Long description (``<d>``).
        time: Release date as served (``<da>``).
        release_notes: Release notes (``<n>``).
        archive: Archive size in bytes (``<f>``) and location (``<g>``).
        extracted_link: Location of the extracted ``package.xml`` (``<x>``).
    """

    package: ReleasePackage
    channel: str
    version: str
    status: str
    license: str
    maintainer: str
    summary: str
    description: str
    time: str
    release_notes: str
    archive: ReleaseArchive
    extracted_link: str

    @property
    def released_at(self) -> Optional[datetime]:
        """Parse :attr:`time`; ``None`` when it does not follow the feed format."""
        try:
            return datetime.strptime(self.time.strip(), RELEASE_TIME_FORMAT)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
