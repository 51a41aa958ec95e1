"""PEAR REST Decoder
=================

Schema-aware decoding of the XML documents served by PEAR/PECL channel REST
feeds into immutable, validated records.

Key capabilities
----------------
- Decode package listings, package information, release listings
  (``allreleases`` and ``allreleases2``) and release details.
- Enforce the schema order of every document: each field must appear once,
  after its predecessor, and mandatory fields must be present.
- Report failures as structured :class:`~pear_rest.errors.DecodeError`
  subclasses naming the record, the field and the child index.
- Work on any tree implementing :class:`~pear_rest.tree.TreeNode`;
  :func:`~pear_rest.tree.parse_document` builds one from raw XML.

Design principles
-----------------
1. **Pure decoding** – No I/O beyond optionally reading a file; decoders are
    synchronous functions safe to call from several threads at once.
2. **First violation wins** – No partial records, no recovery; callers decide
    whether to retry.
3. **Owned data** – Records hold plain strings and never reference the tree.

Minimal quick start
-------------------
>>> from pear_rest import decode
>>> listing = decode("package-list", open("packages.xml", "rb").read())
>>> listing.category, len(listing.items)

Public surface
--------------
Only a curated subset is exported at the package level; the decoder modules
(:mod:`pear_rest.package`, :mod:`pear_rest.release`) can be imported
explicitly for element-level decoding.
"""

__version__ = "0.1.0"

from .decode import decode, decode_file
from .errors import DecodeError
from .models import (
    DeprecationInfo,
    PackageInfo,
    PackageListing,
    Release,
    ReleaseArchive,
    ReleaseListing,
    ReleasePackage,
    ShortRelease,
)
from .package import decode_package_info, decode_package_listing
from .release import decode_release, decode_release_listing, decode_release_listing2
from .tree import DecodeConfig, Node, parse_document

__all__ = [
    "DecodeConfig",
    "DecodeError",
    "DeprecationInfo",
    "Node",
    "PackageInfo",
    "PackageListing",
    "Release",
    "ReleaseArchive",
    "ReleaseListing",
    "ReleasePackage",
    "ShortRelease",
    "decode",
    "decode_file",
    "decode_package_info",
    "decode_package_listing",
    "decode_release",
    "decode_release_listing",
    "decode_release_listing2",
    "parse_document",
]
