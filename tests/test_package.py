"""Tests for the package listing and package info decoders."""

from pathlib import Path

import pytest

from pear_rest.errors import (
    ChildTypeError,
    DuplicateFieldError,
    DuplicateLinkError,
    MalformedFieldError,
    MissingFieldError,
    MissingRootError,
)
from pear_rest.models import DeprecationInfo
from pear_rest.package import (
    decode_package_info,
    decode_package_listing,
    package_listing_from_element,
)
from pear_rest.tree import XLINK_NS, Attribute, DecodeConfig, Node, find_root, parse_document

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "pecl"

BASE_INFO = [
    ("n", "protobuf"),
    ("c", "pecl.php.net"),
    ("ca", "Tools and Utilities"),
    ("l", "BSD-3-Clause"),
    ("s", "Protocol buffers"),
    ("d", "Serialization library"),
    ("r", "/rest/r/protobuf"),
]


def _document(root, fields):
    body = "".join(f"<{tag}>{text}</{tag}>" for tag, text in fields)
    return parse_document(f"<{root}>{body}</{root}>")


def _info(fields):
    return decode_package_info(_document("p", fields))


# ---------------- Package listing ---------------- #


def test_pecl_package_listing_fixture():
    listing = decode_package_listing(parse_document(FIXTURES / "packages.xml"))
    assert listing.category == "pecl.php.net"
    assert len(listing.items) == 434
    assert listing.items[:3] == ("amqp", "apcu", "apcu_bc")
    assert "protobuf" in listing.items


@pytest.mark.parametrize("count", [0, 1, 7])
def test_listing_preserves_package_order(count):
    names = [f"pkg{i}" for i in range(count)]
    root = Node.element(
        "a",
        Node.element("c", "pecl.php.net"),
        *[Node.element("p", name) for name in names],
    )
    listing = package_listing_from_element(root)
    assert listing.category == "pecl.php.net"
    assert listing.items == tuple(names)


def test_listing_missing_category():
    with pytest.raises(MissingFieldError) as excinfo:
        decode_package_listing(_document("a", []))
    assert excinfo.value.field == "category"
    assert excinfo.value.kind == "missing"


def test_listing_package_before_category():
    with pytest.raises(MissingFieldError) as excinfo:
        decode_package_listing(_document("a", [("p", "apcu"), ("c", "pecl.php.net")]))
    assert excinfo.value.field == "category"


def test_listing_duplicate_category_reports_second_occurrence():
    document = parse_document("<a>\n<c>one</c>\n<p>x</p>\n<c>two</c>\n</a>")
    with pytest.raises(DuplicateFieldError) as excinfo:
        decode_package_listing(document)
    assert excinfo.value.field == "category"
    assert excinfo.value.index == 5
    assert excinfo.value.record == "PackageListing"


def test_listing_skips_comments_and_whitespace():
    document = parse_document(
        "<a>\n  <!-- generated -->\n  <c>pecl.php.net</c>\n  <p>apcu</p>\n</a>"
    )
    assert decode_package_listing(document).items == ("apcu",)


def test_listing_unknown_element_is_child_type_error():
    document = parse_document("<a><c>pecl.php.net</c><x>?</x></a>")
    with pytest.raises(ChildTypeError) as excinfo:
        decode_package_listing(document)
    assert excinfo.value.index == 1


def test_listing_prefixed_element_is_child_type_error():
    document = parse_document('<a xmlns:e="urn:e"><e:c>pecl.php.net</e:c></a>')
    with pytest.raises(ChildTypeError) as excinfo:
        decode_package_listing(document)
    assert excinfo.value.index == 0


def test_listing_prefix_bound_to_default_namespace_reads_as_unprefixed():
    # expat reports only the namespace URI, so <d:p> and <p> are the same
    # element when "d" and the default namespace share a URI.
    document = parse_document('<a xmlns="urn:d" xmlns:d="urn:d"><c>x</c><d:p>y</d:p></a>')
    package = find_root(document, "a").elements()[1]
    assert package.name.prefix is None
    assert package.name.namespace == "urn:d"
    assert decode_package_listing(document).items == ("y",)


def test_listing_processing_instruction_is_child_type_error():
    document = parse_document("<a><c>pecl.php.net</c><?cache off?></a>")
    with pytest.raises(ChildTypeError) as excinfo:
        decode_package_listing(document)
    assert excinfo.value.index == 1


def test_listing_tags_match_case_insensitively():
    listing = decode_package_listing(_document("A", [("C", "pecl"), ("P", "apcu")]))
    assert listing.category == "pecl"
    assert listing.items == ("apcu",)


def test_listing_malformed_package_text():
    document = parse_document("<a><c>pecl</c><p>ap<!-- split -->cu</p></a>")
    with pytest.raises(MalformedFieldError) as excinfo:
        decode_package_listing(document)
    assert excinfo.value.field == "items"
    assert excinfo.value.index == 1


def test_listing_stray_text_allowed_unless_strict():
    document = parse_document("<a><c>pecl</c>stray<p>apcu</p></a>")
    assert decode_package_listing(document).items == ("apcu",)

    with pytest.raises(ChildTypeError) as excinfo:
        decode_package_listing(document, DecodeConfig(strict_text=True))
    assert excinfo.value.index == 1


def test_listing_wrong_root():
    with pytest.raises(MissingRootError):
        decode_package_listing(_document("p", BASE_INFO))


# ---------------- Package info ---------------- #


def test_protobuf_package_info_fixture():
    info = decode_package_info(parse_document(FIXTURES / "info.xml"))
    assert info.name == "protobuf"
    assert info.channel == "pecl.php.net"
    assert info.category == "Tools and Utilities"
    assert info.license == "BSD-3-Clause"
    assert info.summary.startswith("Google's language-neutral")
    assert info.release_uri == ""
    assert info.release_link == "/rest/r/protobuf"
    assert info.license_uri is None
    assert info.parent_package is None
    assert info.deprecation is None
    assert info.is_deprecated is False


def test_deprecated_package_info_fixture():
    info = decode_package_info(parse_document(FIXTURES / "info_deprecated.xml"))
    assert info.name == "mongo"
    assert info.license_uri == "http://www.apache.org/licenses/LICENSE-2.0"
    assert info.deprecation == DeprecationInfo(
        recommended_channel="pecl.php.net", recommended_package="mongodb"
    )
    assert info.is_deprecated is True


def test_info_optional_fields():
    fields = BASE_INFO[:4] + [("lu", "https://opensource.org/licenses/BSD-3-Clause")]
    fields += BASE_INFO[4:] + [("pa", "protobuf-legacy")]
    info = _info(fields)
    assert info.license_uri == "https://opensource.org/licenses/BSD-3-Clause"
    assert info.parent_package == "protobuf-legacy"
    assert info.deprecation is None


def test_info_release_text_without_locator():
    info = _info(BASE_INFO)
    assert info.release_uri == "/rest/r/protobuf"
    assert info.release_link is None


def test_info_empty_release_keeps_empty_text():
    body = "".join(f"<{tag}>{text}</{tag}>" for tag, text in BASE_INFO[:-1])
    document = parse_document(
        f'<p xmlns:xlink="{XLINK_NS}">{body}<r xlink:href="/rest/r/protobuf"/></p>'
    )
    info = decode_package_info(document)
    assert info.release_uri == ""
    assert info.release_link == "/rest/r/protobuf"
    assert info.to_dict()["release_link"] == "/rest/r/protobuf"


def test_info_release_duplicate_locator():
    children = [Node.element(tag, text) for tag, text in BASE_INFO[:-1]]
    children.append(
        Node.element(
            "r",
            attributes=[Attribute.link("/rest/r/a"), Attribute.link("/rest/r/b", prefix="xl")],
        )
    )
    with pytest.raises(DuplicateLinkError) as excinfo:
        decode_package_info(Node.document(Node.element("p", *children)))
    assert excinfo.value.field == "release_uri"
    assert excinfo.value.index == len(BASE_INFO) - 1


def test_info_full_deprecation_pair():
    info = _info(BASE_INFO + [("dc", "pecl.php.net"), ("dp", "protobuf2")])
    assert info.deprecation == DeprecationInfo("pecl.php.net", "protobuf2")


def test_info_deprecation_channel_only():
    with pytest.raises(MissingFieldError) as excinfo:
        _info(BASE_INFO + [("dc", "pecl.php.net")])
    assert excinfo.value.field == "deprecation_package"


def test_info_duplicate_deprecation_channel():
    fields = BASE_INFO + [("dc", "pecl.php.net"), ("dc", "pear.php.net"), ("dp", "x")]
    with pytest.raises(DuplicateFieldError) as excinfo:
        _info(fields)
    assert excinfo.value.field == "deprecation_channel"
    assert excinfo.value.index == len(BASE_INFO) + 1


def test_info_duplicate_deprecation_package():
    fields = BASE_INFO + [("dc", "pecl.php.net"), ("dp", "mongodb"), ("dp", "mongo2")]
    with pytest.raises(DuplicateFieldError) as excinfo:
        _info(fields)
    assert excinfo.value.field == "deprecation_package"
    assert excinfo.value.index == len(BASE_INFO) + 2


def test_info_deprecation_package_only():
    with pytest.raises(MissingFieldError) as excinfo:
        _info(BASE_INFO + [("dp", "protobuf2")])
    assert excinfo.value.field == "deprecation_channel"


@pytest.mark.parametrize(
    "first, second, missing",
    [
        (0, 1, "name"),
        (1, 2, "channel"),
        (2, 3, "category"),
        (3, 4, "license"),
        (4, 5, "summary"),
        (5, 6, "description"),
    ],
)
def test_info_swapped_fields_fail(first, second, missing):
    fields = list(BASE_INFO)
    fields[first], fields[second] = fields[second], fields[first]
    with pytest.raises(MissingFieldError) as excinfo:
        _info(fields)
    assert excinfo.value.field == missing


def test_info_license_uri_requires_license():
    fields = BASE_INFO[:3] + [("lu", "https://example.com")] + BASE_INFO[3:]
    with pytest.raises(MissingFieldError) as excinfo:
        _info(fields)
    assert excinfo.value.field == "license"


def test_info_duplicate_field():
    fields = BASE_INFO[:4] + [("l", "MIT")] + BASE_INFO[4:]
    with pytest.raises(DuplicateFieldError) as excinfo:
        _info(fields)
    assert excinfo.value.field == "license"
    assert excinfo.value.index == 4


def test_info_missing_trailing_release():
    with pytest.raises(MissingFieldError) as excinfo:
        _info(BASE_INFO[:-1])
    assert excinfo.value.field == "release_uri"


def test_info_unknown_field():
    with pytest.raises(ChildTypeError) as excinfo:
        _info(BASE_INFO + [("zz", "?")])
    assert excinfo.value.index == len(BASE_INFO)
