"""Tests for kind-based decoding and REST URL construction."""

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from pear_rest import decode, decode_file
from pear_rest.decode import DOCUMENT_KINDS, get_available_kinds
from pear_rest.errors import DecodeError, DocumentParseError, NestedDecodeError
from pear_rest.models import PackageInfo, PackageListing, Release, ReleaseListing
from pear_rest.tree import parse_document
from pear_rest.urls import DEFAULT_CHANNEL_URL, default_channel_url, rest_url

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "pecl"


def test_available_kinds():
    assert get_available_kinds() == [
        "package-list",
        "package-info",
        "release-list",
        "release-list2",
        "release",
    ]
    assert DOCUMENT_KINDS["release"].root == "r"
    assert DOCUMENT_KINDS["package-info"].root == "p"


@pytest.mark.parametrize(
    "kind, filename, record_type",
    [
        ("package-list", "packages.xml", PackageListing),
        ("package-info", "info.xml", PackageInfo),
        ("release-list", "allreleases.xml", ReleaseListing),
        ("release-list2", "allreleases2.xml", ReleaseListing),
        ("release", "release_4.27.0.xml", Release),
    ],
)
def test_decode_file_by_kind(kind, filename, record_type):
    record = decode_file(kind, FIXTURES / filename)
    assert isinstance(record, record_type)
    # Records serialize to JSON without custom encoders.
    assert json.loads(json.dumps(record.to_dict()))


def test_decode_accepts_bytes_and_documents():
    payload = (FIXTURES / "packages.xml").read_bytes()
    from_bytes = decode("package-list", payload)
    from_tree = decode("package-list", parse_document(payload))
    assert from_bytes == from_tree


def test_decode_unknown_kind():
    with pytest.raises(ValueError, match="Unknown document kind"):
        decode("channel", b"<a/>")


def test_decode_malformed_payload():
    with pytest.raises(DocumentParseError):
        decode("package-list", b"<a><c>pecl.php.net</c>")


def test_decode_error_to_dict_includes_cause():
    payload = b"<a><p>protobuf</p><c>pecl.php.net</c><r><v>1.0</v></r></a>"
    with pytest.raises(NestedDecodeError) as excinfo:
        decode("release-list", payload)
    details = excinfo.value.to_dict()
    assert details["error"] == "NestedDecodeError"
    assert details["record"] == "ReleaseListing"
    assert details["index"] == 2
    assert details["cause"]["error"] == "MissingFieldError"
    assert details["cause"]["field"] == "stability"


def test_decode_errors_are_value_errors():
    with pytest.raises(ValueError):
        decode("release", b"<r/>")
    with pytest.raises(DecodeError):
        decode("release", b"<r/>")


def test_concurrent_decoding_shares_one_tree():
    document = parse_document(FIXTURES / "allreleases.xml")
    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda _: decode("release-list", document), range(8)))
    assert all(result == results[0] for result in results)
    assert len(results[0].items) == 141


# ---------------- REST URLs ---------------- #


@pytest.mark.parametrize(
    "kind, package, version, expected",
    [
        ("package-list", None, None, "https://pecl.php.net/rest/p/packages.xml"),
        ("package-info", "protobuf", None, "https://pecl.php.net/rest/p/protobuf/info.xml"),
        ("release-list", "Net_URL", None, "https://pecl.php.net/rest/r/net_url/allreleases.xml"),
        ("release-list2", "protobuf", None, "https://pecl.php.net/rest/r/protobuf/allreleases2.xml"),
        ("release", "protobuf", "4.27.0", "https://pecl.php.net/rest/r/protobuf/4.27.0.xml"),
    ],
)
def test_rest_url(kind, package, version, expected):
    assert rest_url("https://pecl.php.net/", kind, package=package, version=version) == expected


def test_rest_url_keeps_channel_path():
    url = rest_url("https://example.com/pear", "package-list")
    assert url == "https://example.com/pear/rest/p/packages.xml"


def test_rest_url_quotes_segments():
    url = rest_url("https://pecl.php.net/", "release", package="a/b", version="1.0 beta")
    assert url == "https://pecl.php.net/rest/r/a%2Fb/1.0%20beta.xml"


def test_rest_url_requires_arguments():
    with pytest.raises(ValueError, match="requires a package"):
        rest_url(None, "package-info")
    with pytest.raises(ValueError, match="requires a version"):
        rest_url(None, "release", package="protobuf")
    with pytest.raises(ValueError, match="Unknown document kind"):
        rest_url(None, "channel")


def test_default_channel_url(monkeypatch):
    monkeypatch.delenv("PEAR_CHANNEL_URL", raising=False)
    assert default_channel_url() == DEFAULT_CHANNEL_URL

    monkeypatch.setenv("PEAR_CHANNEL_URL", "https://pear.php.net/")
    assert default_channel_url() == "https://pear.php.net/"
    assert rest_url(None, "package-list") == "https://pear.php.net/rest/p/packages.xml"
