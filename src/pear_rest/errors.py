"""Error taxonomy for PEAR REST document decoding.

Every decoder either returns a fully populated record or raises a subclass of
:class:`DecodeError` at the first violation it meets. Errors are grouped in
four kinds so callers can react without matching individual classes:

* ``structural`` – the document does not have the expected shape (unexpected
    child node, missing/duplicated root element, unparseable XML).
* ``missing`` – a mandatory field (or its locator attribute) never appeared.
* ``duplicate`` – a field (or its locator attribute) appeared more than once.
* ``malformed`` – a field is present but its content cannot be used.

Each error names the record being decoded and, where it applies, the field
and the zero-based index of the offending child node.

Example:
        from pear_rest.decode import decode
        from pear_rest.errors import DecodeError

        try:
                listing = decode("package-list", payload)
        except DecodeError as exc:
                print(exc.kind, exc.to_dict())
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DecodeError(ValueError):
    """Base class for all decode failures.

    Attributes:
        kind: One of ``structural``, ``missing``, ``duplicate``, ``malformed``.
        record: Name of the record type being decoded (e.g. ``PackageInfo``).
        field: Slot name of the offending field, when one applies.
        index: Zero-based index of the offending child node, when known.
    """

    kind = "structural"

    def __init__(
        self,
        message: str,
        record: Optional[str] = None,
        field: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.record = record
        self.field = field
        self.index = index

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-safe description of the error."""
        payload: Dict[str, Any] = {
            "error": type(self).__name__,
            "kind": self.kind,
            "message": self.message,
            "record": self.record,
            "field": self.field,
            "index": self.index,
        }
        cause = self.__cause__
        if isinstance(cause, DecodeError):
            payload["cause"] = cause.to_dict()
        return payload


# ---------------- Structural ---------------- #


class DocumentParseError(DecodeError):
    """The raw payload is not well-formed XML."""


class RootElementError(DecodeError):
    """The expected root element could not be selected."""

    def __init__(self, message: str, name: str, record: Optional[str] = None) -> None:
        super().__init__(message, record=record)
        self.name = name


class MissingRootError(RootElementError):
    def __init__(self, name: str, record: Optional[str] = None) -> None:
        super().__init__(f"root element <{name}> not found", name, record=record)


class DuplicateRootError(RootElementError):
    def __init__(self, name: str, record: Optional[str] = None) -> None:
        super().__init__(f"root element <{name}> is duplicated", name, record=record)


class ChildTypeError(DecodeError):
    """A child node that is neither an expected element, text nor comment."""

    def __init__(self, index: int, record: Optional[str] = None) -> None:
        super().__init__(
            f"unexpected child node type at index {index}", record=record, index=index
        )


# ---------------- Missing ---------------- #


class MissingFieldError(DecodeError):
    kind = "missing"

    def __init__(self, field: str, label: str, record: Optional[str] = None) -> None:
        super().__init__(f"{label} is missing", record=record, field=field)
        self.label = label


class MissingLinkError(DecodeError):
    """An element that must carry an ``xlink:href`` attribute has none."""

    kind = "missing"

    def __init__(
        self, field: str, label: str, index: int, record: Optional[str] = None
    ) -> None:
        super().__init__(
            f"{label} is missing attribute `xlink:href` at index {index}",
            record=record,
            field=field,
            index=index,
        )
        self.label = label


# ---------------- Duplicate ---------------- #


class DuplicateFieldError(DecodeError):
    kind = "duplicate"

    def __init__(
        self, field: str, label: str, index: int, record: Optional[str] = None
    ) -> None:
        super().__init__(
            f"{label} is duplicated at index {index}",
            record=record,
            field=field,
            index=index,
        )
        self.label = label


class DuplicateLinkError(DecodeError):
    kind = "duplicate"

    def __init__(
        self, field: str, label: str, index: int, record: Optional[str] = None
    ) -> None:
        super().__init__(
            f"{label} has duplicate attribute `xlink:href` at index {index}",
            record=record,
            field=field,
            index=index,
        )
        self.label = label


# ---------------- Malformed ---------------- #


class MalformedFieldError(DecodeError):
    """The field element does not hold a single run of text."""

    kind = "malformed"

    def __init__(
        self, field: str, label: str, index: int, record: Optional[str] = None
    ) -> None:
        super().__init__(
            f"{label} is malformed at index {index}",
            record=record,
            field=field,
            index=index,
        )
        self.label = label


class InvalidArchiveSizeError(DecodeError):
    kind = "malformed"

    def __init__(
        self, value: str, index: Optional[int] = None, record: Optional[str] = None
    ) -> None:
        super().__init__(
            f"archive size node <f> contains invalid value {value!r}",
            record=record,
            field="archive_size",
            index=index,
        )
        self.value = value


class NestedDecodeError(DecodeError):
    """A nested block failed to decode; the block error is ``__cause__``.

    ``kind`` mirrors the wrapped error so a missing field inside a release
    block is still reported as ``missing``.
    """

    @property  # type: ignore[override]
    def kind(self) -> str:
        cause = self.__cause__
        if isinstance(cause, DecodeError):
            return cause.kind
        return "malformed"

    def __init__(
        self, field: str, label: str, index: int, record: Optional[str] = None
    ) -> None:
        super().__init__(
            f"failed to read {label} at index {index}",
            record=record,
            field=field,
            index=index,
        )
        self.label = label


# ---------------- Tree accessor primitives ---------------- #


class MixedContentError(ValueError):
    """An element holds more than one text node."""


class DuplicateAttributeError(ValueError):
    """An attribute that must be unique occurs more than once."""
