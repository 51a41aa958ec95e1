"""Schema-ordered field extraction over an element's children.

The PEAR REST schemas define each document as a fixed ``xs:sequence`` of
child elements without ordinal markers, so element order is checked while
walking the children. Each decoder declares its sequence as a tuple of
:class:`Field` objects and hands it to :func:`walk_fields`.

Walk rules (per child, in document order):
* Comments are skipped. Text is skipped too, unless
    :attr:`~pear_rest.tree.DecodeConfig.strict_text` is set and the text is not
    whitespace.
* A known scalar tag fails with :class:`DuplicateFieldError` when its slot is
    already filled and with :class:`MissingFieldError` naming the predecessor
    when the predecessor slot is still empty; otherwise it is read and stored.
* A known repeated tag is checked against its predecessor, read, and appended.
* Anything else (unknown or prefixed element, processing instruction, …)
    fails with :class:`ChildTypeError` carrying the child index.

The set of filled slots is the decoder state: a field can only be filled once
its predecessor has been, so skipping ahead is rejected.

Example:
        FIELDS = (
                Field("c", "category", "category node <c>"),
                Field("p", "items", "package node <p>", after="category", repeated=True),
        )
        slots = walk_fields(root, FIELDS, record="PackageListing")
        require(slots, FIELDS, record="PackageListing")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

from .errors import (
    ChildTypeError,
    DecodeError,
    DuplicateAttributeError,
    DuplicateFieldError,
    DuplicateLinkError,
    MalformedFieldError,
    MissingFieldError,
    MissingLinkError,
    MixedContentError,
    NestedDecodeError,
)
from .tree import DecodeConfig, NodeKind, TreeNode, get_link_attribute, get_text, is_blank


@dataclass(frozen=True)
class FieldContext:
    record: str
    config: DecodeConfig


Reader = Callable[["Field", TreeNode, int, FieldContext], Any]


@dataclass(frozen=True)
class Field:
    """One element of a schema sequence.

    Args:
        tag: Element local name (matched case-insensitively, unprefixed only).
        slot: Name under which the value is stored; also reported in errors.
        label: Human-readable description used in error messages.
        after: Slot that must already be filled before this tag may appear.
        required: Whether the slot must be filled once the walk is over.
        repeated: Collect every occurrence in a list instead of one value.
        reader: Callable turning the element into a value; defaults to
            :func:`read_text`.
    """

    tag: str
    slot: str
    label: str
    after: Optional[str] = None
    required: bool = True
    repeated: bool = False
    reader: Optional[Reader] = None


def read_text(field: Field, element: TreeNode, index: int, context: FieldContext) -> str:
    try:
        return get_text(element)
    except MixedContentError as exc:
        raise MalformedFieldError(
            field.slot, field.label, index, record=context.record
        ) from exc


def read_link(field: Field, element: TreeNode, index: int, context: FieldContext) -> str:
    """Read the mandatory ``xlink:href`` locator of ``element``."""
    try:
        link = get_link_attribute(element.attributes, context.config.link_namespace)
    except DuplicateAttributeError as exc:
        raise DuplicateLinkError(
            field.slot, field.label, index, record=context.record
        ) from exc
    if link is None:
        raise MissingLinkError(field.slot, field.label, index, record=context.record)
    return link


def nested(decoder: Callable[[TreeNode, DecodeConfig], Any]) -> Reader:
    """Build a reader that decodes the element with another decoder.

    Failures of the inner decoder are wrapped in :class:`NestedDecodeError`
    carrying the element's child index.
    """

    def read(field: Field, element: TreeNode, index: int, context: FieldContext) -> Any:
        try:
            return decoder(element, context.config)
        except DecodeError as exc:
            raise NestedDecodeError(
                field.slot, field.label, index, record=context.record
            ) from exc

    return read


def walk_fields(
    node: TreeNode,
    fields: Sequence[Field],
    record: str,
    config: Optional[DecodeConfig] = None,
) -> Dict[str, Any]:
    """Walk the children of ``node`` and fill one slot per declared field.

    Args:
        node: Element whose children are decoded.
        fields: Schema sequence for the element.
        record: Record name reported in errors.
        config: Optional :class:`DecodeConfig`.

    Returns:
        Mapping of slot name to value for every slot that was filled. Slots of
        repeated fields are always present (possibly empty lists).

    Raises:
        DecodeError: On the first violation; see the module documentation.
    """
    context = FieldContext(record=record, config=config or DecodeConfig())
    by_tag = {entry.tag.lower(): entry for entry in fields}
    by_slot = {entry.slot: entry for entry in fields}
    slots: Dict[str, Any] = {entry.slot: [] for entry in fields if entry.repeated}

    for index, child in enumerate(node.children):
        if child.kind == NodeKind.COMMENT:
            continue
        if child.kind == NodeKind.TEXT:
            if context.config.strict_text and not is_blank(child.text):
                raise ChildTypeError(index, record=record)
            continue
        if child.kind != NodeKind.ELEMENT or child.name is None or child.name.prefix:
            raise ChildTypeError(index, record=record)

        entry = by_tag.get(child.name.local.lower())
        if entry is None:
            raise ChildTypeError(index, record=record)
        if not entry.repeated and entry.slot in slots:
            raise DuplicateFieldError(entry.slot, entry.label, index, record=record)
        if entry.after is not None and entry.after not in slots:
            predecessor = by_slot[entry.after]
            raise MissingFieldError(predecessor.slot, predecessor.label, record=record)

        value = (entry.reader or read_text)(entry, child, index, context)
        if entry.repeated:
            slots[entry.slot].append(value)
        else:
            slots[entry.slot] = value
    return slots


def require(slots: Dict[str, Any], fields: Sequence[Field], record: str) -> None:
    """Raise :class:`MissingFieldError` for the first unfilled mandatory slot."""
    for entry in fields:
        if entry.required and entry.slot not in slots:
            raise MissingFieldError(entry.slot, entry.label, record=record)
