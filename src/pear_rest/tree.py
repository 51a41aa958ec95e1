"""Read-only document tree used by the PEAR REST decoders.

The decoders never touch a parser directly. They consume any object that
satisfies the :class:`TreeNode` protocol: a node with a :class:`NodeKind`, an
optional :class:`QualifiedName`, ordered attributes, ordered children and text
content. :class:`Node` is the concrete implementation shipped here, and
:func:`parse_document` builds one from raw XML using the standard library
ElementTree/expat parser.

Differences from ``xml.etree.ElementTree.Element``:
* Text, comments and processing instructions are child nodes in document
    order, so child indexes in errors count every node.
* Element and attribute names keep their namespace prefix.
* Trees can be built by hand with :meth:`Node.element`, including inputs expat
    refuses to produce such as duplicated attributes.

Typical usage:
        from pathlib import Path
        from pear_rest.tree import parse_document, find_root, get_text

        document = parse_document(Path("packages.xml"))
        root = find_root(document, "a")
        for child in root.children:
                if child.kind == "element":
                        print(child.name.local, get_text(child))

Notes:
* Adjacent character data (including CDATA sections and entity references)
    is coalesced into a single text node.
* Element and attribute prefixes are reconstructed from the namespace
    declarations in scope. When the default namespace and a prefix are bound to
    the same URI, elements are reported as unprefixed.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from .errors import (
    DocumentParseError,
    DuplicateAttributeError,
    DuplicateRootError,
    MissingRootError,
    MixedContentError,
)

XLINK_NS = "http://www.w3.org/1999/xlink"
XML_NS = "http://www.w3.org/XML/1998/namespace"

_XML_WHITESPACE = " \t\r\n"


class NodeKind(str, Enum):
    DOCUMENT = "document"
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    PROCESSING_INSTRUCTION = "processing_instruction"


@dataclass(frozen=True)
class QualifiedName:
    """Element or attribute name as written in the source document.

    Attributes:
        local: Local part of the name.
        prefix: Namespace prefix used in the document (``None`` if unprefixed).
        namespace: Namespace URI the name resolves to (``None`` if none).
    """

    local: str
    prefix: Optional[str] = None
    namespace: Optional[str] = None

    def matches(self, local: str) -> bool:
        """Return True for an unprefixed name equal to ``local`` ignoring case."""
        return not self.prefix and self.local.lower() == local.lower()


@dataclass(frozen=True)
class Attribute:
    name: QualifiedName
    value: str

    @classmethod
    def link(cls, value: str, prefix: str = "xlink") -> "Attribute":
        """Build an ``xlink:href`` locator attribute."""
        return cls(QualifiedName("href", prefix, XLINK_NS), value)


class TreeNode(Protocol):
    """Minimal node interface consumed by the decoders."""

    kind: NodeKind
    name: Optional[QualifiedName]
    attributes: Sequence[Attribute]
    children: Sequence["TreeNode"]
    text: str


@dataclass(frozen=True)
class DecodeConfig:
    """Configuration shared by every decoder.

    Args:
        strict_text: When True, non-whitespace text found between field
            elements is rejected as an unexpected child instead of skipped.
        link_namespace: Namespace URI of the ``href`` locator attribute.
    """

    strict_text: bool = False
    link_namespace: str = XLINK_NS


@dataclass(frozen=True)
class Node:
    """Immutable document node implementing :class:`TreeNode`."""

    kind: NodeKind
    name: Optional[QualifiedName] = None
    attributes: Tuple[Attribute, ...] = ()
    children: Tuple["Node", ...] = ()
    text: str = ""

    @classmethod
    def document(cls, *children: "Node") -> "Node":
        return cls(NodeKind.DOCUMENT, children=tuple(children))

    @classmethod
    def element(
        cls,
        local: str,
        *children: Union["Node", str],
        prefix: Optional[str] = None,
        namespace: Optional[str] = None,
        attributes: Iterable[Attribute] = (),
    ) -> "Node":
        """Build an element; plain strings among ``children`` become text nodes.

        Example:
            >>> node = Node.element("c", "pecl.php.net")
            >>> get_text(node)
            'pecl.php.net'
        """
        return cls(
            NodeKind.ELEMENT,
            name=QualifiedName(local, prefix, namespace),
            attributes=tuple(attributes),
            children=tuple(
                cls.text_node(child) if isinstance(child, str) else child
                for child in children
            ),
        )

    @classmethod
    def text_node(cls, content: str) -> "Node":
        return cls(NodeKind.TEXT, text=content)

    @classmethod
    def comment(cls, content: str) -> "Node":
        return cls(NodeKind.COMMENT, text=content)

    @classmethod
    def processing_instruction(cls, content: str) -> "Node":
        return cls(NodeKind.PROCESSING_INSTRUCTION, text=content)

    def elements(self) -> List["Node"]:
        """Return the element children in document order."""
        return [child for child in self.children if child.kind == NodeKind.ELEMENT]


# ---------------- Parsing ---------------- #


@dataclass
class _Frame:
    name: Optional[QualifiedName]
    attributes: Tuple[Attribute, ...]
    children: List[Node] = field(default_factory=list)


class _DocumentBuilder:
    """ElementTree parser target that produces :class:`Node` trees."""

    def __init__(self) -> None:
        self._stack: List[_Frame] = [_Frame(name=None, attributes=())]
        self._text: List[str] = []
        self._scopes: List[List[Tuple[str, str]]] = []
        self._pending_ns: List[Tuple[str, str]] = []

    def start_ns(self, prefix: str, uri: str) -> None:
        self._pending_ns.append((prefix or "", uri or ""))

    def end_ns(self, prefix: str) -> None:
        # Scopes are popped together with their element in ``end``.
        pass

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        self._flush_text()
        self._scopes.append(self._pending_ns)
        self._pending_ns = []
        name = self._qualify(tag, element=True)
        attributes = tuple(
            Attribute(self._qualify(key, element=False), value)
            for key, value in attrib.items()
        )
        self._stack.append(_Frame(name=name, attributes=attributes))

    def end(self, tag: str) -> None:
        self._flush_text()
        frame = self._stack.pop()
        self._scopes.pop()
        self._stack[-1].children.append(
            Node(
                NodeKind.ELEMENT,
                name=frame.name,
                attributes=frame.attributes,
                children=tuple(frame.children),
            )
        )

    def data(self, data: str) -> None:
        self._text.append(data)

    def comment(self, text: str) -> None:
        self._flush_text()
        self._stack[-1].children.append(Node.comment(text))

    def pi(self, target: str, data: Optional[str] = None) -> None:
        self._flush_text()
        content = f"{target} {data}" if data else target
        self._stack[-1].children.append(Node.processing_instruction(content))

    def close(self) -> Node:
        self._flush_text()
        return Node(NodeKind.DOCUMENT, children=tuple(self._stack[0].children))

    def _flush_text(self) -> None:
        if not self._text:
            return
        content = "".join(self._text)
        self._text = []
        # Character data outside the root element is not part of the tree.
        if len(self._stack) > 1:
            self._stack[-1].children.append(Node.text_node(content))

    def _qualify(self, tag: str, element: bool) -> QualifiedName:
        if not tag.startswith("{"):
            return QualifiedName(tag)
        uri, local = tag[1:].split("}", 1)
        return QualifiedName(local, self._prefix_for(uri, element), uri)

    def _prefix_for(self, uri: str, element: bool) -> Optional[str]:
        if uri == XML_NS:
            return "xml"
        bindings: Dict[str, str] = {}
        for scope in self._scopes:
            bindings.update(scope)
        # Unprefixed attributes never take the default namespace.
        if element and bindings.get("") == uri:
            return None
        for prefix, bound in bindings.items():
            if prefix and bound == uri:
                return prefix
        return None


def parse_document(source: Union[bytes, str, Path]) -> Node:
    """Parse raw XML into a document :class:`Node`.

    Args:
        source: XML payload as bytes or text, or a :class:`~pathlib.Path` to
            read the payload from.

    Returns:
        A node of kind :attr:`NodeKind.DOCUMENT` whose children are the
        top-level comments, processing instructions and the root element.

    Raises:
        DocumentParseError: If the payload is not well-formed XML.
        OSError: If ``source`` is a path that cannot be read.
    """
    data = source.read_bytes() if isinstance(source, Path) else source
    parser = ET.XMLParser(target=_DocumentBuilder())
    try:
        parser.feed(data)
        return parser.close()
    except ET.ParseError as exc:
        raise DocumentParseError(f"document is not well-formed XML: {exc}") from exc


# ---------------- Accessors ---------------- #


def find_root(document: TreeNode, name: str, record: Optional[str] = None) -> TreeNode:
    """Select the unique top-level element named ``name``.

    Only direct children of the document node are considered, and only
    unprefixed elements whose local name matches ``name`` case-insensitively.

    Raises:
        MissingRootError: No matching element.
        DuplicateRootError: More than one matching element.
    """
    if document.kind != NodeKind.DOCUMENT:
        raise ValueError(f"expected a document node, got {document.kind!r}")
    root: Optional[TreeNode] = None
    for child in document.children:
        if child.kind != NodeKind.ELEMENT or child.name is None:
            continue
        if child.name.matches(name):
            if root is not None:
                raise DuplicateRootError(name, record=record)
            root = child
    if root is None:
        raise MissingRootError(name, record=record)
    return root


def get_text(element: TreeNode) -> str:
    """Return the single text child of ``element``.

    Empty elements decode to ``""``. Child elements and comments are ignored;
    only the number of text nodes matters.

    Raises:
        MixedContentError: If the element holds more than one text node.
    """
    text: Optional[str] = None
    for child in element.children:
        if child.kind != NodeKind.TEXT:
            continue
        if text is not None:
            raise MixedContentError("element holds more than one text node")
        text = child.text
    return text if text is not None else ""


def get_link_attribute(
    attributes: Iterable[Attribute], namespace: str = XLINK_NS
) -> Optional[str]:
    """Return the value of the ``href`` locator attribute, if present.

    Raises:
        DuplicateAttributeError: If the locator occurs more than once.
    """
    value: Optional[str] = None
    found = False
    for attribute in attributes:
        if attribute.name.namespace != namespace or attribute.name.local != "href":
            continue
        if found:
            raise DuplicateAttributeError("duplicate locator attribute")
        found = True
        value = attribute.value
    return value


def is_blank(text: str) -> bool:
    """Return True when ``text`` consists only of XML whitespace."""
    return not text.strip(_XML_WHITESPACE)
