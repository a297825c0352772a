"""
Generic XML tree parser.

Turns raw XML bytes into a lightweight tree of ``Element`` nodes
(qualified name, ordered attributes, text, children) that the typed
readers navigate. Built on lxml's incremental parser with entity
resolution and network access disabled.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from lxml import etree as lxml_etree

from ..constants import NS_XML
from ..exceptions import ParsingError

logger = logging.getLogger(__name__)

XML_SPACE = f"{{{NS_XML}}}space"


@dataclass(frozen=True)
class QName:
    """Namespace-qualified name."""

    space: str
    local: str

    @classmethod
    def from_clark(cls, name: str) -> "QName":
        if name.startswith("{"):
            space, _, local = name[1:].partition("}")
            return cls(space, local)
        return cls("", name)

    def __str__(self) -> str:
        return f"{{{self.space}}}{self.local}" if self.space else self.local


@dataclass
class Attribute:
    name: QName
    value: str


@dataclass
class Element:
    """A parsed XML element."""

    name: QName
    attrs: List[Attribute] = field(default_factory=list)
    text: str = ""
    children: List["Element"] = field(default_factory=list)

    @property
    def local(self) -> str:
        return self.name.local

    def find_child(self, local: str) -> Optional["Element"]:
        """Return the first direct child with the given local name."""
        for child in self.children:
            if child.name.local == local:
                return child
        return None

    def find_children(self, local: str) -> List["Element"]:
        return [child for child in self.children if child.name.local == local]

    def find_descendant(self, local: str) -> Optional["Element"]:
        """Depth-first search for the first descendant with the given local name."""
        for child in self.children:
            if child.name.local == local:
                return child
            found = child.find_descendant(local)
            if found is not None:
                return found
        return None

    def get_attr(self, local: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value of the first attribute with the given local name."""
        for attr in self.attrs:
            if attr.name.local == local:
                return attr.value
        return default

    def has_attr(self, local: str) -> bool:
        return any(attr.name.local == local for attr in self.attrs)


def _keep_text(chunk: Optional[str], preserve: bool) -> bool:
    if not chunk:
        return False
    return preserve or bool(chunk.strip())


def parse_xml(data: bytes, part_name: Optional[str] = None) -> Element:
    """
    Parse XML bytes into an element tree.

    Whitespace-only character data is dropped unless the element carries
    ``xml:space="preserve"``.

    Args:
        data: Raw XML bytes
        part_name: Part name used to tag errors

    Returns:
        Root element

    Raises:
        ParsingError: On empty, truncated or malformed input
    """
    if not data:
        raise ParsingError("empty XML input", operation="parse_xml", part=part_name)

    stack: List[Element] = []
    preserve_stack: List[bool] = []
    root: Optional[Element] = None

    events = lxml_etree.iterparse(
        io.BytesIO(data),
        events=("start", "end"),
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        remove_comments=True,
        remove_pis=True,
    )

    try:
        for event, source in events:
            if event == "start":
                if not isinstance(source.tag, str):
                    continue
                node = Element(
                    name=QName.from_clark(source.tag),
                    attrs=[Attribute(QName.from_clark(key), value) for key, value in source.attrib.items()],
                )
                inherited = preserve_stack[-1] if preserve_stack else False
                space = source.get(XML_SPACE)
                preserve_stack.append(inherited if space is None else space == "preserve")
                if stack:
                    stack[-1].children.append(node)
                elif root is None:
                    root = node
                stack.append(node)
            else:
                if not isinstance(source.tag, str) or not stack:
                    continue
                node = stack.pop()
                preserve = preserve_stack.pop()
                pieces = []
                if _keep_text(source.text, preserve):
                    pieces.append(source.text)
                for child in source:
                    if _keep_text(child.tail, preserve):
                        pieces.append(child.tail)
                node.text = "".join(pieces)
                if stack:
                    source.clear(keep_tail=True)
    except lxml_etree.XMLSyntaxError as e:
        raise ParsingError("malformed XML", details=str(e), operation="parse_xml", part=part_name) from e

    if root is None:
        raise ParsingError("no root element found", operation="parse_xml", part=part_name)
    return root
