"""
Relationship table for DOCX parts.

Keeps the ``rId`` to target mapping of one part in insertion order and
renders it as a ``.rels`` part.
"""

import logging
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..constants import (
    NS_PACKAGE_RELS,
    REL_TYPE_FOOTER,
    REL_TYPE_HEADER,
    REL_TYPE_HYPERLINK,
    REL_TYPE_IMAGE,
    TARGET_MODE_EXTERNAL,
)
from ..exceptions import InvalidArgumentError
from .id_manager import IDManager

logger = logging.getLogger(__name__)


@dataclass
class Relationship:
    """A single relationship entry."""

    id: str
    type: str
    target: str
    target_mode: str = ""

    @property
    def is_external(self) -> bool:
        return self.target_mode == TARGET_MODE_EXTERNAL


def _normalize_mode(target_mode: Optional[str]) -> str:
    mode = (target_mode or "").strip()
    if not mode or mode.lower() == "internal":
        return ""
    return mode


class RelationshipManager:
    """
    Manages relationships of the main document part.

    Handles id allocation, registration of ids read from an existing
    package, lookup and ``.rels`` serialization.
    """

    def __init__(self, id_manager: Optional[IDManager] = None):
        self._id_manager = id_manager or IDManager()
        self._relationships: Dict[str, Relationship] = {}
        self._lock = threading.Lock()

    def add(self, rel_type: str, target: str, target_mode: Optional[str] = None) -> str:
        """
        Add a new relationship.

        Args:
            rel_type: Relationship type URI
            target: Target path or URL
            target_mode: ``External`` for external targets

        Returns:
            Newly allocated relationship id
        """
        if not rel_type:
            raise InvalidArgumentError("relationship type cannot be empty", operation="RelationshipManager.add")
        if not target:
            raise InvalidArgumentError("target cannot be empty", operation="RelationshipManager.add")

        with self._lock:
            rel_id = self._id_manager.generate_unique_id("relationship")
            while rel_id in self._relationships:
                rel_id = self._id_manager.generate_unique_id("relationship")
            self._relationships[rel_id] = Relationship(rel_id, rel_type, target, _normalize_mode(target_mode))

        logger.debug(f"Added relationship {rel_id} -> {target}")
        return rel_id

    def register_existing(self, rel_id: str, rel_type: str, target: str, target_mode: Optional[str] = None) -> None:
        """
        Register a relationship read from an existing package.

        Already known ids are left untouched. The id counter is moved past
        numeric ``rIdN`` ids so later additions never collide.
        """
        if not rel_id:
            raise InvalidArgumentError("relationship id cannot be empty", operation="RelationshipManager.register_existing")
        if not rel_type:
            raise InvalidArgumentError("relationship type cannot be empty", operation="RelationshipManager.register_existing")
        if not target:
            raise InvalidArgumentError("relationship target cannot be empty", operation="RelationshipManager.register_existing")

        with self._lock:
            if rel_id in self._relationships:
                return
            self._relationships[rel_id] = Relationship(rel_id, rel_type, target, _normalize_mode(target_mode))

        numeric = rel_id.lower()
        if numeric.startswith("rid"):
            numeric = numeric[3:]
        if numeric.isdigit():
            self._id_manager.ensure_at_least("relationship", int(numeric))

    def ensure(self, rel_type: str, target: str, target_mode: Optional[str] = None) -> str:
        """Return the id of an existing ``(type, target)`` relationship, adding one if absent."""
        existing = self.find(rel_type, target)
        if existing is not None:
            return existing.id
        return self.add(rel_type, target, target_mode)

    def get(self, rel_id: str) -> Optional[Relationship]:
        with self._lock:
            return self._relationships.get(rel_id)

    def find(self, rel_type: str, target: Optional[str] = None) -> Optional[Relationship]:
        """Find the first relationship of a type, optionally restricted to a target."""
        with self._lock:
            for rel in self._relationships.values():
                if rel.type == rel_type and (target is None or rel.target == target):
                    return rel
        return None

    def all(self) -> List[Relationship]:
        with self._lock:
            return list(self._relationships.values())

    def remove(self, rel_id: str) -> bool:
        with self._lock:
            return self._relationships.pop(rel_id, None) is not None

    def __len__(self) -> int:
        return len(self._relationships)

    def add_image(self, target: str) -> str:
        return self.add(REL_TYPE_IMAGE, target)

    def add_hyperlink(self, url: str) -> str:
        return self.add(REL_TYPE_HYPERLINK, url, TARGET_MODE_EXTERNAL)

    def add_header(self, target: str) -> str:
        return self.add(REL_TYPE_HEADER, target)

    def add_footer(self, target: str) -> str:
        return self.add(REL_TYPE_FOOTER, target)

    def to_xml(self) -> bytes:
        """Render the relationships as a ``.rels`` part."""
        return relationships_to_xml(self.all())


def relationships_to_xml(relationships: List[Relationship]) -> bytes:
    """
    Build ``.rels`` XML bytes from relationship entries.

    Args:
        relationships: Entries in output order

    Returns:
        UTF-8 encoded XML with declaration
    """
    root = ET.Element("Relationships", xmlns=NS_PACKAGE_RELS)
    for rel in relationships:
        element = ET.SubElement(root, "Relationship")
        element.set("Id", rel.id)
        element.set("Type", rel.type)
        element.set("Target", rel.target)
        if rel.target_mode:
            element.set("TargetMode", rel.target_mode)
    return ET.tostring(root, encoding="UTF-8", xml_declaration=True)
