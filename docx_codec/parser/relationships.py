"""Parser for ``.rels`` relationship parts."""

import logging
from typing import List, Optional

from ..exceptions import ParsingError, StructuralError
from ..utils.relationships import Relationship
from .xml_tree import parse_xml

logger = logging.getLogger(__name__)


def parse_relationships(data: bytes, part_name: Optional[str] = None) -> List[Relationship]:
    """
    Parse a relationships part.

    Entries lacking an ``Id``, ``Type`` or ``Target`` are skipped.

    Args:
        data: Raw ``.rels`` bytes
        part_name: Part name used to tag errors

    Returns:
        Relationships in document order
    """
    if not data:
        raise StructuralError(f"{part_name or 'relationships part'} is empty", operation="parse_relationships", part=part_name)

    root = parse_xml(data, part_name)
    if root.local != "Relationships":
        raise ParsingError(
            "unexpected root element",
            details=root.local,
            operation="parse_relationships",
            part=part_name,
        )

    relationships = []
    for element in root.find_children("Relationship"):
        rel_id = element.get_attr("Id")
        rel_type = element.get_attr("Type")
        target = element.get_attr("Target")
        if not rel_id or not rel_type or not target:
            logger.warning(f"Skipping incomplete relationship in {part_name}: id={rel_id!r}")
            continue
        relationships.append(Relationship(rel_id, rel_type, target, element.get_attr("TargetMode", "") or ""))

    logger.debug(f"Parsed {len(relationships)} relationships from {part_name}")
    return relationships
