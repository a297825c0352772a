"""Helper utilities: ids, relationships, media, units and logging."""

from .id_manager import IDManager
from .logger import configure_logging, get_logger, set_log_level
from .media import MediaFile, MediaManager, content_type_for
from .relationships import Relationship, RelationshipManager, relationships_to_xml

__all__ = [
    "IDManager",
    "configure_logging",
    "get_logger",
    "set_log_level",
    "MediaFile",
    "MediaManager",
    "content_type_for",
    "Relationship",
    "RelationshipManager",
    "relationships_to_xml",
]
