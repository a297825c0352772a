"""
Base model class for DOCX document models.

Provides identity and parent linkage shared by paragraphs, runs,
tables, sections and images.
"""

import logging
import uuid
from abc import ABC
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Models(ABC):
    """Abstract base class for document models."""

    def __init__(self, element_id: Optional[str] = None):
        """Initialize base model."""
        self.id: str = element_id or str(uuid.uuid4())
        self.parent: Optional["Models"] = None

    def validate(self) -> bool:
        """Validate model data."""
        return True

    def get_text(self) -> str:
        """Get text content from model."""
        return ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "type": self.__class__.__name__,
            "id": self.id,
            "text": self.get_text(),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r})"
