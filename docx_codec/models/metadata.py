"""
Document metadata model.

Mirrors the Dublin Core fields of ``docProps/core.xml``. Dates are kept
as W3CDTF strings, e.g. ``2024-01-31T10:00:00Z``.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

KEYWORD_SEPARATORS = re.compile(r"[,;]")


def split_keywords(value: str) -> List[str]:
    """Split a keyword string on commas and semicolons."""
    if not value:
        return []
    return [kw.strip() for kw in KEYWORD_SEPARATORS.split(value) if kw.strip()]


def w3cdtf_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class Metadata:
    """Core document properties."""

    title: str = ""
    subject: str = ""
    creator: str = ""
    keywords: List[str] = field(default_factory=list)
    description: str = ""
    created: str = ""
    modified: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "subject": self.subject,
            "creator": self.creator,
            "keywords": list(self.keywords),
            "description": self.description,
            "created": self.created,
            "modified": self.modified,
        }
