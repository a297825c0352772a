"""
ID manager for DOCX documents.

Hands out monotonically increasing, type-scoped identifiers for the
elements of one document instance.
"""

import threading
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class IDManager:
    """
    Generates unique IDs for document elements.

    Each kind (paragraph, run, table, row, cell, image, drawing, bookmark,
    relationship) has its own counter. Counters only move forward.
    """

    PREFIXES = {
        "paragraph": "para",
        "run": "run",
        "table": "tbl",
        "row": "row",
        "cell": "cell",
        "image": "img",
        "drawing": "",
        "bookmark": "",
        "relationship": "rId",
        "header": "",
        "footer": "",
    }

    def __init__(self):
        self._counters: Dict[str, int] = {}
        self._lock = threading.Lock()

    def next_number(self, kind: str) -> int:
        """
        Advance the counter for ``kind`` and return its new value.

        Args:
            kind: Element kind

        Returns:
            Next integer for that kind, starting at 1
        """
        with self._lock:
            value = self._counters.get(kind, 0) + 1
            self._counters[kind] = value
        return value

    def generate_unique_id(self, kind: str) -> str:
        """
        Generate a prefixed ID for ``kind`` such as ``para3`` or ``rId7``.

        Args:
            kind: Element kind

        Returns:
            Unique ID string
        """
        prefix = self.PREFIXES.get(kind, kind)
        return f"{prefix}{self.next_number(kind)}"

    def ensure_at_least(self, kind: str, value: int) -> None:
        """Make sure the next number handed out for ``kind`` exceeds ``value``."""
        with self._lock:
            if self._counters.get(kind, 0) < value:
                self._counters[kind] = value
                logger.debug(f"Counter {kind} advanced to {value}")

    def current(self, kind: str) -> int:
        with self._lock:
            return self._counters.get(kind, 0)
