"""
Field model for DOCX documents.

Implements computed fields (page numbers, TOC, hyperlinks, ...) with an
instruction code, a cached result, a dirty flag and a property bag. All
accessors are serialized through one lock so a field can be read and
refreshed from different threads.
"""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


class FieldType(Enum):
    """Field types."""

    PAGE_NUMBER = "page_number"
    PAGE_COUNT = "page_count"
    TOC = "toc"
    DATE = "date"
    TIME = "time"
    STYLE_REF = "style_ref"
    SEQ = "seq"
    REF = "ref"
    HYPERLINK = "hyperlink"
    CUSTOM = "custom"


DEFAULT_CODES = {
    FieldType.PAGE_NUMBER: "PAGE",
    FieldType.PAGE_COUNT: "NUMPAGES",
    FieldType.TOC: 'TOC \\o "1-3" \\h \\z \\u',
    FieldType.DATE: "DATE",
    FieldType.STYLE_REF: 'STYLEREF "Heading 1"',
    FieldType.SEQ: "SEQ Figure",
}

# Property keys
PROP_URL = "url"
PROP_DISPLAY = "display"
PROP_RELATIONSHIP_ID = "relationshipID"
PROP_STYLE = "style"


class Field:
    """
    Represents a field in the document.

    A new field is dirty. ``update`` recomputes the cached result and
    clears the flag; changing the code or a property marks it dirty again.
    """

    def __init__(self, field_type: FieldType = FieldType.CUSTOM, code: Optional[str] = None):
        self._lock = threading.RLock()
        self._field_type = field_type
        self._code = code if code is not None else DEFAULT_CODES.get(field_type, "")
        self._result = ""
        self._dirty = True
        self._properties: Dict[str, str] = {}

    @property
    def field_type(self) -> FieldType:
        with self._lock:
            return self._field_type

    @property
    def code(self) -> str:
        with self._lock:
            return self._code

    @property
    def result(self) -> str:
        with self._lock:
            return self._result

    def set_code(self, code: str) -> None:
        """
        Set the field instruction.

        Args:
            code: Instruction text, must not be blank

        Raises:
            ValidationError: If the code is empty or whitespace
        """
        if code is None or not code.strip():
            raise ValidationError("field code cannot be empty", details=repr(code), operation="Field.set_code")
        with self._lock:
            self._code = code
            self._dirty = True

    def set_result(self, result: str) -> None:
        """Store a cached result without touching the dirty flag."""
        with self._lock:
            self._result = result

    def set_property(self, key: str, value: str) -> None:
        with self._lock:
            self._properties[key] = value
            self._dirty = True

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._properties.get(key, default)

    def properties(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._properties)

    def is_dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def mark_dirty(self) -> None:
        with self._lock:
            self._dirty = True

    def update(self) -> None:
        """Recompute the cached result if the field is dirty."""
        with self._lock:
            if not self._dirty:
                return
            self._result = self._compute_result()
            self._dirty = False
            logger.debug(f"Updated {self._field_type.value} field result to {self._result!r}")

    def _compute_result(self) -> str:
        # Layout-dependent values are placeholders; Word recalculates them on open.
        field_type = self._field_type
        if field_type in (FieldType.PAGE_NUMBER, FieldType.PAGE_COUNT, FieldType.SEQ):
            return "1"
        if field_type == FieldType.TOC:
            return "Table of Contents"
        if field_type == FieldType.HYPERLINK:
            return self._properties.get(PROP_DISPLAY, self._result)
        if field_type == FieldType.DATE:
            now = datetime.now()
            return f"{now.month}/{now.day}/{now.year}"
        if field_type == FieldType.TIME:
            return datetime.now().strftime("%H:%M")
        # REF, STYLEREF and custom fields keep the result read from the document
        return self._result

    def to_dict(self) -> Dict:
        """Consistent snapshot of the field state."""
        with self._lock:
            return {
                "type": self._field_type.value,
                "code": self._code,
                "result": self._result,
                "dirty": self._dirty,
                "properties": dict(self._properties),
            }

    def __repr__(self) -> str:
        return f"Field(type={self.field_type.value!r}, code={self.code!r}, dirty={self.is_dirty()})"


def new_field(field_type: FieldType) -> Field:
    """Create a field of the given type with its default instruction."""
    return Field(field_type)


def new_hyperlink_field(url: str, display_text: str) -> Field:
    """
    Create a clean hyperlink field.

    Args:
        url: Target URL or ``#anchor``
        display_text: Visible text, also used as the cached result

    Returns:
        Hyperlink field that is not dirty
    """
    if url.startswith("#"):
        code = f'HYPERLINK \\l "{url[1:]}"'
    else:
        code = f'HYPERLINK "{url}"'
    field = Field(FieldType.HYPERLINK, code)
    with field._lock:
        field._properties[PROP_URL] = url
        field._properties[PROP_DISPLAY] = display_text
        field._result = display_text
        field._dirty = False
    return field


def new_toc_field(switches: Optional[Dict[str, str]] = None) -> Field:
    """
    Create a table-of-contents field.

    Recognized switches: ``levels`` (e.g. ``"1-3"``), ``hidePageNumbers``
    and ``hideTabLeader``. Hyperlinked entries are always enabled.
    """
    switches = switches or {}
    code = f'TOC \\o "{switches.get("levels", "1-3")}" \\h'
    if "hidePageNumbers" in switches:
        code += " \\n"
    if "hideTabLeader" in switches:
        code += " \\p"
    code += " \\z \\u"

    field = Field(FieldType.TOC, code)
    with field._lock:
        field._properties.update(switches)
    return field


def new_styleref_field(style_name: str) -> Field:
    field = Field(FieldType.STYLE_REF, f'STYLEREF "{style_name}"')
    with field._lock:
        field._properties[PROP_STYLE] = style_name
    return field
