"""
Pytest configuration for docx-codec
"""

import io
import logging
import sys
import tempfile
import zipfile
from pathlib import Path

import pytest
from PIL import Image as PILImage

NAMESPACES = (
    'xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:wp="http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing" '
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:pic="http://schemas.openxmlformats.org/drawingml/2006/picture"'
)

CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Default Extension="png" ContentType="image/png"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
{overrides}
</Types>"""

ROOT_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

REL_TYPES = {
    "image": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image",
    "hyperlink": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink",
    "header": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/header",
    "footer": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/footer",
    "styles": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles",
    "numbering": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering",
    "settings": "http://schemas.openxmlformats.org/officeDocument/2006/relationships/settings",
}


def rels_xml(relationships):
    """Build a ``.rels`` part from ``(id, kind, target)`` or ``(id, kind, target, mode)`` tuples."""
    entries = []
    for rel in relationships:
        rel_id, kind, target = rel[:3]
        mode = f' TargetMode="{rel[3]}"' if len(rel) > 3 else ""
        entries.append(f'  <Relationship Id="{rel_id}" Type="{REL_TYPES[kind]}" Target="{target}"{mode}/>')
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">\n'
        f"{body}\n</Relationships>"
    ).encode("utf-8")


def document_xml(body):
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f"<w:document {NAMESPACES}><w:body>{body}</w:body></w:document>"
    ).encode("utf-8")


def part_xml(root_tag, body):
    """Header or footer part, ``root_tag`` is ``hdr`` or ``ftr``."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f"<w:{root_tag} {NAMESPACES}>{body}</w:{root_tag}>"
    ).encode("utf-8")


def build_docx(body, relationships=(), parts=None, overrides=""):
    """
    Assemble a DOCX archive in memory.

    Args:
        body: Inner XML of ``w:body``
        relationships: Document relationship tuples for ``rels_xml``
        parts: Extra ``{name: bytes}`` entries
        overrides: Extra ``<Override>`` lines for [Content_Types].xml

    Returns:
        Archive bytes
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", CONTENT_TYPES.format(overrides=overrides))
        archive.writestr("_rels/.rels", ROOT_RELS)
        archive.writestr("word/document.xml", document_xml(body))
        archive.writestr("word/_rels/document.xml.rels", rels_xml(relationships))
        for name, data in (parts or {}).items():
            archive.writestr(name, data)
    return buffer.getvalue()


def read_parts(data):
    """Return ``{name: bytes}`` for every entry of an archive."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Only show warnings and errors during tests
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def png_bytes():
    """Factory for small PNG images generated with Pillow."""

    def make(width=100, height=100, color=(200, 30, 30)):
        buffer = io.BytesIO()
        PILImage.new("RGB", (width, height), color).save(buffer, format="PNG")
        return buffer.getvalue()

    return make
