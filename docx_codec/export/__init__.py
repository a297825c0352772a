"""
Export module for DOCX package writing.

This module contains the components that turn a document model back
into WordML parts and package them as a DOCX archive.
"""

from .docx_exporter import DOCXExporter
from .drawing import build_drawing
from .xml_exporter import XMLExporter

__all__ = [
    "DOCXExporter",
    "XMLExporter",
    "build_drawing",
]
