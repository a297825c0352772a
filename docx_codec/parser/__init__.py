"""
Parser module for DOCX package reading.

This module contains the archive reader, the generic XML tree parser,
the relationship part parser and the hydrator that builds a document
model from parsed parts.
"""

from .hydrator import DocumentHydrator, FieldState, build_field_from_instruction, hydrate_document
from .package_reader import PackageReader, ParsedPackage, normalize_part_name, parse_package
from .relationships import parse_relationships
from .xml_tree import Attribute, Element, QName, parse_xml

__all__ = [
    "DocumentHydrator",
    "FieldState",
    "build_field_from_instruction",
    "hydrate_document",
    "PackageReader",
    "ParsedPackage",
    "normalize_part_name",
    "parse_package",
    "parse_relationships",
    "Attribute",
    "Element",
    "QName",
    "parse_xml",
]
