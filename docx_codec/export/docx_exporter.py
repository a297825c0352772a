"""
DOCX exporter - creates DOCX files from document models.

Uses XMLExporter to generate WordML XML and packages everything into a
DOCX package (ZIP) with relationships and [Content_Types].xml. Parts
carried through from a loaded package are written back unchanged;
generated parts win when both exist.
"""

import io
import logging
import posixpath
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import Dict, List, Set, Tuple, Union

from ..constants import (
    CT_CORE_PROPERTIES,
    CT_CUSTOM_PROPERTIES,
    CT_DOCUMENT_MAIN,
    CT_EXTENDED_PROPERTIES,
    CT_FONT_TABLE,
    CT_FOOTER,
    CT_HEADER,
    CT_NUMBERING,
    CT_RELATIONSHIPS,
    CT_STYLES,
    CT_THEME,
    CT_XML,
    DEFAULT_APPLICATION,
    NS_CONTENT_TYPES,
    PART_APP_PROPERTIES,
    PART_CONTENT_TYPES,
    PART_CORE_PROPERTIES,
    PART_DOCUMENT,
    PART_DOCUMENT_RELS,
    PART_ROOT_RELS,
    PATH_CUSTOM_PROPERTIES,
    REL_TYPE_CORE_PROPERTIES,
    REL_TYPE_CUSTOM_PROPERTIES,
    REL_TYPE_EXTENDED_PROPERTIES,
    REL_TYPE_FONT_TABLE,
    REL_TYPE_NUMBERING,
    REL_TYPE_OFFICE_DOCUMENT,
    REL_TYPE_STYLES,
    REL_TYPE_THEME,
)
from ..exceptions import PackageIOError, StructuralError
from ..models.field import PROP_RELATIONSHIP_ID
from ..models.section import HeaderFooter
from ..parser.hydrator import normalize_target_path
from ..parser.package_reader import normalize_part_name
from ..utils.relationships import Relationship, relationships_to_xml
from .xml_exporter import XMLExporter

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

# (relationship type, default target, content type, template file)
AUXILIARY_PARTS = (
    (REL_TYPE_FONT_TABLE, "fontTable.xml", CT_FONT_TABLE, "fontTable.xml"),
    (REL_TYPE_THEME, "theme/theme1.xml", CT_THEME, "theme1.xml"),
)


def _rels_path_for(part_name: str) -> str:
    """``word/header1.xml`` -> ``word/_rels/header1.xml.rels``"""
    return posixpath.join(posixpath.dirname(part_name), "_rels", posixpath.basename(part_name) + ".rels")


def _indented(root: ET.Element) -> bytes:
    ET.indent(root)
    return ET.tostring(root, encoding="UTF-8", xml_declaration=True)


class DOCXExporter:
    """
    DOCX Exporter - creates DOCX files from document models.

    Uses XMLExporter to generate WordML XML and packages everything
    into a DOCX package (ZIP) with relationships and [Content_Types].xml.
    """

    def __init__(self, document, application_name: str = DEFAULT_APPLICATION):
        """
        Initializes DOCX exporter.

        Args:
            document: Document to export
            application_name: Value written to ``Application`` in docProps/app.xml
        """
        if document is None:
            raise StructuralError("document cannot be None", operation="DOCXExporter")
        self.document = document
        self.application_name = application_name or DEFAULT_APPLICATION
        self.xml_exporter = XMLExporter(document)

        # Package parts (part_name -> content)
        self._parts: Dict[str, bytes] = {}
        # Normalized part name -> part name as written
        self._names: Dict[str, str] = {}
        # Override content types (part_name -> content_type)
        self._content_types: Dict[str, str] = {}
        # Default content types (extension -> content_type)
        self._default_content_types: Dict[str, str] = {}

        logger.debug("DOCXExporter initialized")

    def export(self, output_path: Union[str, Path]) -> bool:
        """
        Exports document to DOCX file.

        Args:
            output_path: Path to output DOCX file

        Returns:
            True if export succeeded

        Raises:
            PackageIOError: If the file cannot be written
        """
        output_path = Path(output_path)
        data = self.to_bytes()
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to export document to DOCX: {e}")
            raise PackageIOError("cannot write package", details=str(e), operation="DOCXExporter.export", part=str(output_path)) from e

        logger.info(f"Document exported to DOCX: {output_path}")
        return True

    def to_bytes(self) -> bytes:
        """Build the complete package in memory."""
        self._parts.clear()
        self._names.clear()
        self._content_types.clear()
        self._default_content_types.clear()

        # 1. Give new headers and footers a part and a relationship
        self._allocate_header_footer_parts()

        # 2. Prepare package parts
        self._prepare_parts()

        # 3. Relationships of the main document and of the package
        self._prepare_relationships()

        # 4. [Content_Types].xml
        self._prepare_content_types()

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zip_file:
            for part_name, content in self._ordered_parts():
                zip_file.writestr(part_name, content)
        logger.debug(f"Packaged {len(self._parts)} parts")
        return buffer.getvalue()

    # Parts

    def _add_part(self, part_name: str, content: bytes, content_type: str = "") -> bool:
        """Register a part unless a part with the same normalized name is already present."""
        normalized = normalize_part_name(part_name)
        if normalized in self._names:
            return False
        self._names[normalized] = part_name
        self._parts[part_name] = content
        if content_type:
            self._content_types[part_name] = content_type
        return True

    def _has_part(self, part_name: str) -> bool:
        return normalize_part_name(part_name) in self._names

    def _allocate_header_footer_parts(self) -> None:
        """Headers and footers created in code get the next free ``headerN.xml`` / ``footerN.xml``."""
        document = self.document
        taken: Set[str] = {normalize_part_name(name) for name in document.package_parts}
        for rel in document.relationships.all():
            if not rel.is_external:
                taken.add(normalize_part_name(normalize_target_path(rel.target)))

        for part in self.xml_exporter.header_footer_parts():
            if part.relationship_id:
                continue
            index = 1
            while normalize_part_name(f"word/{part.kind}{index}.xml") in taken:
                index += 1
            target = f"{part.kind}{index}.xml"
            taken.add(normalize_part_name(f"word/{target}"))
            if part.kind == "header":
                rel_id = document.relationships.add_header(target)
            else:
                rel_id = document.relationships.add_footer(target)
            part.set_existing_relationship(rel_id, target)
            logger.debug(f"Allocated {target} as {rel_id}")

    def _prepare_parts(self) -> None:
        document = self.document
        exporter = self.xml_exporter

        self._add_part(PART_DOCUMENT, exporter.to_bytes(exporter.export_document()), CT_DOCUMENT_MAIN)

        for part in exporter.header_footer_parts():
            part_name = normalize_target_path(part.target_path)
            content_type = CT_HEADER if part.kind == "header" else CT_FOOTER
            if not self._add_part(part_name, exporter.to_bytes(exporter.export_header_footer(part)), content_type):
                continue
            rels_name = _rels_path_for(part_name)
            if normalize_part_name(rels_name) in {normalize_part_name(n) for n in document.package_parts}:
                continue
            rels = self._header_footer_relationships(part)
            if rels:
                self._add_part(rels_name, relationships_to_xml(rels))

        styles_rel = self._ensure_relationship(REL_TYPE_STYLES, "styles.xml")
        styles = document.styles_part or exporter.to_bytes(exporter.export_styles())
        self._add_part(normalize_target_path(styles_rel.target), styles, CT_STYLES)

        if document.numbering_part:
            self._add_part(normalize_target_path(document.numbering_target), document.numbering_part, CT_NUMBERING)

        self._add_part(PART_CORE_PROPERTIES, exporter.to_bytes(exporter.export_core_properties()), CT_CORE_PROPERTIES)
        self._add_part(
            PART_APP_PROPERTIES,
            exporter.to_bytes(exporter.export_app_properties(self.application_name)),
            CT_EXTENDED_PROPERTIES,
        )

        for media in document.media.all():
            self._add_part(media.path, media.data)
            ext = posixpath.splitext(media.path)[1].lstrip(".").lower()
            if ext:
                self._default_content_types.setdefault(ext, media.content_type)

        for name, part in document.package_parts.items():
            if not self._add_part(name, part.data, part.content_type):
                logger.debug(f"Generated part replaces carried part {name}")

        # Font table and theme fall back to built-in templates
        for rel_type, target, content_type, template in AUXILIARY_PARTS:
            rel = self._ensure_relationship(rel_type, target)
            part_name = normalize_target_path(rel.target)
            if self._has_part(part_name):
                self._content_types.setdefault(self._names[normalize_part_name(part_name)], content_type)
                continue
            self._add_part(part_name, (TEMPLATES_DIR / template).read_bytes(), content_type)

    def _header_footer_relationships(self, part: HeaderFooter) -> List[Relationship]:
        """Relationships referenced from a header or footer created in code."""
        used: List[str] = []
        for paragraph in part.paragraphs:
            for run in paragraph.runs:
                if run.image is not None and run.image.relationship_id:
                    used.append(run.image.relationship_id)
                for field in run.fields:
                    rel_id = field.get_property(PROP_RELATIONSHIP_ID)
                    if rel_id:
                        used.append(rel_id)

        rels: List[Relationship] = []
        for rel_id in dict.fromkeys(used):
            rel = self.document.relationships.get(rel_id)
            if rel is None:
                logger.warning(f"{part.kind} {part.target_path} references unknown relationship {rel_id}")
                continue
            rels.append(rel)
        return rels

    # Relationships

    def _ensure_relationship(self, rel_type: str, target: str) -> Relationship:
        relationships = self.document.relationships
        rel = relationships.find(rel_type)
        if rel is None:
            rel = relationships.get(relationships.add(rel_type, target))
        return rel

    def _prepare_relationships(self) -> None:
        document = self.document
        if document.numbering_part:
            document.relationships.ensure(REL_TYPE_NUMBERING, document.numbering_target)
        self._parts[PART_DOCUMENT_RELS] = _indented(ET.fromstring(document.relationships.to_xml()))
        self._names[normalize_part_name(PART_DOCUMENT_RELS)] = PART_DOCUMENT_RELS

        root_rels = [
            Relationship("rId1", REL_TYPE_OFFICE_DOCUMENT, PART_DOCUMENT),
            Relationship("rId2", REL_TYPE_CORE_PROPERTIES, PART_CORE_PROPERTIES),
            Relationship("rId3", REL_TYPE_EXTENDED_PROPERTIES, PART_APP_PROPERTIES),
        ]
        custom = self._names.get(PATH_CUSTOM_PROPERTIES)
        if custom is not None:
            root_rels.append(Relationship("rId4", REL_TYPE_CUSTOM_PROPERTIES, custom))
            self._content_types.setdefault(custom, CT_CUSTOM_PROPERTIES)
        self._parts[PART_ROOT_RELS] = _indented(ET.fromstring(relationships_to_xml(root_rels)))
        self._names[normalize_part_name(PART_ROOT_RELS)] = PART_ROOT_RELS

    # Content types

    def _prepare_content_types(self) -> None:
        defaults = {"rels": CT_RELATIONSHIPS, "xml": CT_XML}
        defaults.update(self._default_content_types)

        root = ET.Element("Types", xmlns=NS_CONTENT_TYPES)
        for ext, content_type in defaults.items():
            ET.SubElement(root, "Default", Extension=ext, ContentType=content_type)

        for part_name, content_type in self._content_types.items():
            if part_name not in self._parts:
                continue
            ext = posixpath.splitext(part_name)[1].lstrip(".").lower()
            if defaults.get(ext) == content_type:
                continue
            ET.SubElement(root, "Override", PartName="/" + part_name, ContentType=content_type)

        self._parts[PART_CONTENT_TYPES] = _indented(root)

    def _ordered_parts(self) -> List[Tuple[str, bytes]]:
        """Content types and package rels first, then the main document, then everything else."""
        first = (PART_CONTENT_TYPES, PART_ROOT_RELS, PART_DOCUMENT, PART_DOCUMENT_RELS)
        ordered = [(name, self._parts[name]) for name in first if name in self._parts]
        ordered.extend((name, data) for name, data in self._parts.items() if name not in first)
        return ordered
