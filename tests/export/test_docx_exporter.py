"""
Tests for DOCX packaging.
"""

import xml.etree.ElementTree as ET

import pytest

from docx_codec import Document
from docx_codec.constants import (
    CT_CUSTOM_PROPERTIES,
    CT_DOCUMENT_MAIN,
    CT_HEADER,
    CT_NUMBERING,
    NS_CONTENT_TYPES,
    NS_PACKAGE_RELS,
    REL_TYPE_CUSTOM_PROPERTIES,
    REL_TYPE_FONT_TABLE,
    REL_TYPE_HEADER,
    REL_TYPE_HYPERLINK,
    REL_TYPE_STYLES,
    REL_TYPE_THEME,
)
from docx_codec.exceptions import PackageIOError, StructuralError
from docx_codec.export.docx_exporter import TEMPLATES_DIR, DOCXExporter
from docx_codec.export.drawing import qn
from tests.conftest import read_parts

SETTINGS_CT = "application/vnd.openxmlformats-officedocument.wordprocessingml.settings+xml"


def relationships(data):
    root = ET.fromstring(data)
    return [
        (rel.get("Id"), rel.get("Type"), rel.get("Target"), rel.get("TargetMode"))
        for rel in root.findall(f"{{{NS_PACKAGE_RELS}}}Relationship")
    ]


def content_types(data):
    root = ET.fromstring(data)
    defaults = {e.get("Extension"): e.get("ContentType") for e in root.findall(f"{{{NS_CONTENT_TYPES}}}Default")}
    overrides = {e.get("PartName"): e.get("ContentType") for e in root.findall(f"{{{NS_CONTENT_TYPES}}}Override")}
    return defaults, overrides


@pytest.fixture
def document():
    document = Document()
    document.add_paragraph().add_run("Body text")
    return document


class TestDOCXExporter:
    """Test cases for package assembly."""

    def test_requires_document(self):
        with pytest.raises(StructuralError):
            DOCXExporter(None)

    def test_minimal_package(self, document):
        parts = read_parts(DOCXExporter(document).to_bytes())

        assert list(parts)[:4] == [
            "[Content_Types].xml",
            "_rels/.rels",
            "word/document.xml",
            "word/_rels/document.xml.rels",
        ]
        for name in (
            "word/styles.xml",
            "word/fontTable.xml",
            "word/theme/theme1.xml",
            "docProps/core.xml",
            "docProps/app.xml",
        ):
            assert name in parts

    def test_root_relationships(self, document):
        parts = read_parts(DOCXExporter(document).to_bytes())
        rels = relationships(parts["_rels/.rels"])

        assert [(rel_id, target) for rel_id, _, target, _ in rels] == [
            ("rId1", "word/document.xml"),
            ("rId2", "docProps/core.xml"),
            ("rId3", "docProps/app.xml"),
        ]

    def test_document_relationships(self, document):
        parts = read_parts(DOCXExporter(document).to_bytes())
        rels = {rel_type: target for _, rel_type, target, _ in relationships(parts["word/_rels/document.xml.rels"])}

        assert rels[REL_TYPE_STYLES] == "styles.xml"
        assert rels[REL_TYPE_FONT_TABLE] == "fontTable.xml"
        assert rels[REL_TYPE_THEME] == "theme/theme1.xml"

    def test_templates_used_for_font_table_and_theme(self, document):
        parts = read_parts(DOCXExporter(document).to_bytes())

        assert parts["word/fontTable.xml"] == (TEMPLATES_DIR / "fontTable.xml").read_bytes()
        assert parts["word/theme/theme1.xml"] == (TEMPLATES_DIR / "theme1.xml").read_bytes()

    def test_content_types(self, document, png_bytes):
        image = document.add_image(png_bytes(), "photo.png")
        document.add_paragraph().add_image_run(image)

        defaults, overrides = content_types(read_parts(DOCXExporter(document).to_bytes())["[Content_Types].xml"])

        assert defaults["png"] == "image/png"
        assert defaults["rels"] == "application/vnd.openxmlformats-package.relationships+xml"
        assert overrides["/word/document.xml"] == CT_DOCUMENT_MAIN
        assert "/word/media/image1.png" not in overrides

    def test_application_name(self, document):
        parts = read_parts(DOCXExporter(document, application_name="Report Builder").to_bytes())

        assert b"<Application>Report Builder</Application>" in parts["docProps/app.xml"]


class TestHeaderFooterParts:
    """Test cases for header and footer part allocation."""

    def test_new_header_and_footer_get_parts(self, document):
        section = document.current_section
        section.header().add_paragraph().add_run("Top")
        section.footer().add_paragraph().add_run("Bottom")

        parts = read_parts(DOCXExporter(document).to_bytes())

        assert "word/header1.xml" in parts
        assert "word/footer1.xml" in parts
        header = section.header()
        assert header.target_path == "header1.xml"
        assert document.relationships.get(header.relationship_id).type == REL_TYPE_HEADER
        defaults, overrides = content_types(parts["[Content_Types].xml"])
        assert overrides["/word/header1.xml"] == CT_HEADER

        body = ET.fromstring(parts["word/document.xml"]).find(qn("w:body"))
        reference = body.find(qn("w:sectPr")).find(qn("w:headerReference"))
        assert reference.get(qn("r:id")) == header.relationship_id

    def test_allocation_skips_taken_names(self, document):
        document.add_package_part("word/header1.xml", b"<w:hdr/>", CT_HEADER)
        document.current_section.header().add_paragraph()

        parts = read_parts(DOCXExporter(document).to_bytes())

        assert document.current_section.header().target_path == "header2.xml"
        assert parts["word/header1.xml"] == b"<w:hdr/>"
        assert "word/header2.xml" in parts

    def test_headers_in_every_section(self, document):
        document.current_section.header().add_paragraph().add_run("First")
        document.add_section()
        document.current_section.header().add_paragraph().add_run("Second")

        parts = read_parts(DOCXExporter(document).to_bytes())

        assert b"First" in parts["word/header1.xml"]
        assert b"Second" in parts["word/header2.xml"]

    def test_repeated_export_does_not_reallocate(self, document):
        document.current_section.header().add_paragraph()
        exporter = DOCXExporter(document)
        exporter.to_bytes()
        count = len(document.relationships)

        parts = read_parts(exporter.to_bytes())

        assert len(document.relationships) == count
        assert "word/header2.xml" not in parts

    def test_header_hyperlink_relationships(self, document):
        header = document.current_section.header()
        header.add_paragraph().add_hyperlink("https://example.com", "site")

        parts = read_parts(DOCXExporter(document).to_bytes())
        rels = relationships(parts["word/_rels/header1.xml.rels"])

        assert len(rels) == 1
        assert rels[0][1:] == (REL_TYPE_HYPERLINK, "https://example.com", "External")

    def test_header_without_references_has_no_rels_part(self, document):
        document.current_section.header().add_paragraph().add_run("plain")

        parts = read_parts(DOCXExporter(document).to_bytes())

        assert "word/_rels/header1.xml.rels" not in parts


class TestCarriedParts:
    """Test cases for parts written back unchanged."""

    def test_styles_written_verbatim(self, document):
        styles = b'<?xml version="1.0"?><w:styles xmlns:w="urn:x"><!-- custom --></w:styles>'
        document.set_styles_part(styles)

        parts = read_parts(DOCXExporter(document).to_bytes())

        assert parts["word/styles.xml"] == styles

    def test_settings_part(self, document):
        document.add_package_part("word/settings.xml", b"<w:settings/>", SETTINGS_CT)

        parts = read_parts(DOCXExporter(document).to_bytes())
        defaults, overrides = content_types(parts["[Content_Types].xml"])

        assert parts["word/settings.xml"] == b"<w:settings/>"
        assert overrides["/word/settings.xml"] == SETTINGS_CT

    def test_custom_properties_get_root_relationship(self, document):
        document.add_package_part("docProps/custom.xml", b"<Properties/>")

        parts = read_parts(DOCXExporter(document).to_bytes())
        rels = relationships(parts["_rels/.rels"])
        defaults, overrides = content_types(parts["[Content_Types].xml"])

        assert rels[-1][:3] == ("rId4", REL_TYPE_CUSTOM_PROPERTIES, "docProps/custom.xml")
        assert overrides["/docProps/custom.xml"] == CT_CUSTOM_PROPERTIES

    def test_generated_part_wins(self, document):
        document.add_package_part("word/document.xml", b"<stale/>")

        parts = read_parts(DOCXExporter(document).to_bytes())

        assert parts["word/document.xml"] != b"<stale/>"

    def test_numbering_written_at_target(self, document):
        document.set_numbering_part(b"<w:numbering/>", "lists.xml")

        parts = read_parts(DOCXExporter(document).to_bytes())
        defaults, overrides = content_types(parts["[Content_Types].xml"])

        assert parts["word/lists.xml"] == b"<w:numbering/>"
        assert overrides["/word/lists.xml"] == CT_NUMBERING


class TestExportToFile:
    """Test cases for writing packages to disk."""

    def test_export(self, document, temp_dir):
        path = temp_dir / "nested" / "out.docx"

        assert DOCXExporter(document).export(path)
        assert path.read_bytes()[:2] == b"PK"

    def test_save_through_document(self, document, temp_dir):
        path = temp_dir / "out.docx"

        assert document.save(path)
        assert path.exists()

    def test_unwritable_path(self, document, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(PackageIOError) as exc_info:
            DOCXExporter(document).export(blocker / "out.docx")

        assert exc_info.value.part.endswith("out.docx")
