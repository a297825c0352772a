"""
Tests for the DOCX package reader.
"""

import io
import zipfile

import pytest

from docx_codec import load_bytes
from docx_codec.exceptions import PackageIOError, ParsingError, StructuralError, UnsupportedError
from docx_codec.parser.package_reader import PackageReader, normalize_part_name, parse_package
from tests.conftest import build_docx, part_xml, rels_xml

PARAGRAPH = "<w:p><w:r><w:t>Hello</w:t></w:r></w:p>"


class TestNormalizePartName:
    """Test cases for normalize_part_name."""

    def test_normalization(self):
        assert normalize_part_name("/word/Document.xml") == "word/document.xml"
        assert normalize_part_name("./word/media/Image1.PNG") == "word/media/image1.png"
        assert normalize_part_name("word\\styles.xml ") == "word/styles.xml"


class TestPackageReader:
    """Test cases for PackageReader."""

    def test_reads_main_parts(self, png_bytes):
        """Known parts land in their slots, media and headers are classified."""
        data = build_docx(
            PARAGRAPH,
            parts={
                "word/styles.xml": b"<w:styles xmlns:w='urn:x'/>",
                "word/header1.xml": part_xml("hdr", PARAGRAPH),
                "word/media/image1.png": png_bytes(),
                "customXml/item1.xml": b"<item/>",
            },
        )
        reader = PackageReader.from_bytes(data)

        assert reader.main_document is not None
        assert reader.styles is not None
        assert "word/header1.xml" in reader.headers
        assert reader.media["word/media/image1.png"].content_type == "image/png"
        assert "customXml/item1.xml" in reader.additional_parts

    def test_case_insensitive_lookup(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("[Content_Types].xml", build_content_types())
            archive.writestr("Word/Document.xml", b"<doc/>")
        reader = PackageReader.from_bytes(buffer.getvalue())

        assert reader.lookup_part("word/document.xml") == "Word/Document.xml"
        assert reader.get_part("/WORD/DOCUMENT.XML") == b"<doc/>"
        assert reader.main_document == b"<doc/>"

    def test_content_type_override_and_default(self):
        reader = PackageReader.from_bytes(build_docx(PARAGRAPH))

        assert reader.content_type_for("word/document.xml").endswith("document.main+xml")
        assert reader.content_type_for("word/other.xml") == "application/xml"
        assert reader.content_type_for("word/unknown.bin") == ""

    def test_missing_content_types_is_structural(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("word/document.xml", b"<doc/>")

        with pytest.raises(StructuralError):
            PackageReader.from_bytes(buffer.getvalue())

    def test_not_a_zip_is_parse_error(self):
        with pytest.raises(ParsingError):
            PackageReader.from_bytes(b"this is not a zip archive")

    def test_compound_file_is_unsupported(self):
        data = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504

        with pytest.raises(UnsupportedError):
            PackageReader.from_bytes(data)

    def test_corrupt_entry_is_parse_error(self):
        """Damaged deflate data surfaces as ParsingError naming the entry."""
        data = bytearray(build_docx(PARAGRAPH * 50))
        with zipfile.ZipFile(io.BytesIO(bytes(data))) as archive:
            info = archive.getinfo("word/document.xml")
        name_length = int.from_bytes(data[info.header_offset + 26 : info.header_offset + 28], "little")
        extra_length = int.from_bytes(data[info.header_offset + 28 : info.header_offset + 30], "little")
        start = info.header_offset + 30 + name_length + extra_length
        for offset in range(start, start + 8):
            data[offset] ^= 0xFF

        with pytest.raises(ParsingError) as exc_info:
            load_bytes(bytes(data))

        assert exc_info.value.part == "word/document.xml"

    def test_truncated_archive_is_parse_error(self):
        data = build_docx(PARAGRAPH)

        with pytest.raises(ParsingError):
            PackageReader.from_bytes(data[: len(data) // 2])

    def test_empty_input_is_structural(self):
        with pytest.raises(StructuralError):
            PackageReader.from_bytes(b"")

    def test_missing_file_is_io_error(self, temp_dir):
        with pytest.raises(PackageIOError):
            PackageReader.from_path(temp_dir / "missing.docx")

    def test_from_stream(self):
        reader = PackageReader.from_stream(io.BytesIO(build_docx(PARAGRAPH)))

        assert reader.main_document is not None


class TestParsePackage:
    """Test cases for parse_package."""

    def test_parses_document_and_relationships(self):
        data = build_docx(PARAGRAPH, relationships=[("rId7", "hyperlink", "https://example.com", "External")])
        parsed = parse_package(PackageReader.from_bytes(data))

        assert parsed.document_tree.local == "document"
        assert parsed.document_relationships[0].id == "rId7"
        assert parsed.document_relationships[0].is_external

    def test_malformed_styles_does_not_abort(self):
        """Styles are carried through as bytes and never parsed."""
        styles = b"<w:styles><broken"
        data = build_docx(PARAGRAPH, parts={"word/styles.xml": styles})

        parsed = parse_package(PackageReader.from_bytes(data))

        assert parsed.package.styles == styles
        assert load_bytes(data).get_text() == "Hello"

    def test_header_trees_parsed(self):
        data = build_docx(PARAGRAPH, parts={"word/header1.xml": part_xml("hdr", PARAGRAPH)})
        parsed = parse_package(PackageReader.from_bytes(data))

        assert parsed.header_trees["word/header1.xml"].local == "hdr"

    def test_missing_document_is_structural(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("[Content_Types].xml", build_content_types())

        with pytest.raises(StructuralError):
            parse_package(PackageReader.from_bytes(buffer.getvalue()))

    def test_malformed_part_names_part(self):
        """A broken header aborts parsing and names the header part."""
        data = build_docx(PARAGRAPH, parts={"word/header1.xml": b"<w:hdr><w:p></w:hdr>"})

        with pytest.raises(ParsingError) as exc_info:
            parse_package(PackageReader.from_bytes(data))

        assert exc_info.value.part == "word/header1.xml"

    def test_malformed_relationships(self):
        data = build_docx(PARAGRAPH, parts={})
        buffer = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(data)) as source, zipfile.ZipFile(buffer, "w") as target:
            for name in source.namelist():
                content = b"<Relationships" if name == "word/_rels/document.xml.rels" else source.read(name)
                target.writestr(name, content)

        with pytest.raises(ParsingError):
            parse_package(PackageReader.from_bytes(buffer.getvalue()))

    def test_incomplete_relationship_skipped(self):
        rels = rels_xml([("rId1", "styles", "styles.xml")]).replace(b'Target="styles.xml"', b'Target=""')
        data = build_docx(PARAGRAPH)
        buffer = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(data)) as source, zipfile.ZipFile(buffer, "w") as target:
            for name in source.namelist():
                content = rels if name == "word/_rels/document.xml.rels" else source.read(name)
                target.writestr(name, content)

        parsed = parse_package(PackageReader.from_bytes(buffer.getvalue()))

        assert parsed.document_relationships == []


def build_content_types():
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Default Extension="xml" ContentType="application/xml"/>'
        "</Types>"
    )
