"""
Package reader for DOCX files.

Opens the ZIP container, indexes its entries case-insensitively, reads
the content-type manifest and sorts every entry into typed slots. Parts
that no rule recognizes are kept as additional parts.
"""

import io
import logging
import posixpath
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from ..constants import (
    PATH_APP_PROPERTIES,
    PATH_CONTENT_TYPES,
    PATH_CORE_PROPERTIES,
    PATH_CUSTOM_PROPERTIES,
    PATH_DOCUMENT,
    PATH_DOCUMENT_RELS,
    PATH_FONT_TABLE,
    PATH_FOOTER_PREFIX,
    PATH_HEADER_PREFIX,
    PATH_MEDIA_PREFIX,
    PATH_NUMBERING,
    PATH_ROOT_RELS,
    PATH_SETTINGS,
    PATH_STYLES,
    PATH_THEME_PREFIX,
    PATH_WEB_SETTINGS,
)
from ..exceptions import PackageIOError, ParsingError, StructuralError, UnsupportedError
from ..utils.relationships import Relationship
from .relationships import parse_relationships
from .xml_tree import Element, parse_xml

logger = logging.getLogger(__name__)

SINGLETON_PARTS = (
    PATH_CONTENT_TYPES,
    PATH_ROOT_RELS,
    PATH_DOCUMENT_RELS,
    PATH_DOCUMENT,
    PATH_STYLES,
    PATH_NUMBERING,
    PATH_FONT_TABLE,
    PATH_SETTINGS,
    PATH_WEB_SETTINGS,
    PATH_CORE_PROPERTIES,
    PATH_APP_PROPERTIES,
    PATH_CUSTOM_PROPERTIES,
)

# Compound file header of legacy .doc files and password protected packages
COMPOUND_FILE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def normalize_part_name(name: str) -> str:
    """
    Normalize an archive path for case-insensitive lookup.

    Backslashes become slashes, a leading ``./`` or ``/`` is dropped,
    surrounding whitespace is trimmed and the result is lowercased.
    """
    name = name.replace("\\", "/")
    if name.startswith("./"):
        name = name[2:]
    if name.startswith("/"):
        name = name[1:]
    return name.strip().lower()


@dataclass
class MediaPart:
    """A media entry found under ``word/media/``."""

    path: str
    name: str
    content_type: str
    data: bytes


class PackageReader:
    """
    Reads and classifies DOCX package contents.

    Handles ZIP extraction, the content-type manifest and the lookup of
    known parts by normalized path.
    """

    def __init__(self, source: Union[BinaryIO, bytes], size: Optional[int] = None):
        """
        Initialize package reader.

        Args:
            source: Seekable binary stream or raw archive bytes
            size: Archive length in bytes, informational
        """
        if source is None:
            raise StructuralError("package source cannot be None", operation="PackageReader")
        if isinstance(source, (bytes, bytearray)):
            if not source:
                raise StructuralError("package data cannot be empty", operation="PackageReader")
            size = len(source)
            source = io.BytesIO(bytes(source))

        self.package_size: Optional[int] = size
        self.raw_parts: Dict[str, bytes] = {}
        self._normalized_paths: Dict[str, str] = {}
        self._content_type_overrides: Dict[str, str] = {}
        self._content_type_defaults: Dict[str, str] = {}

        self.main_document: Optional[bytes] = None
        self.document_relationships: Optional[bytes] = None
        self.root_relationships: Optional[bytes] = None
        self.styles: Optional[bytes] = None
        self.numbering: Optional[bytes] = None
        self.font_table: Optional[bytes] = None
        self.settings: Optional[bytes] = None
        self.web_settings: Optional[bytes] = None
        self.core_properties: Optional[bytes] = None
        self.app_properties: Optional[bytes] = None
        self.custom_properties: Optional[bytes] = None
        self.theme_parts: Dict[str, bytes] = {}
        self.headers: Dict[str, bytes] = {}
        self.footers: Dict[str, bytes] = {}
        self.media: Dict[str, MediaPart] = {}
        self.additional_parts: Dict[str, bytes] = {}

        self._read_archive(source)
        self._parse_content_types()
        self._extract_known_parts()

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "PackageReader":
        """Open a package from a file path."""
        if not path:
            raise StructuralError("path cannot be empty", operation="PackageReader.from_path")
        docx_path = Path(path)
        try:
            with open(docx_path, "rb") as handle:
                data = handle.read()
        except OSError as e:
            raise PackageIOError("cannot read package", details=str(e), operation="PackageReader.from_path") from e
        logger.info(f"Opened DOCX package: {docx_path}")
        return cls.from_bytes(data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PackageReader":
        """Open a package held in memory."""
        if not data:
            raise StructuralError("data cannot be empty", operation="PackageReader.from_bytes")
        return cls(bytes(data), len(data))

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "PackageReader":
        """Open a package from a readable stream, reading it fully."""
        if stream is None:
            raise StructuralError("stream cannot be None", operation="PackageReader.from_stream")
        try:
            data = stream.read()
        except OSError as e:
            raise PackageIOError("cannot read stream", details=str(e), operation="PackageReader.from_stream") from e
        return cls.from_bytes(data)

    def _read_archive(self, source: BinaryIO) -> None:
        """Read every non-directory entry into ``raw_parts``."""
        if source.read(len(COMPOUND_FILE_SIGNATURE)) == COMPOUND_FILE_SIGNATURE:
            raise UnsupportedError("encrypted or legacy binary documents are not supported", operation="PackageReader.read")
        source.seek(0)
        try:
            with zipfile.ZipFile(source, "r") as archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    normalized = normalize_part_name(info.filename)
                    if not normalized:
                        continue
                    try:
                        data = archive.read(info)
                    except (zipfile.BadZipFile, zlib.error, NotImplementedError, OSError, EOFError) as e:
                        raise ParsingError(
                            "cannot read archive entry",
                            details=str(e),
                            operation="PackageReader.read",
                            part=info.filename,
                        ) from e
                    self.raw_parts[info.filename] = data
                    self._normalized_paths[normalized] = info.filename
        except zipfile.BadZipFile as e:
            raise ParsingError("not a valid ZIP archive", details=str(e), operation="PackageReader.read") from e

        logger.debug(f"Read {len(self.raw_parts)} parts from archive")

    def lookup_part(self, path: str) -> Optional[str]:
        """
        Resolve a path to the original archive entry name.

        Args:
            path: Exact or normalizable part name

        Returns:
            Original entry name, or None
        """
        if path in self.raw_parts:
            return path
        return self._normalized_paths.get(normalize_part_name(path))

    def get_part(self, path: str) -> Optional[bytes]:
        name = self.lookup_part(path)
        if name is None:
            return None
        return self.raw_parts[name]

    def content_type_for(self, path: str) -> str:
        """Content type of a part: explicit override first, then extension default."""
        normalized = normalize_part_name(path)
        if normalized in self._content_type_overrides:
            return self._content_type_overrides[normalized]
        ext = posixpath.splitext(normalized)[1].lstrip(".")
        if not ext:
            return ""
        return self._content_type_defaults.get(ext, "")

    def _parse_content_types(self) -> None:
        """Parse [Content_Types].xml into override and default tables."""
        name = self.lookup_part(PATH_CONTENT_TYPES)
        if name is None:
            raise StructuralError("[Content_Types].xml not found", operation="PackageReader.content_types")
        data = self.raw_parts[name]
        if not data:
            raise StructuralError("[Content_Types].xml is empty", operation="PackageReader.content_types", part=name)

        root = parse_xml(data, name)
        for child in root.children:
            if child.local == "Override":
                part_name = normalize_part_name((child.get_attr("PartName") or "").lstrip("/"))
                if part_name:
                    self._content_type_overrides[part_name] = child.get_attr("ContentType") or ""
            elif child.local == "Default":
                extension = (child.get_attr("Extension") or "").lower()
                if extension:
                    self._content_type_defaults[extension] = child.get_attr("ContentType") or ""

        logger.debug(
            f"Content types: {len(self._content_type_overrides)} overrides, "
            f"{len(self._content_type_defaults)} defaults"
        )

    def _extract_known_parts(self) -> None:
        """Sort parts into singleton slots, prefix collections and additional parts."""
        self.root_relationships = self.get_part(PATH_ROOT_RELS)
        self.document_relationships = self.get_part(PATH_DOCUMENT_RELS)
        self.main_document = self.get_part(PATH_DOCUMENT)
        self.styles = self.get_part(PATH_STYLES)
        self.numbering = self.get_part(PATH_NUMBERING)
        self.font_table = self.get_part(PATH_FONT_TABLE)
        self.settings = self.get_part(PATH_SETTINGS)
        self.web_settings = self.get_part(PATH_WEB_SETTINGS)
        self.core_properties = self.get_part(PATH_CORE_PROPERTIES)
        self.app_properties = self.get_part(PATH_APP_PROPERTIES)
        self.custom_properties = self.get_part(PATH_CUSTOM_PROPERTIES)

        for normalized, original in self._normalized_paths.items():
            data = self.raw_parts[original]
            if normalized.startswith(PATH_THEME_PREFIX):
                self.theme_parts[original] = data
            elif normalized.startswith(PATH_HEADER_PREFIX):
                self.headers[original] = data
            elif normalized.startswith(PATH_FOOTER_PREFIX):
                self.footers[original] = data
            elif normalized.startswith(PATH_MEDIA_PREFIX):
                self.media[original] = MediaPart(
                    path=original,
                    name=posixpath.basename(original),
                    content_type=self.content_type_for(original),
                    data=data,
                )
            elif normalized not in SINGLETON_PARTS:
                self.additional_parts[original] = data

        logger.debug(
            f"Classified parts: {len(self.headers)} headers, {len(self.footers)} footers, "
            f"{len(self.media)} media, {len(self.additional_parts)} additional"
        )


@dataclass
class ParsedPackage:
    """Parsed trees and relationships of a package, ready for hydration."""

    package: PackageReader
    document_tree: Element
    core_properties_tree: Optional[Element] = None
    header_trees: Dict[str, Element] = field(default_factory=dict)
    footer_trees: Dict[str, Element] = field(default_factory=dict)
    document_relationships: List[Relationship] = field(default_factory=list)


def parse_package(package: PackageReader) -> ParsedPackage:
    """
    Parse the XML parts of a package.

    Args:
        package: Classified package

    Returns:
        Parsed package

    Raises:
        StructuralError: If the main document part is missing or empty
        ParsingError: If any part is malformed, tagged with its part name
    """
    if package is None:
        raise StructuralError("package cannot be None", operation="parse_package")
    if not package.main_document:
        raise StructuralError("word/document.xml missing", operation="parse_package")

    document_name = package.lookup_part(PATH_DOCUMENT)
    parsed = ParsedPackage(package=package, document_tree=parse_xml(package.main_document, document_name))

    if package.document_relationships:
        parsed.document_relationships = parse_relationships(
            package.document_relationships, package.lookup_part(PATH_DOCUMENT_RELS)
        )
    if package.core_properties:
        parsed.core_properties_tree = parse_xml(package.core_properties, package.lookup_part(PATH_CORE_PROPERTIES))

    for name, data in package.headers.items():
        if data:
            parsed.header_trees[name] = parse_xml(data, name)
    for name, data in package.footers.items():
        if data:
            parsed.footer_trees[name] = parse_xml(data, name)

    logger.debug(f"Parsed package with {len(parsed.header_trees)} headers and {len(parsed.footer_trees)} footers")
    return parsed
