"""
Constants for DOCX packages.

Namespaces, relationship types, content types, part paths and model
defaults shared by the reader and the writer.
"""

# XML namespaces
NS_W = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS_WP = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS_PIC = "http://schemas.openxmlformats.org/drawingml/2006/picture"
NS_PACKAGE_RELS = "http://schemas.openxmlformats.org/package/2006/relationships"
NS_CONTENT_TYPES = "http://schemas.openxmlformats.org/package/2006/content-types"
NS_CORE_PROPERTIES = "http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
NS_EXTENDED_PROPERTIES = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
NS_DOC_PROPS_VTYPES = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"
NS_DC = "http://purl.org/dc/elements/1.1/"
NS_DCTERMS = "http://purl.org/dc/terms/"
NS_DCMITYPE = "http://purl.org/dc/dcmitype/"
NS_XSI = "http://www.w3.org/2001/XMLSchema-instance"
NS_XML = "http://www.w3.org/XML/1998/namespace"

NAMESPACE_PREFIXES = {
    "w": NS_W,
    "r": NS_R,
    "wp": NS_WP,
    "a": NS_A,
    "pic": NS_PIC,
    "cp": NS_CORE_PROPERTIES,
    "dc": NS_DC,
    "dcterms": NS_DCTERMS,
    "dcmitype": NS_DCMITYPE,
    "xsi": NS_XSI,
    "vt": NS_DOC_PROPS_VTYPES,
}

# Relationship types
REL_TYPE_OFFICE_DOCUMENT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
REL_TYPE_STYLES = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"
REL_TYPE_NUMBERING = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering"
REL_TYPE_FONT_TABLE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/fontTable"
REL_TYPE_THEME = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/theme"
REL_TYPE_IMAGE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
REL_TYPE_HYPERLINK = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"
REL_TYPE_HEADER = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/header"
REL_TYPE_FOOTER = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/footer"
REL_TYPE_CORE_PROPERTIES = "http://schemas.openxmlformats.org/package/2006/relationships/metadata/core-properties"
REL_TYPE_EXTENDED_PROPERTIES = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/extended-properties"
REL_TYPE_CUSTOM_PROPERTIES = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/custom-properties"

TARGET_MODE_EXTERNAL = "External"

# Content types
CT_DOCUMENT_MAIN = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
CT_STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
CT_NUMBERING = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
CT_FONT_TABLE = "application/vnd.openxmlformats-officedocument.wordprocessingml.fontTable+xml"
CT_THEME = "application/vnd.openxmlformats-officedocument.theme+xml"
CT_HEADER = "application/vnd.openxmlformats-officedocument.wordprocessingml.header+xml"
CT_FOOTER = "application/vnd.openxmlformats-officedocument.wordprocessingml.footer+xml"
CT_CORE_PROPERTIES = "application/vnd.openxmlformats-package.core-properties+xml"
CT_EXTENDED_PROPERTIES = "application/vnd.openxmlformats-officedocument.extended-properties+xml"
CT_CUSTOM_PROPERTIES = "application/vnd.openxmlformats-officedocument.custom-properties+xml"
CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_OCTET_STREAM = "application/octet-stream"

IMAGE_CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".wmf": "image/x-wmf",
    ".emf": "image/x-emf",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}

# Part paths (normalized form)
PATH_CONTENT_TYPES = "[content_types].xml"
PATH_ROOT_RELS = "_rels/.rels"
PATH_DOCUMENT_RELS = "word/_rels/document.xml.rels"
PATH_DOCUMENT = "word/document.xml"
PATH_STYLES = "word/styles.xml"
PATH_NUMBERING = "word/numbering.xml"
PATH_FONT_TABLE = "word/fonttable.xml"
PATH_SETTINGS = "word/settings.xml"
PATH_WEB_SETTINGS = "word/websettings.xml"
PATH_THEME_PREFIX = "word/theme/"
PATH_CORE_PROPERTIES = "docprops/core.xml"
PATH_APP_PROPERTIES = "docprops/app.xml"
PATH_CUSTOM_PROPERTIES = "docprops/custom.xml"
PATH_MEDIA_PREFIX = "word/media/"
PATH_HEADER_PREFIX = "word/header"
PATH_FOOTER_PREFIX = "word/footer"

# Part names as written
PART_CONTENT_TYPES = "[Content_Types].xml"
PART_ROOT_RELS = "_rels/.rels"
PART_DOCUMENT_RELS = "word/_rels/document.xml.rels"
PART_DOCUMENT = "word/document.xml"
PART_STYLES = "word/styles.xml"
PART_FONT_TABLE = "word/fontTable.xml"
PART_THEME = "word/theme/theme1.xml"
PART_CORE_PROPERTIES = "docProps/core.xml"
PART_APP_PROPERTIES = "docProps/app.xml"
PART_NUMBERING = "word/numbering.xml"

# Model defaults
DEFAULT_FONT = "Calibri"
DEFAULT_FONT_SIZE = 22  # half-points
DEFAULT_COLOR = "000000"
DEFAULT_LINE_SPACING = 240
DEFAULT_APPLICATION = "docx-codec"
HYPERLINK_COLOR = "0563C1"
HYPERLINK_STYLE = "Hyperlink"

MIN_FONT_SIZE = 2
MAX_FONT_SIZE = 3276
MIN_INDENT = -31680
MAX_INDENT = 31680
MIN_SPACING = 0
MAX_SPACING = 31680
MAX_COLUMNS = 10
MIN_TABLE_ROWS = 1
MAX_TABLE_ROWS = 1000
MIN_TABLE_COLS = 1
MAX_TABLE_COLS = 63

# Units
EMU_PER_PIXEL = 9525
EMU_PER_INCH = 914400
TWIPS_PER_INCH = 1440
PIXELS_PER_INCH = 96

# Page sizes in twips (width, height)
PAGE_SIZE_A4 = (11906, 16838)
PAGE_SIZE_LETTER = (12240, 15840)
PAGE_SIZE_LEGAL = (12240, 20160)
PAGE_SIZE_A3 = (16838, 23811)
PAGE_SIZE_TABLOID = (15840, 24480)

# Drawing anchor defaults
ANCHOR_DISTANCE = 114300
