"""
Table of contents models.

A TOC is written as a ``TOC`` field paragraph followed by preview entry
paragraphs. Each entry links to the ``_Toc`` bookmark of its heading and
carries a ``PAGEREF`` field so Word can fill in the page number.
"""

from dataclasses import dataclass

from ..exceptions import InvalidArgumentError

MAX_TOC_DEPTH = 9

# Left indent per heading level below the first, in twips
TOC_LEVEL_INDENT = 360


@dataclass
class TOCOptions:
    """Options for TOC generation."""

    title: str = "Table of Contents"
    depth: int = 3
    page_numbers: bool = True
    hyperlinks: bool = True

    def validate(self) -> None:
        if self.depth < 1 or self.depth > MAX_TOC_DEPTH:
            raise InvalidArgumentError(
                f"TOC depth must be between 1 and {MAX_TOC_DEPTH}", details=str(self.depth), operation="TOCOptions.validate"
            )

    def switches(self) -> dict:
        """Switch properties for ``new_toc_field``."""
        switches = {"levels": f"1-{self.depth}"}
        if not self.page_numbers:
            switches["hidePageNumbers"] = "true"
        return switches


@dataclass
class TOCEntry:
    """One heading listed in a TOC."""

    level: int
    text: str
    bookmark_name: str
    page_number: str = ""
