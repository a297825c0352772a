"""Tagged top-level body element: paragraph, table or section break."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .paragraph import Paragraph
from .section import SectionBreak
from .table import Table


class BlockType(Enum):
    PARAGRAPH = "paragraph"
    TABLE = "table"
    SECTION_BREAK = "section_break"


@dataclass
class Block:
    """One top-level body element, tagged with its kind."""

    type: BlockType
    element: Union[Paragraph, Table, SectionBreak]

    @property
    def paragraph(self) -> Optional[Paragraph]:
        return self.element if self.type == BlockType.PARAGRAPH else None

    @property
    def table(self) -> Optional[Table]:
        return self.element if self.type == BlockType.TABLE else None

    @property
    def section_break(self) -> Optional[SectionBreak]:
        return self.element if self.type == BlockType.SECTION_BREAK else None
