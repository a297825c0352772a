"""
Table model for DOCX documents.

Tables own rows, rows own a fixed number of cells. Cells carry width,
vertical alignment, borders, shading and merge state (gridSpan, vMerge
and a back-reference to the cell that owns a horizontal merge).
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..constants import MAX_TABLE_COLS, MAX_TABLE_ROWS, MIN_TABLE_COLS, MIN_TABLE_ROWS
from ..exceptions import InvalidArgumentError, InvalidStateError
from ..utils.id_manager import IDManager
from ..utils.relationships import RelationshipManager
from .base import Models
from .paragraph import Alignment, Paragraph

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")
DEFAULT_SHADING = "FFFFFF"


class WidthType(Enum):
    AUTO = "auto"
    DXA = "dxa"
    PCT = "pct"


class CellVerticalAlign(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class VerticalMerge(Enum):
    """Vertical merge state of a cell."""

    NONE = "none"
    RESTART = "restart"
    CONTINUE = "continue"


class BorderLineStyle(Enum):
    NONE = "none"
    SINGLE = "single"
    DOTTED = "dotted"
    DASHED = "dashed"
    DOUBLE = "double"
    TRIPLE = "triple"
    THICK = "thick"


@dataclass
class TableWidth:
    type: WidthType = WidthType.AUTO
    value: int = 0


@dataclass
class BorderStyle:
    """Border line; width in eighths of a point."""

    style: BorderLineStyle = BorderLineStyle.NONE
    width: int = 0
    color: str = "000000"


@dataclass
class TableBorders:
    top: BorderStyle = field(default_factory=BorderStyle)
    left: BorderStyle = field(default_factory=BorderStyle)
    bottom: BorderStyle = field(default_factory=BorderStyle)
    right: BorderStyle = field(default_factory=BorderStyle)

    def is_empty(self) -> bool:
        return all(b.style == BorderLineStyle.NONE for b in (self.top, self.left, self.bottom, self.right))


class TableCell(Models):
    """
    Represents a table cell.

    A cell whose ``h_merge_owner`` is set is a horizontal continuation of
    that owner and is not written out on its own.
    """

    def __init__(
        self,
        element_id: Optional[str] = None,
        id_manager: Optional[IDManager] = None,
        relationships: Optional[RelationshipManager] = None,
    ):
        super().__init__(element_id)
        self._id_manager = id_manager or IDManager()
        self._relationships = relationships
        self.row: Optional["TableRow"] = None
        self.paragraphs: List[Paragraph] = []
        self.tables: List["Table"] = []
        self.width: int = 0
        self.vertical_alignment: CellVerticalAlign = CellVerticalAlign.TOP
        self.borders: TableBorders = TableBorders()
        self.shading: str = DEFAULT_SHADING
        self.grid_span: int = 1
        self.v_merge: VerticalMerge = VerticalMerge.NONE
        self.h_merge_owner: Optional["TableCell"] = None

    @property
    def is_h_merge_continuation(self) -> bool:
        return self.h_merge_owner is not None

    def add_paragraph(self) -> Paragraph:
        paragraph = Paragraph(self._id_manager.generate_unique_id("paragraph"), self._id_manager, self._relationships)
        paragraph.parent = self
        self.paragraphs.append(paragraph)
        return paragraph

    def add_table(self, rows: int, cols: int) -> "Table":
        """Add a nested table to this cell."""
        table = Table(self._id_manager.generate_unique_id("table"), rows, cols, self._id_manager, self._relationships)
        table.parent = self
        self.tables.append(table)
        return table

    def get_text(self) -> str:
        return "\n".join(p.text for p in self.paragraphs)

    def set_width(self, twips: int) -> None:
        if twips < 0:
            raise InvalidArgumentError("width cannot be negative", details=str(twips), operation="TableCell.set_width")
        self.width = twips

    def set_vertical_alignment(self, align: CellVerticalAlign) -> None:
        if not isinstance(align, CellVerticalAlign):
            raise InvalidArgumentError("invalid vertical alignment value", details=repr(align), operation="TableCell.set_vertical_alignment")
        self.vertical_alignment = align

    def set_borders(self, borders: TableBorders) -> None:
        self.borders = borders or TableBorders()

    def set_shading(self, color: str) -> None:
        if not color or not HEX_COLOR.match(color):
            raise InvalidArgumentError("shading must be a 6 digit hex value", details=repr(color), operation="TableCell.set_shading")
        self.shading = color.upper()

    def set_grid_span(self, span: int) -> None:
        if span < 1:
            raise InvalidArgumentError("span must be at least 1", details=str(span), operation="TableCell.set_grid_span")
        self.grid_span = span

    def set_v_merge(self, merge: VerticalMerge) -> None:
        if not isinstance(merge, VerticalMerge):
            raise InvalidArgumentError("invalid vertical merge type", details=repr(merge), operation="TableCell.set_v_merge")
        self.v_merge = merge

    def _is_merged(self) -> bool:
        return self.h_merge_owner is not None or self.v_merge != VerticalMerge.NONE or self.grid_span > 1

    def position(self) -> Tuple[int, int]:
        """Return the (row, column) index of this cell within its table."""
        row = self.row
        if row is None or row.table is None:
            raise InvalidStateError("cell is not attached to a table", operation="TableCell.position")
        try:
            return row.table.rows.index(row), row.cells.index(self)
        except ValueError as e:
            raise InvalidStateError("cell is not part of its table grid", operation="TableCell.position") from e

    def merge(self, cols: int, rows: int = 1) -> None:
        """
        Merge this cell with the cells to its right and below.

        The cell becomes the anchor of a ``cols`` x ``rows`` rectangle. The
        model is left unchanged when validation fails.

        Args:
            cols: Number of grid columns to span
            rows: Number of rows to span

        Raises:
            InvalidArgumentError: If the span is not positive or leaves the grid
            InvalidStateError: If this cell or any cell in the rectangle is
                already part of a merge
        """
        op = "TableCell.merge"
        if cols < 1 or rows < 1:
            raise InvalidArgumentError("merge span must be at least 1x1", details=f"cols={cols}, rows={rows}", operation=op)

        row_idx, col_idx = self.position()
        table = self.row.table
        if row_idx + rows > table.row_count:
            raise InvalidArgumentError(
                "merge exceeds table rows",
                details=f"cell ({row_idx}, {col_idx}) cannot span {rows} rows of {table.row_count}",
                operation=op,
            )
        if col_idx + cols > table.column_count:
            raise InvalidArgumentError(
                "merge exceeds table columns",
                details=f"cell ({row_idx}, {col_idx}) cannot span {cols} columns of {table.column_count}",
                operation=op,
            )
        if self.h_merge_owner is not None or self.v_merge == VerticalMerge.CONTINUE:
            raise InvalidStateError("cell is a merge continuation", details=f"cell ({row_idx}, {col_idx})", operation=op)
        if self.grid_span > 1 or self.v_merge == VerticalMerge.RESTART:
            raise InvalidStateError("cell already anchors a merge", details=f"cell ({row_idx}, {col_idx})", operation=op)

        for r in range(row_idx, row_idx + rows):
            for c in range(col_idx, col_idx + cols):
                cell = table.cell(r, c)
                if cell is not self and cell._is_merged():
                    raise InvalidStateError("target region overlaps an existing merge", details=f"cell ({r}, {c}) is already merged", operation=op)

        self.grid_span = cols
        self.v_merge = VerticalMerge.RESTART if rows > 1 else VerticalMerge.NONE
        for c in range(col_idx + 1, col_idx + cols):
            table.cell(row_idx, c).h_merge_owner = self

        for r in range(row_idx + 1, row_idx + rows):
            leader = table.cell(r, col_idx)
            leader.v_merge = VerticalMerge.CONTINUE
            leader.grid_span = cols
            for c in range(col_idx + 1, col_idx + cols):
                follower = table.cell(r, c)
                follower.v_merge = VerticalMerge.CONTINUE
                follower.h_merge_owner = leader

        logger.debug(f"Merged cell ({row_idx}, {col_idx}) across {cols} columns and {rows} rows")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"grid_span": self.grid_span, "v_merge": self.v_merge.value, "continuation": self.is_h_merge_continuation})
        return data


class TableRow(Models):
    """Represents a table row with a fixed number of cells."""

    def __init__(
        self,
        element_id: Optional[str] = None,
        cols: int = 1,
        id_manager: Optional[IDManager] = None,
        relationships: Optional[RelationshipManager] = None,
    ):
        super().__init__(element_id)
        self._id_manager = id_manager or IDManager()
        self.table: Optional["Table"] = None
        self.height: int = 0
        self.cells: List[TableCell] = []
        for _ in range(cols):
            cell = TableCell(self._id_manager.generate_unique_id("cell"), self._id_manager, relationships)
            cell.row = self
            cell.parent = self
            self.cells.append(cell)

    def cell(self, col: int) -> TableCell:
        if col < 0 or col >= len(self.cells):
            raise InvalidArgumentError("column index out of bounds", details=str(col), operation="TableRow.cell")
        return self.cells[col]

    def set_height(self, twips: int) -> None:
        if twips < 0:
            raise InvalidArgumentError("height cannot be negative", details=str(twips), operation="TableRow.set_height")
        self.height = twips

    def get_text(self) -> str:
        return "\t".join(c.get_text() for c in self.cells)


class Table(Models):
    """
    Represents a table.

    Args:
        element_id: Document unique table id
        rows: Initial row count (1..1000)
        cols: Column count (1..63)
    """

    def __init__(
        self,
        element_id: Optional[str] = None,
        rows: int = 1,
        cols: int = 1,
        id_manager: Optional[IDManager] = None,
        relationships: Optional[RelationshipManager] = None,
    ):
        if rows < MIN_TABLE_ROWS or rows > MAX_TABLE_ROWS:
            raise InvalidArgumentError(f"rows must be between {MIN_TABLE_ROWS} and {MAX_TABLE_ROWS}", details=str(rows), operation="Table")
        if cols < MIN_TABLE_COLS or cols > MAX_TABLE_COLS:
            raise InvalidArgumentError(f"columns must be between {MIN_TABLE_COLS} and {MAX_TABLE_COLS}", details=str(cols), operation="Table")
        super().__init__(element_id)
        self._id_manager = id_manager or IDManager()
        self._relationships = relationships
        self._cols = cols
        self.width: TableWidth = TableWidth()
        self.alignment: Alignment = Alignment.LEFT
        self.style_name: str = ""
        self.rows: List[TableRow] = []
        for _ in range(rows):
            self.rows.append(self._new_row())

    def _new_row(self) -> TableRow:
        row = TableRow(self._id_manager.generate_unique_id("row"), self._cols, self._id_manager, self._relationships)
        row.table = self
        row.parent = self
        return row

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return self._cols

    def row(self, index: int) -> TableRow:
        if index < 0 or index >= len(self.rows):
            raise InvalidArgumentError("row index out of bounds", details=str(index), operation="Table.row")
        return self.rows[index]

    def cell(self, row: int, col: int) -> TableCell:
        return self.row(row).cell(col)

    def add_row(self) -> TableRow:
        if len(self.rows) >= MAX_TABLE_ROWS:
            raise InvalidArgumentError(f"table cannot exceed {MAX_TABLE_ROWS} rows", operation="Table.add_row")
        row = self._new_row()
        self.rows.append(row)
        return row

    def insert_row(self, index: int) -> TableRow:
        if index < 0 or index > len(self.rows):
            raise InvalidArgumentError("row index out of bounds", details=str(index), operation="Table.insert_row")
        if len(self.rows) >= MAX_TABLE_ROWS:
            raise InvalidArgumentError(f"table cannot exceed {MAX_TABLE_ROWS} rows", operation="Table.insert_row")
        row = self._new_row()
        self.rows.insert(index, row)
        return row

    def delete_row(self, index: int) -> None:
        if index < 0 or index >= len(self.rows):
            raise InvalidArgumentError("row index out of bounds", details=str(index), operation="Table.delete_row")
        if len(self.rows) == 1:
            raise InvalidArgumentError("table must keep at least one row", operation="Table.delete_row")
        del self.rows[index]

    def set_width(self, width: TableWidth) -> None:
        if width is None or width.value < 0:
            raise InvalidArgumentError("table width cannot be negative", details=repr(width), operation="Table.set_width")
        self.width = width

    def set_alignment(self, alignment: Alignment) -> None:
        if not isinstance(alignment, Alignment):
            raise InvalidArgumentError("invalid alignment value", details=repr(alignment), operation="Table.set_alignment")
        self.alignment = alignment

    def set_style(self, style_name: str) -> None:
        self.style_name = style_name or ""

    def get_text(self) -> str:
        return "\n".join(r.get_text() for r in self.rows)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"rows": self.row_count, "columns": self.column_count, "style": self.style_name})
        return data
