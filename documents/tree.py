"""
Document Tree

Declarative, renderer-neutral representation of a composed form:
DocumentTree -> Section -> Block (TextBlock | Table | Checkbox) -> Row -> Cell.

Every node is a frozen dataclass holding tuples, so a composed tree is
immutable and two trees composed from the same record compare equal.
The rendering backend consumes DocumentTree.to_dict().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterator, Optional, Union

from reportlab.lib.pagesizes import A4, LEGAL, letter

from .styles import export_styles


logger = logging.getLogger(__name__)

DEFAULT_MARGIN: Final[float] = 30.0

PAGE_SIZES: Final[dict] = {
    "LEGAL": LEGAL,
    "A4": A4,
    "LETTER": letter,
}


class RowKind(Enum):
    HEADER = "header"
    DATA = "data"
    FILLER = "filler"
    TOTAL = "total"


class ColumnAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# =============================================================================
# Page Geometry
# =============================================================================

@dataclass(frozen=True)
class PageGeometry:
    """Page size and margins, in points."""
    name: str
    width: float
    height: float
    margin: float = DEFAULT_MARGIN

    @classmethod
    def from_name(cls, name: str, margin: float = DEFAULT_MARGIN) -> "PageGeometry":
        """Resolve a ReportLab page size by name. Unknown names fall back to LEGAL."""
        key = (name or "").strip().upper()
        if key not in PAGE_SIZES:
            logger.warning("Unknown page size %r, using LEGAL", name)
            key = "LEGAL"
        width, height = PAGE_SIZES[key]
        return cls(name=key, width=width, height=height, margin=margin)

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    def to_dict(self) -> dict:
        return {
            "size": self.name,
            "width": self.width,
            "height": self.height,
            "margins": [self.margin] * 4,
        }


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Cell:
    """
    One table cell.

    `label` is the printed caption for field cells ("Owner:"), `text` the
    bound value. An empty text is a blank cell, never a missing one.
    """
    text: str = ""
    label: str = ""
    style: str = "cell"
    col_span: int = 1
    border: bool = True
    underline: bool = False

    def __post_init__(self):
        if self.col_span < 1:
            raise ValueError(f"col_span must be at least 1, got {self.col_span}")

    @property
    def is_blank(self) -> bool:
        return not self.text

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "label": self.label,
            "style": self.style,
            "colSpan": self.col_span,
            "border": self.border,
            "underline": self.underline,
        }


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    header: str
    width: float
    align: ColumnAlign = ColumnAlign.LEFT

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "header": self.header,
            "width": round(self.width, 2),
            "align": self.align.value,
        }


@dataclass(frozen=True)
class Row:
    cells: tuple[Cell, ...]
    kind: RowKind = RowKind.DATA

    @property
    def width(self) -> int:
        """Number of grid columns the row covers."""
        return sum(cell.col_span for cell in self.cells)

    @property
    def is_blank(self) -> bool:
        return all(cell.is_blank for cell in self.cells)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "cells": [cell.to_dict() for cell in self.cells],
        }


@dataclass(frozen=True)
class TextBlock:
    text: str
    style: str = "body"
    label: str = ""

    def to_dict(self) -> dict:
        return {"type": "text", "text": self.text, "style": self.style, "label": self.label}


@dataclass(frozen=True)
class Checkbox:
    """A printed [ X ] / [   ] box. Boxes sharing a group are mutually exclusive."""
    label: str
    checked: bool = False
    exclusive_group: str = ""

    def to_dict(self) -> dict:
        return {
            "type": "checkbox",
            "label": self.label,
            "checked": self.checked,
            "exclusiveGroup": self.exclusive_group or None,
        }


@dataclass(frozen=True)
class Table:
    """
    A form table.

    `rows` is the body: data rows followed by filler rows. `header` and
    `footer` rows are kept apart from the body so row-count rules only
    ever look at the body.
    """
    name: str
    columns: tuple[ColumnSpec, ...]
    rows: tuple[Row, ...] = ()
    header: Optional[Row] = None
    footer: tuple[Row, ...] = ()
    min_rows: int = 0
    page_break_after: bool = False
    bordered: bool = True

    def __post_init__(self):
        expected = len(self.columns)
        all_rows = list(self.rows) + list(self.footer)
        if self.header is not None:
            all_rows.append(self.header)
        for row in all_rows:
            if row.width != expected:
                raise ValueError(
                    f"Table '{self.name}': row covers {row.width} columns, expected {expected}"
                )

    @property
    def data_rows(self) -> tuple[Row, ...]:
        return tuple(row for row in self.rows if row.kind is RowKind.DATA)

    @property
    def filler_rows(self) -> tuple[Row, ...]:
        return tuple(row for row in self.rows if row.kind is RowKind.FILLER)

    def column_index(self, key: str) -> int:
        for index, column in enumerate(self.columns):
            if column.key == key:
                return index
        raise KeyError(f"Table '{self.name}' has no column '{key}'")

    def column_values(self, key: str) -> list[str]:
        """Body cell texts for a column. Only meaningful for tables without spans."""
        index = self.column_index(key)
        return [row.cells[index].text for row in self.rows]

    def to_dict(self) -> dict:
        return {
            "type": "table",
            "name": self.name,
            "columns": [column.to_dict() for column in self.columns],
            "widths": [round(column.width, 2) for column in self.columns],
            "header": self.header.to_dict() if self.header else None,
            "rows": [row.to_dict() for row in self.rows],
            "footer": [row.to_dict() for row in self.footer],
            "minRows": self.min_rows,
            "bordered": self.bordered,
            "pageBreak": "after" if self.page_break_after else None,
        }


Block = Union[TextBlock, Table, Checkbox]


@dataclass(frozen=True)
class Section:
    name: str
    title: str
    blocks: tuple[Block, ...] = ()
    page_break_after: bool = False

    @property
    def tables(self) -> tuple[Table, ...]:
        return tuple(block for block in self.blocks if isinstance(block, Table))

    @property
    def checkboxes(self) -> tuple[Checkbox, ...]:
        return tuple(block for block in self.blocks if isinstance(block, Checkbox))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "title": self.title,
            "blocks": [block.to_dict() for block in self.blocks],
            "pageBreak": "after" if self.page_break_after else None,
        }


# =============================================================================
# Document
# =============================================================================

@dataclass(frozen=True)
class DocumentTree:
    """
    A composed document, ready for a rendering backend.

    Built once per request and never mutated.
    """
    variant: str
    title: str
    kind: str
    page: PageGeometry
    sections: tuple[Section, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def section_names(self) -> list[str]:
        return [section.name for section in self.sections]

    def section(self, name: str) -> Optional[Section]:
        return next((s for s in self.sections if s.name == name), None)

    def has_section(self, name: str) -> bool:
        return self.section(name) is not None

    def iter_tables(self) -> Iterator[Table]:
        for section in self.sections:
            yield from section.tables

    def find_table(self, name: str) -> Optional[Table]:
        return next((t for t in self.iter_tables() if t.name == name), None)

    def checkboxes(self, group: Optional[str] = None) -> list[Checkbox]:
        boxes = [box for section in self.sections for box in section.checkboxes]
        if group is None:
            return boxes
        return [box for box in boxes if box.exclusive_group == group]

    def starts_new_page(self, name: str) -> bool:
        """True when the named section follows a forced page break."""
        for index, section in enumerate(self.sections):
            if section.name == name:
                if index == 0:
                    return True
                previous = self.sections[index - 1]
                last_block = previous.blocks[-1] if previous.blocks else None
                return previous.page_break_after or (
                    isinstance(last_block, Table) and last_block.page_break_after
                )
        raise KeyError(f"No section named '{name}'")

    def validate(self) -> tuple[bool, list[str]]:
        """
        Re-check the form's layout rules.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        for table in self.iter_tables():
            if len(table.rows) < table.min_rows:
                errors.append(
                    f"Table '{table.name}' has {len(table.rows)} body rows, "
                    f"minimum is {table.min_rows}"
                )

        groups: dict[str, int] = {}
        for box in self.checkboxes():
            if box.exclusive_group:
                groups.setdefault(box.exclusive_group, 0)
                groups[box.exclusive_group] += int(box.checked)
        for group, checked in groups.items():
            if checked != 1:
                errors.append(f"Checkbox group '{group}' has {checked} checked boxes, expected 1")

        names = self.section_names
        if len(names) != len(set(names)):
            errors.append("Section names are not unique")

        return len(errors) == 0, errors

    def to_dict(self) -> dict:
        """Declarative structure for the rendering backend."""
        return {
            "variant": self.variant,
            "title": self.title,
            "kind": self.kind,
            "page": self.page.to_dict(),
            "sections": [section.to_dict() for section in self.sections],
            "styles": export_styles(),
            "warnings": list(self.warnings),
        }
