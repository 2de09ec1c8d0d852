"""
Layout Composer

Walks a VariantTemplate's section slots and binds record and aggregate
values into a DocumentTree.

Layout rules applied here:
- Filler rows: a table whose body has fewer than min_rows rows is padded
  with blank rows of the same width.
- Exclusive checkboxes: exactly one box in a group is checked.
- Page breaks: declared on the slot, never computed from content.
- Kind-conditional slots are omitted when the record's kind does not match.

Composition never raises on data; missing values become blank cells.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from assessment.aggregation import Aggregates
from assessment.models import AssessmentRecord, PropertyKind
from utils.config import Config
from utils.formatting import Formatter

from .tree import (
    Block,
    Cell,
    Checkbox,
    ColumnAlign,
    ColumnSpec,
    DocumentTree,
    PageGeometry,
    Row,
    RowKind,
    Section,
    Table,
    TextBlock,
)


logger = logging.getLogger(__name__)

ALL_KINDS = frozenset(PropertyKind)


# =============================================================================
# Columns
# =============================================================================

def column_widths(total_width: float, weights: Sequence[float]) -> list[float]:
    """Split a width in points proportionally to the given weights."""
    total_weight = sum(weights) or 1
    return [total_width * weight / total_weight for weight in weights]


def make_columns(
    total_width: float,
    specs: Sequence[tuple],
) -> tuple[ColumnSpec, ...]:
    """
    Build column specs from (key, header, weight[, align]) tuples.

    Widths are proportional to the weights and sum to total_width.
    """
    widths = column_widths(total_width, [spec[2] for spec in specs])
    return tuple(
        ColumnSpec(
            key=spec[0],
            header=spec[1],
            width=width,
            align=spec[3] if len(spec) > 3 else ColumnAlign.LEFT,
        )
        for spec, width in zip(specs, widths)
    )


def grid_columns(total_width: float, count: int, name: str = "col") -> tuple[ColumnSpec, ...]:
    """Equal-width, headerless columns for field grids."""
    return make_columns(total_width, [(f"{name}{i}", "", 1) for i in range(count)])


# =============================================================================
# Rows and Tables
# =============================================================================

def header_row(columns: Sequence[ColumnSpec]) -> Row:
    return Row(
        cells=tuple(Cell(text=column.header, style="header") for column in columns),
        kind=RowKind.HEADER,
    )


def data_row(values: Iterable[Union[str, Cell]], style: str = "cell") -> Row:
    cells = tuple(
        value if isinstance(value, Cell) else Cell(text=value or "", style=style)
        for value in values
    )
    return Row(cells=cells, kind=RowKind.DATA)


def filler_row(width: int) -> Row:
    return Row(cells=tuple(Cell() for _ in range(width)), kind=RowKind.FILLER)


def total_row(values: Iterable[Union[str, Cell]]) -> Row:
    cells = tuple(
        value if isinstance(value, Cell) else Cell(text=value or "", style="total")
        for value in values
    )
    return Row(cells=cells, kind=RowKind.TOTAL)


def pad_rows(rows: Sequence[Row], min_rows: int, width: int) -> tuple[Row, ...]:
    """Append blank filler rows until the body has at least min_rows rows."""
    missing = max(0, min_rows - len(rows))
    return tuple(rows) + tuple(filler_row(width) for _ in range(missing))


def build_table(
    name: str,
    columns: Sequence[ColumnSpec],
    rows: Sequence[Row] = (),
    min_rows: int = 0,
    footer: Sequence[Row] = (),
    page_break_after: bool = False,
    show_header: bool = True,
    bordered: bool = True,
) -> Table:
    """Build a table with its body padded to min_rows."""
    columns = tuple(columns)
    return Table(
        name=name,
        columns=columns,
        header=header_row(columns) if show_header else None,
        rows=pad_rows(rows, min_rows, len(columns)),
        footer=tuple(footer),
        min_rows=min_rows,
        page_break_after=page_break_after,
        bordered=bordered,
    )


FieldSpec = Union[tuple[str, str], tuple[str, str, int]]


def field_cell(label: str, text: str, span: int = 1) -> Cell:
    return Cell(text=text or "", label=label, style="value", col_span=span, underline=True)


def field_table(
    name: str,
    total_width: float,
    lines: Sequence[Sequence[FieldSpec]],
    columns: int = 4,
) -> Table:
    """
    Labelled field grid ("Owner: ____  TIN: ____").

    Each line is a sequence of (label, text) or (label, text, span) entries.
    The last field of a line stretches to fill the remaining columns.
    """
    rows = []
    for line in lines:
        cells = []
        used = 0
        for index, spec in enumerate(line):
            label, text = spec[0], spec[1]
            span = spec[2] if len(spec) > 2 else 1
            if index == len(line) - 1:
                span = max(span, columns - used)
            cells.append(field_cell(label, text, span))
            used += span
        rows.append(Row(cells=tuple(cells), kind=RowKind.DATA))
    return Table(
        name=name,
        columns=grid_columns(total_width, columns),
        rows=tuple(rows),
        bordered=False,
    )


def exclusive_checkboxes(
    group: str,
    options: Sequence[tuple[str, bool]],
    fallback: Optional[str] = None,
) -> tuple[Checkbox, ...]:
    """
    Checkboxes of which exactly one is checked.

    The first option marked True wins. When none is, the fallback option
    (default: the last one) is checked.
    """
    selected = next((label for label, checked in options if checked), None)
    if selected is None:
        selected = fallback if fallback is not None else options[-1][0]
    return tuple(
        Checkbox(label=label, checked=label == selected, exclusive_group=group)
        for label, _ in options
    )


def text_block(text: str, style: str = "body", label: str = "") -> TextBlock:
    return TextBlock(text=text or "", style=style, label=label)


# =============================================================================
# Templates
# =============================================================================

@dataclass(frozen=True)
class CompositionContext:
    """Everything a slot builder may bind from."""
    record: AssessmentRecord
    aggregates: Aggregates
    config: Config
    fmt: Formatter
    geometry: PageGeometry
    form: Any = None

    @property
    def kind(self) -> PropertyKind:
        return self.record.kind

    @property
    def appraisal(self):
        return self.record.appraisal

    @property
    def width(self) -> float:
        return self.geometry.content_width


SlotBuilder = Callable[[CompositionContext], Sequence[Block]]


@dataclass(frozen=True)
class SectionSlot:
    """
    One fixed section of a form.

    The slot is omitted entirely for kinds outside `kinds`.
    """
    name: str
    title: str
    builder: SlotBuilder
    kinds: frozenset = ALL_KINDS
    page_break_after: bool = False

    def applies_to(self, kind: PropertyKind) -> bool:
        return kind in self.kinds


@dataclass(frozen=True)
class VariantTemplate:
    """Ordered slots for one document variant (FAAS or Tax Declaration)."""
    variant: str
    slots: tuple[SectionSlot, ...]
    title: Callable[[CompositionContext], str]
    margin: float = 30.0

    def slots_for(self, kind: PropertyKind) -> tuple[SectionSlot, ...]:
        return tuple(slot for slot in self.slots if slot.applies_to(kind))


def compose(
    record: AssessmentRecord,
    aggregates: Aggregates,
    template: VariantTemplate,
    config: Optional[Config] = None,
    formatter: Optional[Formatter] = None,
    context: Any = None,
) -> DocumentTree:
    """
    Compose a document tree.

    Args:
        record: Canonical record.
        aggregates: Aggregates computed once for the record.
        template: The variant's fixed slots.
        config: Form constants (signatories, province, page size).
        formatter: Value formatter; built from config when omitted.
        context: Variant-specific input, e.g. a Tax Declaration form.

    Returns:
        DocumentTree
    """
    config = config or Config()
    formatter = formatter or Formatter(currency=config.currency, date_format=config.date_format)
    geometry = PageGeometry.from_name(config.page_size, margin=template.margin)

    ctx = CompositionContext(
        record=record,
        aggregates=aggregates,
        config=config,
        fmt=formatter,
        geometry=geometry,
        form=context,
    )

    sections = []
    for slot in template.slots_for(record.kind):
        blocks = tuple(slot.builder(ctx))
        sections.append(Section(
            name=slot.name,
            title=slot.title,
            blocks=blocks,
            page_break_after=slot.page_break_after,
        ))

    tree = DocumentTree(
        variant=template.variant,
        title=template.title(ctx),
        kind=record.kind.value,
        page=geometry,
        sections=tuple(sections),
        warnings=record.warnings,
    )

    logger.debug(
        "Composed %s for %s record %s (%d sections)",
        template.variant, record.kind.value, record.id or "<unsaved>", len(sections),
    )
    return tree
