"""
Document composition for the FAAS and Tax Declaration forms.

Composes renderer-neutral document trees; a rendering backend turns
DocumentTree.to_dict() into paper.
"""

from .tree import (
    Cell,
    Checkbox,
    ColumnSpec,
    DocumentTree,
    PageGeometry,
    Row,
    RowKind,
    Section,
    Table,
    TextBlock,
)
from .layout import CompositionContext, SectionSlot, VariantTemplate, compose
from .faas import FAAS_TEMPLATE, compose_faas_document
from .tax_declaration import (
    TAX_DECLARATION_TEMPLATE,
    TaxDeclarationForm,
    compose_tax_declaration_document,
)

__all__ = [
    "Cell",
    "Checkbox",
    "ColumnSpec",
    "DocumentTree",
    "PageGeometry",
    "Row",
    "RowKind",
    "Section",
    "Table",
    "TextBlock",
    "CompositionContext",
    "SectionSlot",
    "VariantTemplate",
    "compose",
    "FAAS_TEMPLATE",
    "compose_faas_document",
    "TAX_DECLARATION_TEMPLATE",
    "TaxDeclarationForm",
    "compose_tax_declaration_document",
]
