"""
Style definitions for composed documents.

Cells and text blocks in the document tree carry a short style tag
("title", "label", "amount", ...). This module maps each tag to a ReportLab
ParagraphStyle so the rendering backend receives concrete fonts, sizes,
alignment and colours alongside the tree.
"""

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle, StyleSheet1, getSampleStyleSheet


# =============================================================================
# Color Palette - black on white, as printed by the assessor's office
# =============================================================================

class Palette:
    """Print palette for the paper forms."""
    BLACK = colors.black
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    BORDER = colors.Color(0.1, 0.1, 0.1)
    WHITE = colors.white


ALIGNMENTS = {
    TA_LEFT: "left",
    TA_CENTER: "center",
    TA_RIGHT: "right",
    TA_JUSTIFY: "justify",
}

# Style tag -> ParagraphStyle name
STYLE_TAGS = {
    "title": "FormTitle",
    "subtitle": "FormSubtitle",
    "section": "SectionTitle",
    "label": "FieldLabel",
    "cell": "CellText",
    "value": "FieldValue",
    "amount": "CellAmount",
    "center": "CellCenter",
    "header": "ColumnHeader",
    "total": "TotalRow",
    "caption": "FieldCaption",
    "signature": "SignatureName",
    "body": "BodyText",
    "note": "FormNote",
}


def get_document_styles() -> StyleSheet1:
    """
    Create paragraph styles for the FAAS and Tax Declaration forms.
    Returns a StyleSheet with one custom style per style tag.
    """
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='FormTitle',
        parent=styles['Normal'],
        fontName='Helvetica-Bold',
        fontSize=14,
        leading=17,
        alignment=TA_CENTER,
        textColor=Palette.BLACK,
        spaceAfter=12,
    ))

    styles.add(ParagraphStyle(
        name='FormSubtitle',
        parent=styles['Normal'],
        fontName='Helvetica',
        fontSize=10,
        leading=12,
        alignment=TA_CENTER,
        textColor=Palette.BLACK,
    ))

    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontName='Helvetica-Bold',
        fontSize=10,
        leading=12,
        alignment=TA_LEFT,
        textColor=Palette.BLACK,
        spaceBefore=6,
        spaceAfter=4,
    ))

    styles.add(ParagraphStyle(
        name='FieldLabel',
        parent=styles['Normal'],
        fontName='Helvetica',
        fontSize=9,
        leading=11,
        alignment=TA_LEFT,
        textColor=Palette.CHARCOAL,
    ))

    styles.add(ParagraphStyle(
        name='CellText',
        parent=styles['Normal'],
        fontName='Helvetica',
        fontSize=9,
        leading=11,
        alignment=TA_LEFT,
        textColor=Palette.BLACK,
    ))

    styles.add(ParagraphStyle(
        name='FieldValue',
        parent=styles['CellText'],
        fontName='Helvetica-Bold',
        fontSize=10,
        leading=12,
    ))

    styles.add(ParagraphStyle(
        name='CellAmount',
        parent=styles['CellText'],
        alignment=TA_RIGHT,
    ))

    styles.add(ParagraphStyle(
        name='CellCenter',
        parent=styles['CellText'],
        alignment=TA_CENTER,
    ))

    styles.add(ParagraphStyle(
        name='ColumnHeader',
        parent=styles['CellText'],
        fontName='Helvetica-Bold',
        alignment=TA_CENTER,
    ))

    styles.add(ParagraphStyle(
        name='TotalRow',
        parent=styles['CellText'],
        fontName='Helvetica-Bold',
        alignment=TA_RIGHT,
    ))

    styles.add(ParagraphStyle(
        name='FieldCaption',
        parent=styles['Normal'],
        fontName='Helvetica-Oblique',
        fontSize=8,
        leading=10,
        alignment=TA_CENTER,
        textColor=Palette.GRAY,
    ))

    styles.add(ParagraphStyle(
        name='SignatureName',
        parent=styles['Normal'],
        fontName='Helvetica-Bold',
        fontSize=10,
        leading=12,
        alignment=TA_CENTER,
        textColor=Palette.BLACK,
    ))

    styles.add(ParagraphStyle(
        name='FormNote',
        parent=styles['Normal'],
        fontName='Helvetica',
        fontSize=8,
        leading=10,
        alignment=TA_JUSTIFY,
        textColor=Palette.BLACK,
    ))

    return styles


def _hex(color: colors.Color) -> str:
    return "#" + color.hexval()[2:]


def export_styles() -> dict:
    """Style tag -> plain style definition, for DocumentTree.to_dict()."""
    styles = get_document_styles()
    exported = {}
    for tag, name in STYLE_TAGS.items():
        style = styles[name]
        exported[tag] = {
            "fontName": style.fontName,
            "fontSize": style.fontSize,
            "leading": style.leading,
            "alignment": ALIGNMENTS.get(style.alignment, "left"),
            "color": _hex(style.textColor),
        }
    exported["border"] = {"color": _hex(Palette.BORDER), "width": 0.5}
    return exported
