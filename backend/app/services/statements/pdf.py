# app/services/statements/pdf.py
"""
Year-end giving statement rendering.

Rendering happens in two steps:

1. `build_statement_document` turns church/household/giving data into a
   StatementDocument: every string that will appear on the page, in order.
   This is what tests assert against.
2. `render_statement_pdf` lays that document out with ReportLab platypus
   (US Letter, repeating table header across pages). The document is built in
   invariant mode so identical input gives identical bytes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.services.statements.types import ChurchInfo, GivingSummary, HouseholdInfo

TITLE = "DONOR CONTRIBUTION STATEMENT"
NO_GOODS_LINE = (
    "No goods or services were provided in exchange for your contributions, "
    "except for intangible religious benefits."
)
GOODS_PROVIDED_LINE = (
    "Goods or services were provided in exchange for your contributions. "
    "Please see the details above for the fair market value of items received."
)
RETAIN_LINE = "Please retain this statement for your tax records."


class StatementRenderError(Exception):
    """PDF generation failed for one household."""

    def __init__(self, household_id: str, message: str):
        super().__init__(f"Failed to render statement for household {household_id}: {message}")
        self.household_id = household_id


def format_currency(amount: Decimal) -> str:
    amount = Decimal(amount).quantize(Decimal("0.01"))
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"


def format_date(d: date) -> str:
    return d.strftime("%m/%d/%Y")


def _city_line(city: Optional[str], state: Optional[str], zip_: Optional[str]) -> Optional[str]:
    parts = [p for p in (city, state, zip_) if p]
    return ", ".join(parts) if parts else None


def default_disclaimer(church: ChurchInfo) -> List[str]:
    paragraphs: List[str] = []
    if church.is_501c3 is not False:
        first = (
            f"This letter acknowledges that {church.name} is a tax-exempt organization "
            f"under Section 501(c)(3) of the Internal Revenue Code"
        )
        if church.tax_id:
            first += f". Our Employer Identification Number (EIN) is {church.tax_id}"
        paragraphs.append(first + ".")
    else:
        paragraphs.append(f"This letter acknowledges contributions received by {church.name}.")

    if church.goods_services_provided:
        paragraphs.append(church.goods_services_statement or GOODS_PROVIDED_LINE)
    else:
        paragraphs.append(NO_GOODS_LINE)
    paragraphs.append(RETAIN_LINE)
    return paragraphs


@dataclass
class StatementDocument:
    letterhead: List[str]
    title: str
    info: List[str]
    recipient: List[str]
    category_rows: List[Tuple[str, str]]
    total_row: Tuple[str, str]
    item_rows: List[Tuple[str, str, str]]
    disclaimer: List[str]
    footer: str
    statement_number: Optional[str] = None

    def lines(self) -> List[str]:
        """Flattened text in page order."""
        out: List[str] = list(self.letterhead)
        out.append(self.title)
        out.extend(self.info)
        out.append("Prepared For:")
        out.extend(self.recipient)
        out.append("Contribution Summary by Category")
        out.extend(f"{name} {amt}" for name, amt in self.category_rows)
        out.append(f"{self.total_row[0]} {self.total_row[1]}")
        out.append("Detailed Contributions")
        out.extend(" ".join(r) for r in self.item_rows)
        out.extend(self.disclaimer)
        out.append(self.footer)
        return out

    def text(self) -> str:
        return "\n".join(self.lines())


def build_statement_document(
    *,
    church: ChurchInfo,
    household: HouseholdInfo,
    year: int,
    start_date: date,
    end_date: date,
    summary: GivingSummary,
    statement_number: Optional[str],
    generated_on: Optional[date] = None,
) -> StatementDocument:
    generated_on = generated_on or date.today()

    letterhead = [church.name]
    if church.address:
        letterhead.append(church.address)
    city = _city_line(church.city, church.state, church.zip)
    if city:
        letterhead.append(city)
    if church.phone:
        letterhead.append(f"Phone: {church.phone}")
    if church.email:
        letterhead.append(f"Email: {church.email}")
    if church.tax_id:
        letterhead.append(f"EIN: {church.tax_id}")
    if church.is_501c3:
        letterhead.append("A 501(c)(3) tax-exempt organization")

    info = []
    if statement_number:
        info.append(f"Statement Number: {statement_number}")
    info.append(f"Tax Year: {year}")
    info.append(f"Period: {format_date(start_date)} - {format_date(end_date)}")
    info.append(f"Generated: {format_date(generated_on)}")

    recipient = [household.name or "Household"]
    for line in (household.address1, household.address2):
        if line:
            recipient.append(line)
    hcity = _city_line(household.city, household.state, household.zip)
    if hcity:
        recipient.append(hcity)

    if church.tax_statement_disclaimer and church.tax_statement_disclaimer.strip():
        disclaimer = [p.strip() for p in church.tax_statement_disclaimer.strip().split("\n") if p.strip()]
    else:
        disclaimer = default_disclaimer(church)

    return StatementDocument(
        letterhead=letterhead,
        title=TITLE,
        info=info,
        recipient=recipient,
        category_rows=[(c.category_name, format_currency(c.total)) for c in summary.category_totals],
        total_row=("TOTAL CONTRIBUTIONS", format_currency(summary.total)),
        item_rows=[
            (format_date(ln.date_given), ln.category_name, format_currency(ln.amount))
            for ln in summary.items
        ],
        disclaimer=disclaimer,
        footer=f"{church.name} - Contribution statement for {year}",
        statement_number=statement_number,
    )


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="ChurchName", parent=styles["Heading1"], fontSize=16, spaceAfter=4))
    styles.add(ParagraphStyle(name="Letterhead", parent=styles["Normal"], fontSize=9, leading=11))
    styles.add(ParagraphStyle(
        name="StatementTitle", parent=styles["Heading2"], alignment=TA_CENTER, spaceBefore=12, spaceAfter=6,
    ))
    styles.add(ParagraphStyle(name="Centered", parent=styles["Normal"], alignment=TA_CENTER, fontSize=9))
    styles.add(ParagraphStyle(
        name="SectionHeading", parent=styles["Heading4"], backColor=colors.HexColor("#f5f5f5"),
        spaceBefore=10, spaceAfter=4,
    ))
    styles.add(ParagraphStyle(name="Disclaimer", parent=styles["Normal"], fontSize=8, leading=11, spaceAfter=4))
    return styles


def _footer_callback(doc_model: StatementDocument):
    def _draw(canv, doc):
        canv.saveState()
        canv.setFont("Helvetica", 7)
        canv.setFillColor(colors.grey)
        canv.drawCentredString(letter[0] / 2.0, 0.5 * inch, doc_model.footer)
        right = f"Page {doc.page}"
        if doc_model.statement_number:
            right = f"{doc_model.statement_number}  |  {right}"
        canv.drawRightString(letter[0] - 0.75 * inch, 0.5 * inch, right)
        canv.restoreState()
    return _draw


def _layout(doc_model: StatementDocument) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.9 * inch,
        title=doc_model.title,
        author=doc_model.letterhead[0],
        invariant=1,
    )
    styles = _styles()
    p = lambda s, style: Paragraph(escape(s), styles[style])  # noqa: E731

    elements = [p(doc_model.letterhead[0], "ChurchName")]
    elements += [p(line, "Letterhead") for line in doc_model.letterhead[1:]]
    elements.append(p(doc_model.title, "StatementTitle"))
    elements += [p(line, "Centered") for line in doc_model.info]

    elements.append(p("Prepared For:", "SectionHeading"))
    elements += [p(line, "Normal") for line in doc_model.recipient]

    elements.append(p("Contribution Summary by Category", "SectionHeading"))
    summary_rows = [list(r) for r in doc_model.category_rows] + [list(doc_model.total_row)]
    summary_table = Table(summary_rows, colWidths=[4.5 * inch, 2.0 * inch])
    summary_table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEABOVE", (0, -1), (-1, -1), 0.75, colors.black),
    ]))
    elements.append(summary_table)

    elements.append(p("Detailed Contributions", "SectionHeading"))
    item_rows = [["Date", "Category", "Amount"]] + [list(r) for r in doc_model.item_rows]
    item_rows.append(["", doc_model.total_row[0], doc_model.total_row[1]])
    items_table = Table(item_rows, colWidths=[1.3 * inch, 3.7 * inch, 1.5 * inch], repeatRows=1)
    items_table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (2, 0), (2, -1), "RIGHT"),
        ("LINEBELOW", (0, 0), (-1, 0), 0.75, colors.black),
        ("LINEBELOW", (0, 1), (-1, -2), 0.25, colors.HexColor("#dddddd")),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEABOVE", (0, -1), (-1, -1), 0.75, colors.black),
    ]))
    elements.append(items_table)

    elements.append(Spacer(1, 0.25 * inch))
    elements += [p(par, "Disclaimer") for par in doc_model.disclaimer]

    callback = _footer_callback(doc_model)
    doc.build(elements, onFirstPage=callback, onLaterPages=callback)
    return buffer.getvalue()


def render_statement_pdf(
    *,
    church: ChurchInfo,
    household: HouseholdInfo,
    year: int,
    start_date: date,
    end_date: date,
    summary: GivingSummary,
    statement_number: Optional[str],
    generated_on: Optional[date] = None,
) -> bytes:
    """Render the statement PDF; any failure surfaces as StatementRenderError."""
    try:
        doc_model = build_statement_document(
            church=church,
            household=household,
            year=year,
            start_date=start_date,
            end_date=end_date,
            summary=summary,
            statement_number=statement_number,
            generated_on=generated_on,
        )
        return _layout(doc_model)
    except StatementRenderError:
        raise
    except Exception as exc:
        raise StatementRenderError(household.id, str(exc)) from exc
