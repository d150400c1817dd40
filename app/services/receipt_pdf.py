from __future__ import annotations

import functools
import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.core.errors import RenderError

BRAND_BLUE = colors.HexColor("#2563eb")
GREY = colors.HexColor("#666666")
PAID_GREEN = colors.HexColor("#22c55e")

MARGIN = 50
BOTTOM = 60
AMOUNT_RIGHT = A4[0] - MARGIN

ITEM_TYPE_LABELS = {
    "artisanat": "ARTISAN EXPERIENCE",
    "sejour": "STAY",
    "caravane": "CARAVANE",
}


@dataclass(frozen=True)
class ReceiptData:
    receipt_number: str
    transaction_id: str
    created_at: datetime
    customer_email: str
    customer_phone: str
    guests: int
    item_name: str
    item_type: str
    check_in: date
    check_out: date
    days: int
    special_requests: str | None
    item_price: Decimal
    subtotal: Decimal
    service_fee: Decimal
    taxes: Decimal
    total: Decimal
    currency: str
    payment_status: str

    @classmethod
    def from_records(cls, reservation, payment) -> "ReceiptData":
        return cls(
            receipt_number=payment.receipt_number,
            transaction_id=payment.transaction_id,
            created_at=payment.created_at or datetime.now(timezone.utc),
            customer_email=reservation.customer_email,
            customer_phone=reservation.customer_phone,
            guests=reservation.guests,
            item_name=reservation.item_name,
            item_type=reservation.item_type,
            check_in=reservation.check_in,
            check_out=reservation.check_out,
            days=reservation.days,
            special_requests=reservation.special_requests,
            item_price=reservation.item_price,
            subtotal=reservation.subtotal,
            service_fee=reservation.service_fee,
            taxes=reservation.taxes,
            # the payment row is the financial record; the receipt shows what was charged
            total=payment.amount,
            currency=payment.currency,
            payment_status=payment.status,
        )


def format_amount(amount: Decimal, currency: str) -> str:
    return f"{Decimal(amount):.2f} {currency}"


@functools.lru_cache(maxsize=None)
def _register_text_font(path: str) -> str:
    name = f"ReceiptText-{Path(path).stem}"
    pdfmetrics.registerFont(TTFont(name, path))
    return name


def text_font(text: str) -> str:
    """Font for customer-entered text.

    Helvetica covers cp1252 only; anything else (Arabic, Tifinagh) switches to
    the TTF at ``RECEIPT_FONT_PATH`` when one is configured. Glyphs are drawn in
    logical order; right-to-left shaping is not applied.
    """
    try:
        text.encode("cp1252")
        return "Helvetica"
    except UnicodeEncodeError:
        pass
    if not settings.RECEIPT_FONT_PATH:
        return "Helvetica"
    return _register_text_font(settings.RECEIPT_FONT_PATH)


class _Page:
    """Top-down writing cursor over a canvas that starts a new page when full."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        _, self.height = A4
        self.y = self.height - MARGIN

    def ensure(self, needed: float) -> None:
        if self.y - needed < BOTTOM:
            self.c.showPage()
            self.y = self.height - MARGIN

    def line(self, text: str, *, font: str = "Helvetica", size: int = 11, color=colors.black,
             x: float = MARGIN, gap: float | None = None) -> None:
        step = gap if gap is not None else size + 5
        self.ensure(step)
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        self.c.drawString(x, self.y, text)
        self.y -= step

    def centered(self, text: str, *, font: str, size: int, color=colors.black) -> None:
        step = size + 8
        self.ensure(step)
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        self.c.drawCentredString(A4[0] / 2, self.y, text)
        self.y -= step

    def amount_row(self, label: str, amount: str, *, font: str = "Helvetica", size: int = 11,
                   color=colors.black) -> None:
        step = size + 7
        self.ensure(step)
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        self.c.drawString(MARGIN, self.y, label)
        self.c.drawRightString(AMOUNT_RIGHT, self.y, amount)
        self.y -= step

    def rule(self, width: float = 1) -> None:
        self.ensure(12)
        self.c.setStrokeColor(BRAND_BLUE)
        self.c.setLineWidth(width)
        self.c.line(MARGIN, self.y, AMOUNT_RIGHT, self.y)
        self.y -= 14

    def section(self, title: str) -> None:
        self.y -= 6
        self.line(title, font="Helvetica-Bold", size=14, color=BRAND_BLUE, gap=20)

    def space(self, amount: float) -> None:
        self.y -= amount


def _draw_receipt(c: canvas.Canvas, r: ReceiptData) -> None:
    p = _Page(c)

    # Header
    p.centered("SAFARIA", font="Helvetica-Bold", size=32, color=BRAND_BLUE)
    p.centered("Discover Authentic Morocco", font="Helvetica", size=12, color=GREY)
    p.space(10)
    p.centered("Payment Receipt", font="Helvetica-Bold", size=22)
    p.space(4)
    p.line(f"Receipt #: {r.receipt_number}", size=10, color=GREY)
    p.line(f"Date: {r.created_at.strftime('%Y-%m-%d %H:%M UTC')}", size=10, color=GREY)
    p.line(f"Transaction ID: {r.transaction_id}", size=10, color=GREY)
    p.space(6)
    p.rule(2)

    p.section("Customer Information")
    p.line(f"Email: {r.customer_email}")
    p.line(f"Phone: {r.customer_phone}")
    p.line(f"Number of Guests: {r.guests}")

    p.section("Reservation Details")
    p.line(f"Item: {r.item_name}", font=text_font(r.item_name))
    p.line(f"Type: {ITEM_TYPE_LABELS.get(r.item_type, r.item_type.upper())}")
    p.line(f"Check-in: {r.check_in.isoformat()}")
    p.line(f"Check-out: {r.check_out.isoformat()}")
    p.line(f"Duration: {r.days} night(s)")

    if r.special_requests and r.special_requests.strip():
        p.section("Special Requests")
        font = text_font(r.special_requests)
        for chunk in simpleSplit(r.special_requests.strip(), font, 10, AMOUNT_RIGHT - MARGIN):
            p.line(chunk, font=font, size=10, color=GREY, gap=14)

    p.section("Price Breakdown")
    p.amount_row(f"{format_amount(r.item_price, r.currency)} x {r.days} night(s)",
                 format_amount(r.subtotal, r.currency))
    p.amount_row("Service Fee (10%)", format_amount(r.service_fee, r.currency))
    p.amount_row("Taxes (5%)", format_amount(r.taxes, r.currency))
    p.rule()
    p.amount_row("TOTAL", format_amount(r.total, r.currency), font="Helvetica-Bold", size=16, color=BRAND_BLUE)

    # Payment status badge
    p.space(10)
    p.ensure(40)
    status = (r.payment_status or "").upper()
    badge = PAID_GREEN if status == "PAID" else GREY
    c.setFillColor(badge)
    c.setStrokeColor(badge)
    c.roundRect(MARGIN, p.y - 30, 100, 30, 5, stroke=1, fill=1)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 12)
    c.drawCentredString(MARGIN + 50, p.y - 19, status)
    p.space(50)

    # Footer
    p.centered("Thank you for choosing SAFARIA!", font="Helvetica", size=9, color=GREY)
    p.centered("For any questions, contact us at: contact@safaria.ma", font="Helvetica", size=9, color=GREY)
    p.centered("www.safaria.ma | +212 123 456 789", font="Helvetica", size=9, color=GREY)


def render_receipt_pdf_bytes(receipt: ReceiptData) -> bytes:
    """Return the A4 receipt as PDF bytes. Pure function.

    Page streams are written uncompressed so receipt totals can be searched
    for in the raw bytes.
    """
    buf = io.BytesIO()
    try:
        c = canvas.Canvas(buf, pagesize=A4, pageCompression=0)
        c.setTitle(f"SAFARIA Receipt {receipt.receipt_number}")
        _draw_receipt(c, receipt)
        c.showPage()
        c.save()
    except (ValueError, TypeError, AttributeError, KeyError, TTFError, OSError) as e:
        raise RenderError(f"Could not render receipt {receipt.receipt_number}", detail=str(e)) from e
    return buf.getvalue()
