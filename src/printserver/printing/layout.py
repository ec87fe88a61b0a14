"""Layout engine for the bilingual tax invoice bitmap.

The receipt is drawn top to bottom on a fixed-width canvas whose height
is estimated up front (estimate_canvas_height). Each section is a
function (canvas, y, context) -> y; draw_receipt threads the vertical
cursor through SECTIONS in order and returns the height actually used.

Text y coordinates are baselines, matching how the POS front end
previews the same layout.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Callable, Optional, Tuple

from PIL import Image, ImageDraw

from printserver.printing.images import ImageResult, LoadedImage
from printserver.printing.models import ReceiptData
from printserver.printing.text import FontBook, shape_text, wrap_text

logger = logging.getLogger(__name__)


class Alignment(Enum):
    """Horizontal anchor of a text draw at its x coordinate."""

    LEFT = "ls"
    CENTER = "ms"
    RIGHT = "rs"


@dataclass(frozen=True)
class LayoutSettings:
    """Pixel constants for one paper size (80mm, 203 dpi by default)."""

    canvas_width: int = 550
    line_height: int = 35
    small_font_size: int = 24
    medium_font_size: int = 26
    large_font_size: int = 30
    header_font_size: int = 34
    padding_x: int = 10
    logo_height: int = 300
    qr_code_size: int = 260

    # Height estimation
    base_height: int = 1300
    logo_block_height: int = 350
    qr_block_height: int = 250
    change_line_height: int = 40
    bank_line_height: int = 25
    customer_line_height: int = 30
    item_height: int = 115

    band_fill: str = "#cccccc"
    payment_fill: str = "#eeeeee"

    @property
    def address_font_size(self) -> int:
        return self.small_font_size - 2

    @property
    def content_width(self) -> int:
        return self.canvas_width - self.padding_x * 2


DEFAULT_LAYOUT = LayoutSettings()


def estimate_canvas_height(
    data: ReceiptData,
    logo: ImageResult,
    qr_code: ImageResult,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> int:
    """Closed-form canvas height, computed before anything is drawn.

    Items add a flat increment regardless of how their names wrap.
    Customer sub-fields count only when the customer name is present.
    """
    height = settings.base_height

    if not isinstance(logo, LoadedImage):
        height -= settings.logo_block_height
    if not isinstance(qr_code, LoadedImage):
        height -= settings.qr_block_height

    if data.has_change:
        height += settings.change_line_height

    height += len(data.bank_details) * settings.bank_line_height

    customer = data.customer
    if customer.name:
        height += settings.customer_line_height
        for value in (customer.vat_no, customer.phone, customer.address):
            if value:
                height += settings.customer_line_height

    height += len(data.items) * settings.item_height
    return height


class ReceiptCanvas:
    """Drawing surface for one receipt."""

    def __init__(self, height: int, settings: LayoutSettings = DEFAULT_LAYOUT, fonts: Optional[FontBook] = None):
        self.settings = settings
        self.fonts = fonts or FontBook()
        self.image = Image.new("RGB", (settings.canvas_width, height), "white")
        self._draw = ImageDraw.Draw(self.image)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def text(
        self,
        x: float,
        y: float,
        text: str,
        size: int,
        align: Alignment = Alignment.CENTER,
        bold: bool = False,
    ) -> None:
        """Draw one line of text with its baseline at y."""
        if not text:
            return
        font = self.fonts.get(size, bold)
        self._draw.text((x, y), shape_text(text), fill="black", font=font, anchor=align.value)

    def measure(self, text: str, size: int, bold: bool = False) -> float:
        return self.fonts.measure(text, size, bold)

    def band(self, y: float, height: float, fill: str) -> None:
        """Full-width shaded bar."""
        self._draw.rectangle((0, y, self.width, y + height), fill=fill)

    def rule(self, y: float) -> None:
        """Full-width 1px separator."""
        self._draw.line((0, y, self.width, y), fill="black", width=1)

    def paste(self, image: Image.Image, x: float, y: float, width: float, height: float) -> None:
        """Scale image to (width, height) and paste at (x, y)."""
        size = (max(1, round(width)), max(1, round(height)))
        if image.size != size:
            image = image.resize(size, Image.Resampling.LANCZOS)
        self.image.paste(image, (round(x), round(y)))


@dataclass(frozen=True)
class ReceiptContext:
    """Inputs shared by every section."""

    data: ReceiptData
    logo: ImageResult
    qr_code: ImageResult


Section = Callable[[ReceiptCanvas, float, ReceiptContext], float]


# =============================================================================
# ROW HELPERS
# =============================================================================

def triple_column(
    canvas: ReceiptCanvas,
    y: float,
    left: str,
    center: str,
    right: str,
    size: Optional[int] = None,
    bold: bool = False,
) -> None:
    """Label / value / Arabic label row on equal thirds."""
    size = size or canvas.settings.small_font_size
    col_width = canvas.settings.canvas_width / 3
    canvas.text(col_width - 5, y, left, size, Alignment.RIGHT, bold)
    canvas.text(col_width * 1.5, y, center, size, Alignment.CENTER, bold)
    canvas.text(col_width * 2 + 5, y, right, size, Alignment.LEFT, bold)


def proportional_triple_column(
    canvas: ReceiptCanvas,
    y: float,
    left: str,
    center: str,
    right: str,
    size: Optional[int] = None,
) -> None:
    """Label / value / Arabic label row on a 28/44/28 split."""
    size = size or canvas.settings.small_font_size
    total = canvas.settings.canvas_width
    left_width = total * 0.28
    center_width = total * 0.44
    canvas.text(left_width - 5, y, left, size, Alignment.RIGHT)
    canvas.text(left_width + center_width / 2, y, center, size, Alignment.CENTER)
    canvas.text(left_width + center_width + 5, y, right, size, Alignment.LEFT)


def draw_wrapped(canvas: ReceiptCanvas, y: float, text: str) -> float:
    """Centered free text wrapped to the content width.

    Blank text still takes one (empty) line.
    """
    s = canvas.settings
    size = s.address_font_size
    lines = wrap_text(text, s.content_width, lambda t: canvas.measure(t, size)) or [""]
    for line in lines:
        y += s.line_height - 5
        canvas.text(s.canvas_width / 2, y, line, size)
    return y


def draw_caption_band(canvas: ReceiptCanvas, y: float, caption: str) -> float:
    """Shaded bar with a bold caption; returns the caption baseline."""
    s = canvas.settings
    canvas.band(y, s.line_height, s.band_fill)
    y += s.line_height / 2
    canvas.text(s.canvas_width / 2, y, caption, s.address_font_size, bold=True)
    return y


# =============================================================================
# SECTIONS
# =============================================================================

def draw_logo(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    logo = ctx.logo
    if not isinstance(logo, LoadedImage):
        return y
    s = canvas.settings
    width = logo.width * (s.logo_height / logo.height)
    canvas.paste(logo.image, (s.canvas_width - width) / 2, y, width, s.logo_height)
    return y + s.logo_height + 5


def draw_header(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    s = canvas.settings
    for name in (ctx.data.company_name_arabic, ctx.data.company_name):
        y += s.line_height
        canvas.text(s.canvas_width / 2, y, name, s.header_font_size)
    return y + 10


def draw_identity(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    data = ctx.data
    rows = (
        ("VAT NO", data.vat_no, "الرقم الضريبي"),
        ("CR NO", data.cr_no, "رقم السجل"),
        ("PHONE NO", data.phone_no, "رقم الهاتف"),
    )
    for left, center, right in rows:
        y += canvas.settings.line_height
        triple_column(canvas, y, left, center, right)
    return y


def draw_address(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    return draw_wrapped(canvas, y, ctx.data.address) + 15


def draw_invoice_label(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    return draw_caption_band(canvas, y, "SIMPLIFIED TAX INVOICE / فاتورة ضريبية مبسطة") + 15


def draw_invoice_meta(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    y += canvas.settings.line_height
    triple_column(canvas, y, "Invoice No:", ctx.data.invoice_no, "رقم الفاتورة")
    y += canvas.settings.line_height
    triple_column(canvas, y, "Date:", ctx.data.date, "تاريخ الفاتورة")
    return y + 20


def draw_customer(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    customer = ctx.data.customer
    if not customer.name:
        return y

    s = canvas.settings
    y = draw_caption_band(canvas, y, "Customer Information / معلومات العملاء")

    y += s.line_height
    proportional_triple_column(canvas, y, "Name", customer.name, "اسم")
    if customer.vat_no:
        y += s.line_height
        proportional_triple_column(canvas, y, "VAT No", customer.vat_no, "الرقم الضريبي")
    if customer.phone:
        y += s.line_height
        proportional_triple_column(canvas, y, "Phone No", customer.phone, "رقم الهاتف")
    if customer.address:
        y = draw_wrapped(canvas, y, customer.address)
    return y


def draw_separator(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    y += 15
    canvas.rule(y)
    return y


def _item_columns(s: LayoutSettings) -> Tuple[float, float, float]:
    """Right edges of the price, qty and total columns."""
    return s.canvas_width * 0.55, s.canvas_width * 0.75, s.canvas_width - s.padding_x


def draw_item_header(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    s = canvas.settings
    size = s.medium_font_size
    baseline = y + s.line_height
    price_x, qty_x, total_x = _item_columns(s)

    canvas.text(s.padding_x, baseline, "Product", size, Alignment.LEFT, bold=True)
    canvas.text(price_x, baseline, "Price", size, Alignment.RIGHT, bold=True)
    canvas.text(qty_x, baseline, "Qty", size, Alignment.RIGHT, bold=True)
    canvas.text(total_x, baseline, "Total", size, Alignment.RIGHT, bold=True)

    y = baseline + 5
    canvas.rule(y)
    return y


def draw_items(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    s = canvas.settings
    size = s.small_font_size
    price_x, qty_x, total_x = _item_columns(s)

    for number, item in enumerate(ctx.data.items, start=1):
        y += s.line_height
        canvas.text(total_x, y, item.name_arabic, size, Alignment.RIGHT)
        y += s.line_height
        canvas.text(s.padding_x, y, f"{number}. {item.name_english}", size, Alignment.LEFT)
        y += s.line_height
        canvas.text(price_x, y, item.price, size, Alignment.RIGHT)
        canvas.text(qty_x, y, item.qty, size, Alignment.RIGHT)
        canvas.text(total_x, y, item.total, size, Alignment.RIGHT)
        y += 10
    return y


def draw_totals(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    data = ctx.data
    rows = (
        ("Total", data.sub_total, "الإجمالي بدون ضريبة"),
        ("Tax", data.tax, "قيمة الضريبة"),
        ("Grand Total", data.grand_total, "المبلغ الإجمالي"),
    )
    for left, center, right in rows:
        y += canvas.settings.line_height
        triple_column(canvas, y, left, center, right, bold=True)
    return y


def draw_payment(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    s = canvas.settings
    data = ctx.data
    size = s.small_font_size

    y += 10
    canvas.band(y, s.line_height + 5, s.payment_fill)
    baseline = y + s.line_height / 2 + 5
    canvas.text(s.padding_x, baseline, f"Paid by: {data.payment_method}", size, Alignment.LEFT)
    canvas.text(s.canvas_width - s.padding_x, baseline, f"Amount: {data.paid_amount}", size, Alignment.RIGHT)

    if data.has_change:
        y += s.line_height
        canvas.text(s.padding_x, y + s.line_height / 2 + 5, f"Change: {data.change_amount}", size, Alignment.LEFT)

    return y + s.line_height + 15


def draw_qr_code(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    qr_code = ctx.qr_code
    if not isinstance(qr_code, LoadedImage):
        return y
    s = canvas.settings
    canvas.paste(qr_code.image, (s.canvas_width - s.qr_code_size) / 2, y, s.qr_code_size, s.qr_code_size)
    return y + s.qr_code_size + 10


def draw_footer(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    s = canvas.settings
    y += s.line_height
    canvas.text(s.canvas_width / 2, y, ctx.data.footer_text, s.small_font_size)
    return y + s.line_height


def draw_bank_details(canvas: ReceiptCanvas, y: float, ctx: ReceiptContext) -> float:
    s = canvas.settings
    for line in ctx.data.bank_details:
        y += s.small_font_size
        canvas.text(s.canvas_width / 2, y, line, s.address_font_size)
    return y


SECTIONS: Tuple[Section, ...] = (
    draw_logo,
    draw_header,
    draw_identity,
    draw_address,
    draw_invoice_label,
    draw_invoice_meta,
    draw_customer,
    draw_separator,
    draw_item_header,
    draw_items,
    draw_totals,
    draw_payment,
    draw_qr_code,
    draw_footer,
    draw_bank_details,
)


def draw_receipt(canvas: ReceiptCanvas, ctx: ReceiptContext) -> float:
    """Draw every section in order; returns the used height."""
    y = 0.0
    for section in SECTIONS:
        y = section(canvas, y, ctx)
    return y


# =============================================================================
# RENDERING
# =============================================================================

@dataclass
class RenderedReceipt:
    """A receipt bitmap ready for the printer."""

    image: Image.Image
    used_height: float

    @property
    def canvas_height(self) -> int:
        return self.image.height

    @property
    def overflowed(self) -> bool:
        return self.used_height > self.canvas_height

    def to_png(self) -> bytes:
        buf = BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()


def render_receipt(
    data: ReceiptData,
    logo: ImageResult,
    qr_code: ImageResult,
    settings: LayoutSettings = DEFAULT_LAYOUT,
    fonts: Optional[FontBook] = None,
) -> RenderedReceipt:
    """Estimate the height, draw the receipt and return the bitmap."""
    height = estimate_canvas_height(data, logo, qr_code, settings)
    canvas = ReceiptCanvas(height, settings, fonts)
    used = draw_receipt(canvas, ReceiptContext(data=data, logo=logo, qr_code=qr_code))

    receipt = RenderedReceipt(image=canvas.image, used_height=used)
    if receipt.overflowed:
        logger.warning(f"Receipt content ({used:.0f}px) exceeds canvas height ({height}px)")
    else:
        logger.debug(f"Receipt rendered: {used:.0f}/{height}px used")
    return receipt
