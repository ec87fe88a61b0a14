"""Printing module - receipt bitmap layout and print orchestration."""

from printserver.printing.images import ImageLoader, ImageUnavailable, LoadedImage
from printserver.printing.layout import (
    DEFAULT_LAYOUT,
    LayoutSettings,
    RenderedReceipt,
    estimate_canvas_height,
    render_receipt,
)
from printserver.printing.models import (
    Customer,
    LineItem,
    PrinterTarget,
    PrinterType,
    ReceiptData,
    resolve_printer_target,
)

__all__ = [
    # Images
    "ImageLoader",
    "LoadedImage",
    "ImageUnavailable",
    # Layout
    "DEFAULT_LAYOUT",
    "LayoutSettings",
    "RenderedReceipt",
    "estimate_canvas_height",
    "render_receipt",
    # Models
    "Customer",
    "LineItem",
    "PrinterTarget",
    "PrinterType",
    "ReceiptData",
    "resolve_printer_target",
]
