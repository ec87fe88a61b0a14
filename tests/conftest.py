"""Shared fixtures for the print server tests."""

import copy
from io import BytesIO
from typing import Any, Dict, List, Tuple

import pytest
from PIL import Image

from config.settings import Settings
from printserver.printing.layout import Alignment, ReceiptCanvas
from printserver.printing.text import FontBook

BASE_RECEIPT: Dict[str, Any] = {
    "companyName": "Al Noor Trading",
    "companyNameArabic": "شركة النور للتجارة",
    "vatNo": "300000000000003",
    "crNo": "1010101010",
    "phoneNo": "0500000000",
    "address": "Riyadh",
    "invoiceNo": "INV-1001",
    "date": "2024-05-01 10:30",
    "customer": {},
    "items": [],
    "subTotal": "100.00",
    "tax": "15.00",
    "grandTotal": "115.00",
    "paymentMethod": "Cash",
    "paidAmount": "115.00",
    "changeAmount": "",
    "logo": "",
    "qrCode": "",
    "footerText": "Thank you for your visit",
    "bankDetails": [],
}

ITEM: Dict[str, Any] = {
    "nameEnglish": "Dates 1kg",
    "nameArabic": "تمر ١ كجم",
    "price": "40.00",
    "qty": "2",
    "total": "80.00",
}


@pytest.fixture
def receipt_json() -> Dict[str, Any]:
    """Minimal receipt: no images, no customer, no change, no items."""
    return copy.deepcopy(BASE_RECEIPT)


@pytest.fixture
def item_json() -> Dict[str, Any]:
    return dict(ITEM)


@pytest.fixture(scope="session")
def fonts() -> FontBook:
    return FontBook()


@pytest.fixture
def settings() -> Settings:
    return Settings(env="simulator", _env_file=None)


def png_bytes(size: Tuple[int, int] = (40, 20), color: str = "black") -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class RecordingCanvas(ReceiptCanvas):
    """Canvas that remembers what was drawn where."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.texts: List[Tuple[str, float, float, Alignment, bool]] = []
        self.pastes: List[Tuple[float, float, float, float]] = []

    def text(self, x, y, text, size, align=Alignment.CENTER, bold=False):
        self.texts.append((text, x, y, align, bold))
        super().text(x, y, text, size, align, bold)

    def paste(self, image, x, y, width, height):
        self.pastes.append((x, y, width, height))
        super().paste(image, x, y, width, height)

    def drawn(self) -> List[str]:
        return [t[0] for t in self.texts]

    def find(self, prefix: str) -> Tuple[str, float, float, Alignment, bool]:
        for entry in self.texts:
            if entry[0].startswith(prefix):
                return entry
        raise AssertionError(f"{prefix!r} was not drawn")
