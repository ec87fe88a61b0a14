"""Request models for receipt printing.

The POS front end posts camelCase JSON. Parsing is lenient: missing
strings become "", numbers are printed as-is and non-list sequences
become empty, so the layout engine never has to validate its input.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


def _text(value: Any) -> str:
    """Normalize a JSON scalar to display text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class Customer:
    """Optional customer block of the invoice."""

    name: str = ""
    vat_no: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Customer":
        data = _mapping(data)
        return cls(
            name=_text(data.get("name")),
            vat_no=_text(data.get("vatNo")),
            phone=_text(data.get("phone")),
            address=_text(data.get("address")),
        )


@dataclass(frozen=True)
class LineItem:
    """A single product row."""

    name_english: str = ""
    name_arabic: str = ""
    price: str = ""
    qty: str = ""
    total: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "LineItem":
        data = _mapping(data)
        return cls(
            name_english=_text(data.get("nameEnglish")),
            name_arabic=_text(data.get("nameArabic")),
            price=_text(data.get("price")),
            qty=_text(data.get("qty")),
            total=_text(data.get("total")),
        )


@dataclass(frozen=True)
class ReceiptData:
    """Everything printed on one simplified tax invoice."""

    company_name: str = ""
    company_name_arabic: str = ""
    vat_no: str = ""
    cr_no: str = ""
    phone_no: str = ""
    address: str = ""
    invoice_no: str = ""
    date: str = ""
    customer: Customer = field(default_factory=Customer)
    items: Tuple[LineItem, ...] = ()
    sub_total: str = ""
    tax: str = ""
    grand_total: str = ""
    payment_method: str = ""
    paid_amount: str = ""
    change_amount: str = ""
    logo: str = ""
    qr_code: str = ""
    footer_text: str = ""
    bank_details: Tuple[str, ...] = ()

    @property
    def has_change(self) -> bool:
        """Any non-empty change amount is printed, including "0"."""
        return self.change_amount != ""

    @property
    def has_customer(self) -> bool:
        return bool(self.customer.name)

    @classmethod
    def from_dict(cls, data: Any) -> "ReceiptData":
        """Build receipt data from the `receiptData` JSON object."""
        data = _mapping(data)
        items = data.get("items")
        bank_details = data.get("bankDetails")
        return cls(
            company_name=_text(data.get("companyName")),
            company_name_arabic=_text(data.get("companyNameArabic")),
            vat_no=_text(data.get("vatNo")),
            cr_no=_text(data.get("crNo")),
            phone_no=_text(data.get("phoneNo")),
            address=_text(data.get("address")),
            invoice_no=_text(data.get("invoiceNo")),
            date=_text(data.get("date")),
            customer=Customer.from_dict(data.get("customer")),
            items=tuple(LineItem.from_dict(i) for i in items) if isinstance(items, list) else (),
            sub_total=_text(data.get("subTotal")),
            tax=_text(data.get("tax")),
            grand_total=_text(data.get("grandTotal")),
            payment_method=_text(data.get("paymentMethod")),
            paid_amount=_text(data.get("paidAmount")),
            change_amount=_text(data.get("changeAmount")),
            logo=_text(data.get("logo")),
            qr_code=_text(data.get("qrCode")),
            footer_text=_text(data.get("footerText")),
            bank_details=tuple(_text(b) for b in bank_details) if isinstance(bank_details, list) else (),
        )


class PrinterType(Enum):
    """How the printer is reached."""

    SPOOLER = "windows"
    NETWORK = "network"


@dataclass(frozen=True)
class PrinterTarget:
    """A resolved printer destination."""

    type: PrinterType
    device_name: str = ""
    host: str = ""
    port: int = 0

    @property
    def interface(self) -> str:
        """Human readable interface string, e.g. tcp://10.0.0.5:9600."""
        if self.type is PrinterType.SPOOLER:
            return f"//localhost/{self.device_name}"
        return f"tcp://{self.host}:{self.port}"


def resolve_printer_target(details: Any, default_port: int = 9600) -> Optional[PrinterTarget]:
    """Resolve `printerDetails` to a printer target.

    Returns None for any unrecognized or incomplete configuration
    (unknown type, missing device name or IP address).
    """
    details = _mapping(details)
    printer_type = details.get("type")

    if printer_type == PrinterType.SPOOLER.value:
        device_name = _text(details.get("deviceName")).strip()
        if device_name:
            return PrinterTarget(type=PrinterType.SPOOLER, device_name=device_name)

    elif printer_type == PrinterType.NETWORK.value:
        host = _text(details.get("ipAddress")).strip()
        if host:
            port = details.get("port")
            try:
                port = int(port) if port else default_port
            except (TypeError, ValueError):
                return None
            return PrinterTarget(type=PrinterType.NETWORK, host=host, port=port)

    return None
