"""Print manager: one receipt request from JSON payload to paper."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from config.settings import Settings
from printserver.hardware.printer import MockInterface, PrinterInterface, ThermalPrinter, create_interface
from printserver.printing.images import ImageLoader
from printserver.printing.layout import DEFAULT_LAYOUT, LayoutSettings, render_receipt
from printserver.printing.models import PrinterTarget, ReceiptData, resolve_printer_target
from printserver.printing.text import FontBook

logger = logging.getLogger(__name__)


class PrintStatus(Enum):
    """Outcome of a print request."""

    PRINTED = "printed"
    CONFIG_ERROR = "config_error"
    FAILED = "failed"


@dataclass
class PrintResult:
    """Response body plus outcome for the HTTP layer."""

    status: PrintStatus
    message: str
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is PrintStatus.PRINTED

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        else:
            body["data"] = self.data
        return body


InterfaceFactory = Callable[[PrinterTarget], PrinterInterface]


class PrintManager:
    """Renders and prints receipts, one independent job per request."""

    def __init__(
        self,
        settings: Settings,
        layout: LayoutSettings = DEFAULT_LAYOUT,
        fonts: Optional[FontBook] = None,
        image_loader: Optional[ImageLoader] = None,
        interface_factory: Optional[InterfaceFactory] = None,
    ) -> None:
        self._settings = settings
        self._layout = layout
        self._fonts = fonts or FontBook(settings.fonts.regular_path, settings.fonts.bold_path)
        self._loader = image_loader or ImageLoader(
            timeout=settings.images.fetch_timeout,
            max_bytes=settings.images.max_bytes,
        )
        self.mock_printer = MockInterface("simulator", max_jobs=1)
        self._interface_factory = interface_factory or self._default_interface

    def _default_interface(self, target: PrinterTarget) -> PrinterInterface:
        if self._settings.is_simulator:
            return self.mock_printer
        printer = self._settings.printer
        return create_interface(
            target,
            connect_timeout=printer.connect_timeout,
            write_timeout=printer.write_timeout,
            chunk_size=printer.chunk_size,
        )

    async def handle(self, payload: Dict[str, Any]) -> PrintResult:
        """Handle one print request.

        Args:
            payload: Request body with printerDetails and receiptData

        Returns:
            PrintResult; never raises
        """
        details = payload.get("printerDetails")
        target = resolve_printer_target(details, self._settings.printer.default_network_port)
        if target is None:
            logger.error(f"Printer not connected: {details}")
            return PrintResult(PrintStatus.CONFIG_ERROR, "printer type not defined!", data=details)

        try:
            await self._print(target, payload.get("receiptData"))
        except Exception as exc:
            logger.exception(f"Print failed: {exc}")
            return PrintResult(PrintStatus.FAILED, "Print failed!", error=str(exc) or type(exc).__name__)

        logger.info("Print command sent successfully!")
        return PrintResult(PrintStatus.PRINTED, "Print successful!", data=payload)

    async def _print(self, target: PrinterTarget, receipt_json: Any) -> None:
        if not isinstance(receipt_json, dict):
            raise ValueError("receiptData must be an object")
        data = ReceiptData.from_dict(receipt_json)

        printer = ThermalPrinter(self._interface_factory(target))
        logger.info(f"Printing invoice {data.invoice_no or '-'} to {printer.interface.description}")

        logo, qr_code = await self._loader.load_pair(data.logo, data.qr_code)

        receipt = await asyncio.to_thread(render_receipt, data, logo, qr_code, self._layout, self._fonts)
        png = receipt.to_png()
        if self._settings.preview_path:
            await asyncio.to_thread(self._save_preview, png)

        await printer.print_image(png)
        printer.cut()
        await printer.execute()

    def _save_preview(self, png: bytes) -> None:
        directory = self._settings.preview_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"receipt_{datetime.now():%Y%m%d_%H%M%S_%f}.png"
        path.write_bytes(png)
        logger.debug(f"Receipt preview saved to {path}")
