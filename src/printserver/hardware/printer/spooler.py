"""Windows spooler printer interface.

Submits the job as a RAW document to a named print queue, bypassing
the driver's GDI rendering. Requires pywin32 (Windows only).
"""

import asyncio
import logging

from printserver.errors import PrinterError
from printserver.hardware.printer.base import PrinterInterface

logger = logging.getLogger(__name__)


class SpoolerInterface(PrinterInterface):
    """Sends jobs to a local print queue by name."""

    def __init__(self, printer_name: str, document_name: str = "Receipt"):
        self.printer_name = printer_name
        self.document_name = document_name

    @property
    def description(self) -> str:
        return f"//localhost/{self.printer_name}"

    async def send(self, data: bytes) -> None:
        # win32print calls block; keep them off the event loop
        await asyncio.to_thread(self._write_raw, data)

    def _write_raw(self, data: bytes) -> None:
        try:
            import win32print
        except ImportError as e:
            raise PrinterError(
                "Windows spooler printing requires pywin32: pip install pywin32"
            ) from e

        try:
            handle = win32print.OpenPrinter(self.printer_name)
        except Exception as e:
            raise PrinterError(f"Cannot open printer '{self.printer_name}': {e}") from e

        try:
            win32print.StartDocPrinter(handle, 1, (self.document_name, None, "RAW"))
            try:
                win32print.StartPagePrinter(handle)
                win32print.WritePrinter(handle, data)
                win32print.EndPagePrinter(handle)
            finally:
                win32print.EndDocPrinter(handle)
            logger.debug(f"Spooled {len(data)} bytes to {self.printer_name}")
        except Exception as e:
            raise PrinterError(f"Printing to '{self.printer_name}' failed: {e}") from e
        finally:
            win32print.ClosePrinter(handle)
