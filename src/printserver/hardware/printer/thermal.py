"""ESC/POS thermal receipt printer.

Commands are buffered and sent as a single job on execute(), so a
receipt is either delivered whole or not at all.

Paper: 80mm (~576 dots at 203 DPI); receipts are rendered 550 dots wide.
"""

import asyncio
import logging
from collections import deque
from io import BytesIO
from typing import Deque, Optional

from PIL import Image

from printserver.hardware.printer.base import PrinterInterface
from printserver.hardware.printer.network import NetworkInterface
from printserver.hardware.printer.spooler import SpoolerInterface
from printserver.hardware.printer import escpos
from printserver.printing.models import PrinterTarget, PrinterType

logger = logging.getLogger(__name__)


class ThermalPrinter:
    """Buffered ESC/POS printer bound to one interface."""

    def __init__(self, interface: PrinterInterface):
        self.interface = interface
        self._buffer = bytearray(escpos.cmd_init())

    @property
    def buffer(self) -> bytes:
        return bytes(self._buffer)

    async def print_image(self, png_data: bytes) -> None:
        """Queue a raster image.

        Args:
            png_data: Encoded image (PNG or any format Pillow reads)
        """
        raster = await asyncio.to_thread(_encode_raster, png_data)
        self._buffer.extend(raster)

    def cut(self, partial: bool = False) -> None:
        """Feed past the tear bar and queue a paper cut."""
        self._buffer.extend(escpos.cmd_feed(3))
        self._buffer.extend(escpos.cmd_cut(partial))

    async def execute(self) -> None:
        """Send the buffered job and start a new one."""
        data = bytes(self._buffer)
        await self.interface.send(data)
        logger.info(f"Sent {len(data)} bytes to {self.interface.description}")
        self._buffer = bytearray(escpos.cmd_init())


def _encode_raster(png_data: bytes) -> bytes:
    with Image.open(BytesIO(png_data)) as img:
        return escpos.raster_image(img)


class MockInterface(PrinterInterface):
    """Mock printer for testing and simulator.

    Keeps the most recent jobs in memory instead of sending them.
    """

    def __init__(self, name: str = "mock", max_jobs: int = 16):
        self.name = name
        self.jobs: Deque[bytes] = deque(maxlen=max(1, max_jobs))

    @property
    def last_job(self) -> Optional[bytes]:
        return self.jobs[-1] if self.jobs else None

    @property
    def description(self) -> str:
        return f"mock://{self.name}"

    async def send(self, data: bytes) -> None:
        self.jobs.append(data)
        logger.info(f"=== MOCK PRINT ({len(data)} bytes) -> {self.name} ===")


def create_interface(
    target: PrinterTarget,
    connect_timeout: float = 5.0,
    write_timeout: float = 30.0,
    chunk_size: int = 4096,
) -> PrinterInterface:
    """Build the transport for a resolved target."""
    if target.type is PrinterType.SPOOLER:
        return SpoolerInterface(target.device_name)
    return NetworkInterface(
        target.host,
        target.port,
        connect_timeout=connect_timeout,
        write_timeout=write_timeout,
        chunk_size=chunk_size,
    )
