"""TCP (raw port 9100/9600 style) printer interface.

Most Ethernet receipt printers accept raw ESC/POS on a plain TCP socket.
One connection is opened per job and closed once everything is written.
"""

import asyncio
import logging

from printserver.errors import PrinterError
from printserver.hardware.printer.base import PrinterInterface

logger = logging.getLogger(__name__)


class NetworkInterface(PrinterInterface):
    """Sends jobs to host:port over TCP."""

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout: float = 5.0,
        write_timeout: float = 30.0,
        chunk_size: int = 4096,
    ):
        """Initialize the interface.

        Args:
            host: Printer IP address or hostname
            port: Raw printing port
            connect_timeout: Seconds to wait for the connection
            write_timeout: Seconds to wait for the job to drain
            chunk_size: Bytes written per drain
        """
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.write_timeout = write_timeout
        self.chunk_size = max(1, chunk_size)

    @property
    def description(self) -> str:
        return f"tcp://{self.host}:{self.port}"

    async def send(self, data: bytes) -> None:
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            raise PrinterError(f"Timed out connecting to {self.description}") from e
        except OSError as e:
            raise PrinterError(f"Cannot connect to {self.description}: {e}") from e

        try:
            await asyncio.wait_for(self._write(writer, data), timeout=self.write_timeout)
            logger.debug(f"Sent {len(data)} bytes to {self.description}")
        except asyncio.TimeoutError as e:
            raise PrinterError(f"Timed out writing to {self.description}") from e
        except OSError as e:
            raise PrinterError(f"Write to {self.description} failed: {e}") from e
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error closing {self.description}: {e}")

    async def _write(self, writer: asyncio.StreamWriter, data: bytes) -> None:
        # Send in chunks to avoid overrunning small printer buffers
        for i in range(0, len(data), self.chunk_size):
            writer.write(data[i:i + self.chunk_size])
            await writer.drain()
