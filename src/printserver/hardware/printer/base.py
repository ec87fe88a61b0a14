"""
Abstract base class for printer transports.
"""

from abc import ABC, abstractmethod


class PrinterInterface(ABC):
    """A way of delivering raw ESC/POS bytes to a printer."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Interface string for logs (e.g. tcp://10.0.0.5:9600)."""
        pass

    @abstractmethod
    async def send(self, data: bytes) -> None:
        """Deliver one complete job.

        Raises:
            PrinterError: If the printer cannot be reached or rejects the job
        """
        pass
