"""Printer drivers for the print server."""

from printserver.hardware.printer.base import PrinterInterface
from printserver.hardware.printer.network import NetworkInterface
from printserver.hardware.printer.spooler import SpoolerInterface
from printserver.hardware.printer.thermal import (
    MockInterface,
    ThermalPrinter,
    create_interface,
)

__all__ = [
    "PrinterInterface",
    "NetworkInterface",
    "SpoolerInterface",
    "MockInterface",
    "ThermalPrinter",
    "create_interface",
]
