"""Exception types for the print server."""


class PrintServerError(Exception):
    """Base class for print server errors."""


class PrinterError(PrintServerError):
    """The printer could not be reached or rejected the job."""
