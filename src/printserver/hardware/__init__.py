"""Hardware abstraction layer for the print server."""
