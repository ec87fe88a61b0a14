"""Receipt print server: bilingual tax invoice bitmaps for ESC/POS printers."""

__version__ = "1.0.0"
