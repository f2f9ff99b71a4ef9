"""Receipt text extraction: vendor, date, taxes, total and items from OCR text."""

__version__ = "0.1.0"
