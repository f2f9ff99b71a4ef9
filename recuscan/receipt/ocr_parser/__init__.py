"""Composable OCR receipt parser components."""

from .common import parse_amount
from .fields_parser import (
    extract_date,
    extract_subtotal,
    extract_taxes,
    extract_total,
    extract_vendor,
)
from .items_text_parser import extract_items
from .lines import normalize_lines
from .sections import classify_sections

__all__ = [
    "classify_sections",
    "extract_date",
    "extract_items",
    "extract_subtotal",
    "extract_taxes",
    "extract_total",
    "extract_vendor",
    "normalize_lines",
    "parse_amount",
]
