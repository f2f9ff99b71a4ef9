"""Core domain models for receipt text extraction.

This module provides the data models used throughout the project:
- RawRecognition, NormalizedLine, ReceiptSections: engine inputs and intermediates
- LineItem, TaxKind, ReceiptExtraction: the extraction result
- NoTextRecognized: the only error raised by the engine

Usage:
    from recuscan.domain import ReceiptExtraction, LineItem, TaxKind
"""

from recuscan.domain.receipt import (
    ExtractionState,
    LineItem,
    NormalizedLine,
    NoTextRecognized,
    RawRecognition,
    ReceiptExtraction,
    ReceiptSections,
    TaxBreakdown,
    TaxKind,
)

__all__ = [
    "ExtractionState",
    "LineItem",
    "NormalizedLine",
    "NoTextRecognized",
    "RawRecognition",
    "ReceiptExtraction",
    "ReceiptSections",
    "TaxBreakdown",
    "TaxKind",
]
