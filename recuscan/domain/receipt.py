"""Data models for receipt text extraction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType


class NoTextRecognized(ValueError):
    """Raised when the recognized receipt text holds no usable line."""

    def __init__(self, message: str = "No text recognized on receipt") -> None:
        super().__init__(message)


class TaxKind(Enum):
    """Canadian sales tax kinds, in receipt print order."""

    GST = "TPS"
    PST = "TVP"
    QST = "TVQ"
    HST = "TVH"

    @property
    def french_label(self) -> str:
        return self.value


class ExtractionState(Enum):
    """Stages of a single extraction run."""

    IDLE = "idle"
    NORMALIZING = "normalizing"
    CLASSIFYING = "classifying"
    EXTRACTING = "extracting"
    SCORING = "scoring"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RawRecognition:
    """Text produced by the external OCR service for one receipt image."""

    text: str
    # Per raw line (split on line breaks); None entries mean unknown.
    line_confidences: tuple[float | None, ...] | None = None
    locale: str | None = None


@dataclass(frozen=True)
class NormalizedLine:
    """A trimmed, whitespace-collapsed receipt line."""

    index: int  # Position in the raw text; gaps are allowed.
    text: str
    ocr_confidence: float | None = None

    @property
    def folded(self) -> str:
        return self.text.casefold()


@dataclass(frozen=True)
class ReceiptSections:
    """Header, item and summary regions of a receipt (a partition of its lines)."""

    header: tuple[NormalizedLine, ...] = ()
    items: tuple[NormalizedLine, ...] = ()
    summary: tuple[NormalizedLine, ...] = ()

    def header_indexes(self) -> list[int]:
        return [line.index for line in self.header]

    def item_indexes(self) -> list[int]:
        return [line.index for line in self.items]

    def summary_indexes(self) -> list[int]:
        return [line.index for line in self.summary]

    def all_lines(self) -> tuple[NormalizedLine, ...]:
        return self.header + self.items + self.summary


@dataclass(frozen=True)
class LineItem:
    """A single purchased item on a receipt."""

    name: str
    price: Decimal


TaxBreakdown = Mapping[TaxKind, Decimal]


@dataclass(frozen=True)
class ReceiptExtraction:
    """Structured data extracted from one receipt.

    Absent fields are None; absence is the only failure signal for a field.
    """

    vendor: str | None = None
    date: str | None = None  # ISO-8601 (YYYY-MM-DD)
    subtotal: Decimal | None = None
    taxes: TaxBreakdown = field(default_factory=dict)
    total: Decimal | None = None
    items: tuple[LineItem, ...] = ()
    category: str | None = None
    confidence: Decimal = Decimal("0.00")

    def __post_init__(self) -> None:
        # Stored as a read-only copy.
        object.__setattr__(self, "taxes", MappingProxyType(dict(self.taxes)))
