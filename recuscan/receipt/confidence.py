"""Overall confidence score for an extraction."""

from collections.abc import Mapping, Sequence
from decimal import Decimal

from recuscan.domain.receipt import LineItem, TaxKind

from .extraction_config import ConfidenceWeights

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDREDTH = Decimal("0.01")


def amounts_agree(
    subtotal: Decimal | None,
    taxes: Mapping[TaxKind, Decimal],
    total: Decimal | None,
    tolerance: Decimal,
) -> bool:
    """Return True if subtotal + taxes matches total within ``tolerance``."""
    if subtotal is None or total is None:
        return False
    return abs(subtotal + sum(taxes.values(), _ZERO) - total) <= tolerance


def score_confidence(
    *,
    vendor: str | None,
    date: str | None,
    subtotal: Decimal | None,
    taxes: Mapping[TaxKind, Decimal],
    total: Decimal | None,
    items: Sequence[LineItem],
    weights: ConfidenceWeights | None = None,
) -> Decimal:
    """
    Score how complete and consistent an extraction is.

    Weighted sum of "field present" indicators (vendor, date, total, any tax,
    any item) plus a bonus when the subtotal and taxes add up to the total.
    Clamped to [0, 1] and rounded to two decimals.
    """
    weights = weights or ConfidenceWeights()
    score = _ZERO
    if vendor:
        score += weights.vendor
    if date:
        score += weights.date
    if total is not None:
        score += weights.total
    if taxes:
        score += weights.taxes
    if items:
        score += weights.items
    if amounts_agree(subtotal, taxes, total, weights.tolerance):
        score += weights.consistency
    return min(max(score, _ZERO), _ONE).quantize(_HUNDREDTH)
