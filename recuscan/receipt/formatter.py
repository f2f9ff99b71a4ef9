"""Format ReceiptExtraction data for downstream consumers."""

from decimal import Decimal
from typing import Any

from recuscan.domain.receipt import ReceiptExtraction, TaxKind


def _format_amount(amount: Decimal) -> str:
    return f"{amount.quantize(Decimal('0.01'))}"


def _safe_item_name(name: str) -> str:
    """Item names may not carry the list separators."""
    return " ".join(name.replace(":", " ").replace(";", " ").split())


def format_flat(extraction: ReceiptExtraction, include_meta: bool = False) -> str:
    """
    Format an extraction as one ``key=value`` line.

    Field order is fixed and absent fields are left out entirely::

        fournisseur=AUX VIVRES, sous_total=31.00, TPS=1.55, TVQ=2.77,
        total=35.32, date=2025-11-16, articles=[60LS CHILI GR:10.00; MEKONG CHAP:10.50]

    Args:
        extraction: Extraction result
        include_meta: Also append ``categorie=`` and ``confiance=``
    """
    parts: list[str] = []
    if extraction.vendor:
        parts.append(f"fournisseur={extraction.vendor}")
    if extraction.subtotal is not None:
        parts.append(f"sous_total={_format_amount(extraction.subtotal)}")
    # Declaration order of TaxKind: TPS, TVP, TVQ, TVH
    for kind in TaxKind:
        if kind in extraction.taxes:
            parts.append(f"{kind.french_label}={_format_amount(extraction.taxes[kind])}")
    if extraction.total is not None:
        parts.append(f"total={_format_amount(extraction.total)}")
    if extraction.date:
        parts.append(f"date={extraction.date}")
    if extraction.items:
        articles = "; ".join(
            f"{_safe_item_name(item.name)}:{_format_amount(item.price)}" for item in extraction.items
        )
        parts.append(f"articles=[{articles}]")
    if include_meta:
        if extraction.category:
            parts.append(f"categorie={extraction.category}")
        parts.append(f"confiance={_format_amount(extraction.confidence)}")
    return ", ".join(parts)


def extraction_to_dict(extraction: ReceiptExtraction) -> dict[str, Any]:
    """JSON-ready mapping of an extraction; amounts are strings, absent fields None."""
    return {
        "vendor": extraction.vendor,
        "date": extraction.date,
        "subtotal": _format_amount(extraction.subtotal) if extraction.subtotal is not None else None,
        "taxes": {
            kind.french_label: _format_amount(extraction.taxes[kind]) for kind in TaxKind if kind in extraction.taxes
        },
        "total": _format_amount(extraction.total) if extraction.total is not None else None,
        "items": [{"name": item.name, "price": _format_amount(item.price)} for item in extraction.items],
        "category": extraction.category,
        "confidence": _format_amount(extraction.confidence),
    }
