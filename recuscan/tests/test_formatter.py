from decimal import Decimal

from recuscan.domain.receipt import LineItem, ReceiptExtraction, TaxKind
from recuscan.receipt.formatter import extraction_to_dict, format_flat
from recuscan.receipt.ocr_result_parser import extract_receipt


def test_format_flat_clean_receipt(clean_receipt: str) -> None:
    extraction = extract_receipt(clean_receipt)

    assert format_flat(extraction) == (
        "fournisseur=AUX VIVRES, sous_total=31.00, TPS=1.55, TVQ=2.77, total=35.32, "
        "date=2025-11-16, articles=[60LS CHILI GR:10.00; MEKONG CHAP:10.50]"
    )
    assert format_flat(extraction, include_meta=True).endswith(", categorie=Restauration, confiance=1.00")


def test_format_flat_omits_absent_fields() -> None:
    extraction = ReceiptExtraction(subtotal=Decimal("20"), taxes={TaxKind.GST: Decimal("1")})

    assert format_flat(extraction) == "sous_total=20.00, TPS=1.00"
    assert format_flat(ReceiptExtraction()) == ""
    assert format_flat(ReceiptExtraction(), include_meta=True) == "confiance=0.00"


def test_format_flat_orders_taxes_by_kind() -> None:
    extraction = ReceiptExtraction(
        taxes={TaxKind.HST: Decimal("1.30"), TaxKind.GST: Decimal("0.50"), TaxKind.PST: Decimal("0.70")}
    )

    assert format_flat(extraction) == "TPS=0.50, TVP=0.70, TVH=1.30"


def test_format_flat_strips_separators_from_names() -> None:
    extraction = ReceiptExtraction(items=(LineItem(name="A:B;C", price=Decimal("1")),))

    assert format_flat(extraction) == "articles=[A B C:1.00]"


def test_extraction_to_dict(clean_receipt: str) -> None:
    payload = extraction_to_dict(extract_receipt(clean_receipt))

    assert payload["vendor"] == "AUX VIVRES"
    assert payload["taxes"] == {"TPS": "1.55", "TVQ": "2.77"}
    assert payload["items"][1] == {"name": "MEKONG CHAP", "price": "10.50"}
    assert payload["confidence"] == "1.00"
    assert extraction_to_dict(ReceiptExtraction())["total"] is None
