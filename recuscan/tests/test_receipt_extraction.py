"""End-to-end tests for the extraction pipeline on synthetic receipts."""

from decimal import Decimal

import pytest
from conftest import AMBIGUOUS_TOTAL_RECEIPT, CLEAN_RECEIPT, NO_TOTAL_RECEIPT, NOISY_RECEIPT

from recuscan.domain.receipt import (
    ExtractionState,
    LineItem,
    NoTextRecognized,
    RawRecognition,
    ReceiptExtraction,
    TaxKind,
)
from recuscan.receipt.extraction_config import DEFAULT_EXCLUSION_KEYWORDS, ExtractionConfig
from recuscan.receipt.formatter import format_flat
from recuscan.receipt.ocr_result_parser import extract_receipt, parse_receipt_text

ALL_RECEIPTS = [CLEAN_RECEIPT, NOISY_RECEIPT, NO_TOTAL_RECEIPT, AMBIGUOUS_TOTAL_RECEIPT]


def test_clean_receipt(clean_receipt: str) -> None:
    extraction = extract_receipt(clean_receipt)

    assert extraction.vendor == "AUX VIVRES"
    assert extraction.date == "2025-11-16"
    assert extraction.subtotal == Decimal("31.00")
    assert extraction.taxes == {TaxKind.GST: Decimal("1.55"), TaxKind.QST: Decimal("2.77")}
    assert extraction.total == Decimal("35.32")
    assert extraction.items == (
        LineItem(name="60LS CHILI GR", price=Decimal("10.00")),
        LineItem(name="MEKONG CHAP", price=Decimal("10.50")),
    )
    assert extraction.category == "Restauration"
    assert extraction.confidence >= Decimal("0.8")


def test_noisy_receipt_uses_fallback(noisy_receipt: str) -> None:
    extraction = extract_receipt(noisy_receipt)

    assert extraction.items == (LineItem(name="xyz#@", price=Decimal("5.50")),)
    assert extraction.total == Decimal("5.50")


@pytest.mark.parametrize("text", ["", "   ", "\n \t\n"])
def test_blank_text_raises_and_returns_nothing(text: str) -> None:
    with pytest.raises(NoTextRecognized):
        extract_receipt(text)


def test_missing_total_is_absent_not_zero(no_total_receipt: str, clean_receipt: str) -> None:
    extraction = extract_receipt(no_total_receipt)

    assert extraction.total is None
    assert extraction.subtotal == Decimal("20.00")
    assert extraction.taxes == {TaxKind.GST: Decimal("1.00")}
    assert extraction.confidence < extract_receipt(clean_receipt).confidence


def test_ambiguous_total_prefers_last_total_line(ambiguous_total_receipt: str) -> None:
    extraction = extract_receipt(ambiguous_total_receipt)

    assert extraction.total == Decimal("25.00")
    assert extraction.subtotal == Decimal("18.00")


def test_ambiguous_total_without_taxes() -> None:
    extraction = extract_receipt("BISTRO\nSoupe 6.00\nPlat 12.00\nTotal partiel 18.00\nTotal 25.00")

    assert extraction.total == Decimal("25.00")
    assert extraction.taxes == {}


@pytest.mark.parametrize("text", ALL_RECEIPTS)
def test_extraction_is_deterministic(text: str) -> None:
    first = extract_receipt(text)
    second = extract_receipt(text)

    assert first == second
    assert format_flat(first, include_meta=True) == format_flat(second, include_meta=True)


@pytest.mark.parametrize("text", ALL_RECEIPTS)
def test_parallel_run_matches_sequential_run(text: str) -> None:
    assert extract_receipt(text, max_workers=4) == extract_receipt(text, max_workers=1)


@pytest.mark.parametrize("text", ALL_RECEIPTS)
def test_result_invariants(text: str) -> None:
    extraction = extract_receipt(text)

    amounts = [extraction.subtotal, extraction.total, *extraction.taxes.values()]
    assert all(amount >= 0 for amount in amounts if amount is not None)
    assert all(item.price >= 0 for item in extraction.items)
    assert all(item.name.casefold() not in DEFAULT_EXCLUSION_KEYWORDS for item in extraction.items)
    assert Decimal("0") <= extraction.confidence <= Decimal("1")
    assert extraction.category is not None


def test_state_transitions_on_success(clean_receipt: str) -> None:
    states: list[ExtractionState] = []

    extract_receipt(clean_receipt, state_sink=states)

    assert states == [
        ExtractionState.IDLE,
        ExtractionState.NORMALIZING,
        ExtractionState.CLASSIFYING,
        ExtractionState.EXTRACTING,
        ExtractionState.SCORING,
        ExtractionState.DONE,
    ]


def test_state_transitions_on_failure() -> None:
    states: list[ExtractionState] = []

    with pytest.raises(NoTextRecognized):
        extract_receipt(" ", state_sink=states)

    assert states == [ExtractionState.IDLE, ExtractionState.NORMALIZING, ExtractionState.FAILED]


def test_locale_hint_switches_date_order_and_tax_labels() -> None:
    text = "CORNER STORE\n03/04/2025\nMilk 4.00\nSubtotal 4.00\nGST 0.20\nTotal 4.20"

    us = parse_receipt_text(text, locale="en_US")
    quebec = extract_receipt(RawRecognition(text=text, locale="fr_CA"))

    assert us.date == "2025-03-04"
    assert us.taxes == {TaxKind.GST: Decimal("0.20")}
    assert quebec.date == "2025-04-03"
    assert quebec.taxes == {}


def test_line_confidences_steer_vendor() -> None:
    raw = RawRecognition(
        text="#4Rx T!\nCAFE OLIMPICO\nEspresso 3.25\nCroissant 2.75\nTotal 6.00\nMerci",
        line_confidences=(0.2, 0.97, 0.9, 0.9, 0.9, 0.9),
    )

    assert extract_receipt(raw).vendor == "CAFE OLIMPICO"


def test_config_is_passed_at_call_time(clean_receipt: str) -> None:
    config = ExtractionConfig(exclusion_keywords=DEFAULT_EXCLUSION_KEYWORDS + ("mekong chap",))

    extraction = extract_receipt(clean_receipt, config)

    assert [item.name for item in extraction.items] == ["60LS CHILI GR"]


def test_tax_line_before_other_markers_is_not_an_item() -> None:
    extraction = extract_receipt("CORNER STORE\nMilk 4.00\nQST 0.40\nGST 0.20\nTotal 4.60", locale="en_CA")

    assert extraction.items == (LineItem(name="Milk", price=Decimal("4.00")),)
    assert extraction.taxes == {TaxKind.QST: Decimal("0.40"), TaxKind.GST: Decimal("0.20")}
    assert extraction.total == Decimal("4.60")


def test_two_line_items_are_kept_next_to_single_line_items() -> None:
    text = (
        "AUX VIVRES\nTable 5\nPOULET 8.00\n1 60LS CHILI GR\n10.00\nMEKONG CHAP 10.50\n"
        "Sous-total 28.50\nTPS 1.43\nTotal 32.77"
    )

    extraction = extract_receipt(text)

    assert [item.name for item in extraction.items] == ["POULET", "60LS CHILI GR", "MEKONG CHAP"]
    assert extraction.items[1].price == Decimal("10.00")


def test_unit_price_rows_take_the_line_total() -> None:
    extraction = extract_receipt("AUX VIVRES\nPOMMES\n2 @ 1.50 3.00\nCAFE 2.00\nTotal 5.00")

    assert extraction.items == (
        LineItem(name="POMMES", price=Decimal("3.00")),
        LineItem(name="CAFE", price=Decimal("2.00")),
    )


def test_drink_items_do_not_make_a_restaurant_a_hardware_store() -> None:
    extraction = extract_receipt("CHEZ PAULO\nBOISSON GAZEUSE 2.50\nPOUTINE 9.00\nTotal 11.50")

    assert extraction.category == "Autre"


def test_extraction_taxes_are_read_only(clean_receipt: str) -> None:
    extraction = extract_receipt(clean_receipt)
    source = {TaxKind.GST: Decimal("1.00")}
    built = ReceiptExtraction(taxes=source)
    source[TaxKind.QST] = Decimal("2.00")

    with pytest.raises(TypeError):
        extraction.taxes[TaxKind.GST] = Decimal("0")  # type: ignore[index]
    assert built.taxes == {TaxKind.GST: Decimal("1.00")}
