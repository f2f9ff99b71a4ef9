"""Shared pytest fixtures for recuscan tests."""

from __future__ import annotations

import pytest

from recuscan.domain.receipt import NormalizedLine

CLEAN_RECEIPT = """AUX VIVRES
16/11/2025 12:45
60LS CHILI GR 10.00
MEKONG CHAP 10.50
Sous-total 31.00
TPS 1.55
TVQ 2.77
Total 35.32
"""

NOISY_RECEIPT = """EPICERIE MARCHE
~~##@@ ||
xyz#@ 5,50
%%$$ **
Total 5,50
"""

NO_TOTAL_RECEIPT = """DEPANNEUR DU COIN
Chips 4.50
Boisson 15.50
Sous-total 20.00
TPS 1.00
"""

AMBIGUOUS_TOTAL_RECEIPT = """RESTO CHEZ MARC
Pizza 12.00
Salade 6.00
Total partiel 18.00
TPS 0.90
TVQ 1.80
Total 25.00
"""


def make_lines(*texts: str, start: int = 0) -> list[NormalizedLine]:
    return [NormalizedLine(index=start + pos, text=text) for pos, text in enumerate(texts)]


@pytest.fixture
def clean_receipt() -> str:
    return CLEAN_RECEIPT


@pytest.fixture
def noisy_receipt() -> str:
    return NOISY_RECEIPT


@pytest.fixture
def no_total_receipt() -> str:
    return NO_TOTAL_RECEIPT


@pytest.fixture
def ambiguous_total_receipt() -> str:
    return AMBIGUOUS_TOTAL_RECEIPT


@pytest.fixture
def missing_config(tmp_path) -> str:
    """A config path that does not exist, so tests ignore any project config."""
    return str(tmp_path / "absent.toml")
