"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations

import logging

import pytest


def test_imports() -> None:
    import recuscan
    import recuscan.application.receipts
    import recuscan.cli.main
    import recuscan.receipt.ocr_result_parser
    import recuscan.runtime

    assert recuscan.__version__
    assert recuscan.application.receipts is not None
    assert recuscan.cli.main is not None
    assert recuscan.receipt.ocr_result_parser is not None
    assert recuscan.runtime is not None


def test_loggers_share_the_recuscan_namespace() -> None:
    from recuscan.runtime import get_logger

    assert get_logger("recuscan.receipt.formatter").name == "recuscan.receipt.formatter"
    assert get_logger("plugin").name == "recuscan.plugin"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("DEBUG", logging.DEBUG), ("warn", logging.WARNING), ("bogus", logging.INFO), ("", logging.INFO)],
)
def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch, value: str, expected: int) -> None:
    from recuscan.runtime.logging import level_from_env

    monkeypatch.setenv("RECUSCAN_LOG_LEVEL", value)

    assert level_from_env() == expected
