"""Receipt workflows."""

from recuscan.application.receipts.extract import (
    ExpenseDraft,
    ReceiptExtractRequest,
    ReceiptExtractResult,
    build_expense_draft,
    run_receipt_extract,
)

__all__ = [
    "ExpenseDraft",
    "ReceiptExtractRequest",
    "ReceiptExtractResult",
    "build_expense_draft",
    "run_receipt_extract",
]
