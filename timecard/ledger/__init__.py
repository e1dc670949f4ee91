"""Ledger package."""

from timecard.ledger.ledger import (
    Ledger,
    NotFoundError,
    compute_category_totals,
    compute_totals,
)

__all__ = ["Ledger", "NotFoundError", "compute_category_totals", "compute_totals"]
