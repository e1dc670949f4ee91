"""Input validation package."""

from timecard.validation.validator import (
    EntryFormParser,
    ValidationError,
    validate_entry_input,
)

__all__ = ["EntryFormParser", "ValidationError", "validate_entry_input"]
