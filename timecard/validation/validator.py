"""
Entry Input Validation

Two entry points:

STRUCTURED INPUT (validate_entry_input):
- Accepts an input model or a mapping of either billing shape
- Chooses the shape by the fields present (a rate amount means flat rate)
- Runs the pydantic schema and translates its errors

RAW FORM INPUT (EntryFormParser):
- Accepts the strings a form collects
- Parses numbers itself so every problem is reported at once
- Fills the default hourly rate when the form leaves it blank

IMPORTANT: Validation NEVER silently fixes issues.
Bad input raises ValidationError and nothing is recorded.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from timecard.models.entry import (
    EntryInput,
    FlatRateInput,
    TimedInput,
    ValidationIssue,
)


# pydantic error type -> our issue type
_ISSUE_TYPES = {
    "missing": "missing",
    "string_too_short": "blank",
    "greater_than": "not_positive",
    "decimal_parsing": "not_a_number",
    "decimal_type": "not_a_number",
    "finite_number": "not_finite",
}


class ValidationError(Exception):
    """User input was missing or malformed. Nothing was changed."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues) or "Invalid input")

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])

    @classmethod
    def from_pydantic(
        cls,
        error: PydanticValidationError,
        model: Optional[type[BaseModel]] = None,
    ) -> "ValidationError":
        """Translate pydantic errors, reporting fields by name rather than alias."""
        names = {}
        if model is not None:
            names = {f.alias: name for name, f in model.model_fields.items() if f.alias}
        issues = []
        for detail in error.errors():
            loc = [names.get(part, part) for part in detail["loc"]]
            field = ".".join(str(part) for part in loc) or "input"
            issues.append(ValidationIssue(
                field=field,
                issue_type=_ISSUE_TYPES.get(detail["type"], detail["type"]),
                message=f"{field}: {detail['msg']}",
            ))
        return cls(issues)

    @property
    def fields(self) -> set[str]:
        return {issue.field for issue in self.issues}


def _present(data: Mapping, *keys: str) -> bool:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return True
    return False


def validate_entry_input(data: Any) -> EntryInput:
    """
    Turn structured input into a validated EntryInput.

    Raises:
        ValidationError: If neither billing shape is complete or a value is bad
    """
    if isinstance(data, (TimedInput, FlatRateInput)):
        return data

    if not isinstance(data, Mapping):
        raise ValidationError.single(
            "input", "invalid_type", "Entry input must be a mapping of fields"
        )

    if _present(data, "rate_amount", "rateAmount"):
        model = FlatRateInput
    elif _present(data, "minutes"):
        model = TimedInput
    else:
        raise ValidationError.single(
            "billing", "missing", "Either minutes or a flat rate amount is required"
        )

    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, model) from e


class EntryFormParser:
    """
    Parses raw form strings into entry input.

    A non-blank rate amount selects a flat-rate entry; otherwise minutes
    select a timed entry billed at the given or default hourly rate.
    """

    def __init__(self, default_hourly_rate: Decimal = Decimal("18")):
        self._default_hourly_rate = Decimal(default_hourly_rate)

    def _parse_positive(
        self,
        field: str,
        raw: str,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        """Parse a positive, finite number, recording an issue on failure."""
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            issues.append(ValidationIssue(
                field=field,
                issue_type="not_a_number",
                message=f"{field} must be a number, got '{raw.strip()}'",
            ))
            return None

        if not value.is_finite():
            issues.append(ValidationIssue(
                field=field,
                issue_type="not_finite",
                message=f"{field} must be a finite number",
            ))
            return None

        if value <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="not_positive",
                message=f"{field} must be greater than zero",
            ))
            return None

        return value

    def parse(
        self,
        category: str = "",
        minutes: str = "",
        hourly_rate: str = "",
        rate_amount: str = "",
        date: str = "",
    ) -> EntryInput:
        """
        Parse one submitted form.

        Raises:
            ValidationError: With every issue found, not just the first
        """
        issues: list[ValidationIssue] = []
        category = (category or "").strip()
        date = (date or "").strip() or None

        if not category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="blank",
                message="Category is required",
            ))

        if (rate_amount or "").strip():
            amount = self._parse_positive("rate_amount", rate_amount, issues)
            if issues:
                raise ValidationError(issues)
            return FlatRateInput(category=category, rate_amount=amount, date=date)

        if not (minutes or "").strip():
            issues.append(ValidationIssue(
                field="billing",
                issue_type="missing",
                message="Either minutes or a flat rate amount is required",
            ))
            raise ValidationError(issues)

        parsed_minutes = self._parse_positive("minutes", minutes, issues)
        if (hourly_rate or "").strip():
            rate = self._parse_positive("hourly_rate", hourly_rate, issues)
        else:
            rate = self._default_hourly_rate

        if issues:
            raise ValidationError(issues)
        return TimedInput(
            category=category,
            minutes=parsed_minutes,
            hourly_rate=rate,
            date=date,
        )
