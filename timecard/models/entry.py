"""
Entry Models for Timecard

These models define the strict schemas for every work session the
tracker records. They are designed to:
1. Enforce positive, finite minutes and rates at runtime
2. Keep the billing mode explicit (no optional-field guessing)
3. Be serializable as plain JSON for the key-value store
4. Carry the computed amount so it is never recomputed on read

DESIGN DECISION: Billing is a tagged union discriminated on `mode`.
A flat-rate entry simply has no minutes, instead of an ambiguous
zero-or-missing field.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


CENT = Decimal("0.01")

# Category used when an entry carries none
OTHER_CATEGORY = "Other"


def round_money(value: Decimal) -> Decimal:
    """Round to two decimal places, half away from zero."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# BILLING MODES
# =============================================================================

class Timed(BaseModel):
    """Work billed as minutes at an hourly rate."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mode: Literal["timed"] = "timed"
    minutes: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Minutes worked"
    )
    hourly_rate: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        alias="hourlyRate",
        description="Pay per hour"
    )

    def compute_amount(self) -> Decimal:
        return round_money(self.minutes / 60 * self.hourly_rate)


class FlatRate(BaseModel):
    """A service billed at a fixed amount."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mode: Literal["flat_rate"] = "flat_rate"
    rate_amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        alias="rateAmount",
        description="Fixed amount for the service"
    )

    @property
    def minutes(self) -> Decimal:
        """Flat-rate work contributes no time to totals."""
        return Decimal(0)

    def compute_amount(self) -> Decimal:
        return round_money(self.rate_amount)


BillingMode = Annotated[Union[Timed, FlatRate], Field(discriminator="mode")]


# =============================================================================
# ENTRY
# =============================================================================

class Entry(BaseModel):
    """
    One unit of billable work.

    CRITICAL: `amount` is computed once by the ledger when the entry is
    created or edited, and stored. Readers never recompute it.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(
        ...,
        description="Creation-time derived identifier, unique within a period"
    )
    date: str = Field(
        ...,
        description="Calendar date of the session"
    )
    category: str = Field(
        default="",
        description="Work type, e.g. 'Class Time'"
    )
    billing: BillingMode
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="Earned amount, rounded to 2 decimals"
    )
    earned_to_date: Optional[Decimal] = Field(
        default=None,
        description="Running period total right after this entry was added"
    )

    @model_validator(mode='before')
    @classmethod
    def migrate_legacy_shape(cls, data: Any) -> Any:
        """
        Accept entries written by the first version of the tracker.

        Those were flat objects: {id, date, workType, minutes, payRate, total}.
        """
        if not isinstance(data, dict) or "billing" in data:
            return data
        if "minutes" not in data and "workType" not in data:
            return data

        migrated = {
            "id": data.get("id"),
            "date": data.get("date", ""),
            "category": data.get("workType") or data.get("category") or "",
            "billing": {
                "mode": "timed",
                "minutes": data.get("minutes"),
                "hourly_rate": data.get("payRate", data.get("hourly_rate")),
            },
            "amount": data.get("total", data.get("amount")),
        }
        if data.get("totalEarnedSoFar") is not None:
            migrated["earned_to_date"] = data["totalEarnedSoFar"]
        return migrated

    @field_validator('amount', 'earned_to_date')
    @classmethod
    def quantize_money(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round_money(v) if v is not None else None

    @property
    def minutes(self) -> Decimal:
        return self.billing.minutes

    @property
    def group_key(self) -> str:
        """Category used for aggregation."""
        return self.category or OTHER_CATEGORY


# =============================================================================
# INPUT MODELS
# =============================================================================

class TimedInput(BaseModel):
    """User input for a timed session."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    category: str = Field(..., min_length=1)
    minutes: Decimal = Field(..., gt=0, allow_inf_nan=False)
    hourly_rate: Decimal = Field(..., gt=0, allow_inf_nan=False, alias="hourlyRate")
    date: Optional[str] = None

    @field_validator('date')
    @classmethod
    def blank_date_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def to_billing(self) -> Timed:
        return Timed(minutes=self.minutes, hourly_rate=self.hourly_rate)


class FlatRateInput(BaseModel):
    """User input for a flat-rate service."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    category: str = Field(..., min_length=1)
    rate_amount: Decimal = Field(..., gt=0, allow_inf_nan=False, alias="rateAmount")
    date: Optional[str] = None

    @field_validator('date')
    @classmethod
    def blank_date_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def to_billing(self) -> FlatRate:
        return FlatRate(rate_amount=self.rate_amount)


EntryInput = Union[TimedInput, FlatRateInput]


# =============================================================================
# AGGREGATES
# =============================================================================

class Totals(BaseModel):
    """Running totals for a set of entries."""
    model_config = ConfigDict(frozen=True)

    total_minutes: Decimal = Decimal(0)
    total_amount: Decimal = Decimal("0.00")

    @property
    def total_hours(self) -> Decimal:
        return round_money(self.total_minutes / 60)


class CategoryTotals(BaseModel):
    """Totals for a single category."""
    model_config = ConfigDict(frozen=True)

    minutes: Decimal = Decimal(0)
    amount: Decimal = Decimal("0.00")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_a_number', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
