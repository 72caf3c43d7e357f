"""
Transaction and Summary Models

These models define the schemas for ledger data:
1. TransactionRecord - what is stored, one per user entry
2. DisplayTransaction - a record formatted for the listing
3. LedgerTotals / Summary - what is derived on every load

DESIGN DECISION: Records are frozen. The ledger is append-only and
nothing in this package edits or deletes an entry once written.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionDirection(str, Enum):
    """Whether money came in or went out."""
    CREDIT = "credit"
    DEBIT = "debit"


# Values written by earlier versions of the app
_DIRECTION_ALIASES = {
    "positive": TransactionDirection.CREDIT,
    "up": TransactionDirection.CREDIT,
    "negative": TransactionDirection.DEBIT,
    "down": TransactionDirection.DEBIT,
}


class TransactionCategory(str, Enum):
    """
    Supported transaction categories.

    A record whose category is not in this set fails validation.
    """
    PURCHASES = "purchases"
    FOOD = "food"
    SALARY = "salary"
    CAR = "car"
    LEISURE = "leisure"
    STUDIES = "studies"


# =============================================================================
# CORE RECORD MODEL
# =============================================================================

class TransactionRecord(BaseModel):
    """
    A single ledger entry as stored.

    The amount is a non-negative magnitude; direction carries the sign.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Caller-generated id, unique within the ledger"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Free text description"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Magnitude of the transaction"
    )
    direction: TransactionDirection = Field(
        ...,
        validation_alias=AliasChoices("direction", "type"),
    )
    category: TransactionCategory
    date: date

    @field_validator('amount', mode='before')
    @classmethod
    def reject_non_numeric(cls, v: Any) -> Any:
        """Booleans are ints in Python but never amounts."""
        if isinstance(v, bool):
            raise ValueError("amount must be a number")
        if isinstance(v, float):
            # str() keeps the shortest repr, Decimal(float) would not
            return str(v)
        return v

    @field_validator('direction', mode='before')
    @classmethod
    def map_legacy_direction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _DIRECTION_ALIASES.get(v.strip().lower(), v.strip().lower())
        return v

    @field_validator('date', mode='before')
    @classmethod
    def accept_iso_datetime(cls, v: Any) -> Any:
        """Entries saved with a full timestamp keep only the calendar day."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v.strip().replace("Z", "+00:00")).date()
        return v


class DisplayTransaction(BaseModel):
    """A record with amount and date formatted for the listing."""

    id: str
    name: str
    amount: str
    direction: TransactionDirection
    category: TransactionCategory
    date: str


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class LedgerTotals(BaseModel):
    """
    Unformatted reduction of a ledger.

    No rounding happens here; amounts are exact Decimal sums.
    """

    credit_total: Decimal = Decimal("0")
    debit_total: Decimal = Decimal("0")
    net_total: Decimal = Decimal("0")
    last_credit: Optional[date] = None
    last_debit: Optional[date] = None

    @property
    def last_activity(self) -> Optional[date]:
        """Most recent date across both directions."""
        dates = [d for d in (self.last_credit, self.last_debit) if d is not None]
        return max(dates) if dates else None


class HighlightEntry(BaseModel):
    """One summary card: a formatted amount and its recency marker."""

    amount: str
    last_transaction: str


class Summary(BaseModel):
    """Credit, debit and net cards shown on the dashboard."""

    entries: HighlightEntry
    expenses: HighlightEntry
    total: HighlightEntry


class SkippedRecord(BaseModel):
    """A stored entry left out of the totals because it failed validation."""

    index: int = Field(ge=0)
    record_id: Optional[str] = None
    reason: str


class LedgerSnapshot(BaseModel):
    """Everything one load produces for one identity."""

    identity_id: str
    records: list[TransactionRecord] = Field(default_factory=list)
    transactions: list[DisplayTransaction] = Field(default_factory=list)
    totals: LedgerTotals
    summary: Summary
    skipped: list[SkippedRecord] = Field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
