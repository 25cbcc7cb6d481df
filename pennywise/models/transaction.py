"""
Core Data Models for PennyWise

These models define the schemas for transactions flowing between the
data service, the local store and the views. They are designed to:
1. Validate loosely-typed remote records once, at the boundary
2. Coerce amounts to numbers and dates to timezone-aware datetimes
3. Serialize back to the wire shape the data service expects

DESIGN DECISION: Remote records use camelCase keys (``userEmail``).
Models accept both the wire alias and the Python field name, and always
dump back to the wire shape with ``by_alias=True``.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionCategory(str, Enum):
    """
    Supported transaction categories.

    Unknown values coming from the data service are mapped to OTHER
    rather than rejected, because the category is presentation-only.
    """
    FOOD = "food"
    TRANSPORT = "transport"
    HOUSING = "housing"
    UTILITIES = "utilities"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    SALARY = "salary"
    GIFT = "gift"
    OTHER = "other"


# =============================================================================
# COERCION HELPERS
# =============================================================================

def coerce_timestamp(value: Any) -> Any:
    """
    Normalize a date-like value before pydantic parses it.

    Plain dates become midnight UTC. Everything else is left for pydantic
    (ISO strings, epoch numbers, datetimes).
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


def ensure_aware(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC so that all dates sort together."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def serialize_timestamp(value: datetime) -> str:
    """Canonical wire form of a timestamp: ISO-8601 in UTC, millisecond precision."""
    return ensure_aware(value).astimezone(timezone.utc).isoformat(timespec="milliseconds")


def _coerce_category(value: Any) -> TransactionCategory:
    if isinstance(value, TransactionCategory):
        return value
    if isinstance(value, str):
        try:
            return TransactionCategory(value.strip().lower())
        except ValueError:
            return TransactionCategory.OTHER
    return TransactionCategory.OTHER


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class NewTransaction(BaseModel):
    """
    A transaction the user wants to record.

    It has no ``id`` (the data service assigns one) and no owner
    (the current identity is attached when it is sent).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: float = Field(
        ...,
        allow_inf_nan=False,
        description="Signed amount: positive is income, negative is expense"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened (user-declared)"
    )
    description: str = Field(
        default="",
        max_length=200,
        description="Free-text description"
    )
    category: TransactionCategory = Field(
        default=TransactionCategory.OTHER,
        description="Spending category"
    )

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return coerce_timestamp(v)

    @field_validator('date')
    @classmethod
    def make_date_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_validator('category', mode='before')
    @classmethod
    def parse_category(cls, v: Any) -> TransactionCategory:
        return _coerce_category(v)

    def to_create_payload(self, user_email: str) -> dict:
        """
        Build the body of a ``create`` call.

        The date is serialized to its canonical string form, the amount is
        a plain float and the owner's email is attached.
        """
        return {
            "amount": float(self.amount),
            "date": serialize_timestamp(self.date),
            "description": self.description,
            "category": self.category.value,
            "userEmail": user_email,
        }


class Transaction(BaseModel):
    """
    A transaction as held by the local store.

    Built only from records the data service has confirmed, so ``id``
    is always the remote-assigned identifier.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: int = Field(
        ...,
        description="Identifier assigned by the data service"
    )
    user_email: str = Field(
        ...,
        alias="userEmail",
        min_length=1,
        description="Email of the owning user"
    )
    amount: float = Field(
        ...,
        allow_inf_nan=False,
        description="Signed amount: positive is income, negative is expense"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened (user-declared)"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    category: TransactionCategory = Field(
        default=TransactionCategory.OTHER,
        description="Spending category"
    )

    @field_validator('id', mode='before')
    @classmethod
    def reject_bool_id(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Transaction id must be a number")
        return v

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return coerce_timestamp(v)

    @field_validator('date')
    @classmethod
    def make_date_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('category', mode='before')
    @classmethod
    def parse_category(cls, v: Any) -> TransactionCategory:
        return _coerce_category(v)

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @classmethod
    def from_remote(cls, record: Mapping[str, Any]) -> "Transaction":
        """
        Validate a loosely-typed record from the data service.

        Raises pydantic.ValidationError if the record can't be coerced.
        """
        return cls.model_validate(dict(record))

    def to_remote(self) -> dict:
        """Convert back to the wire shape used by the data service."""
        return {
            "id": self.id,
            "userEmail": self.user_email,
            "amount": self.amount,
            "date": serialize_timestamp(self.date),
            "description": self.description,
            "category": self.category.value,
        }


# =============================================================================
# REPORT MODELS
# =============================================================================

class CategorySpending(BaseModel):
    """One row of the spending report."""

    category: TransactionCategory
    total: float = Field(
        ...,
        ge=0,
        description="Sum of expense magnitudes in this category"
    )
    count: int = Field(ge=0)
    share: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Fraction of all spending in this category"
    )


# =============================================================================
# IDENTITY
# =============================================================================

class Identity(BaseModel):
    """
    The signed-in user as reported by the identity provider.

    Frozen so two callbacks for the same user compare equal.
    """
    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1)
    email: Optional[str] = Field(
        default=None,
        description="Email address; the ownership key for transactions"
    )

    @property
    def has_email(self) -> bool:
        return bool(self.email)
