"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from heavyims.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "USD"


def new_id() -> str:
    """Generate an opaque identifier for an entity or event."""
    return str(uuid4())


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  Negative amounts are not
    meaningful for costs in this domain and are rejected.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        if not self.currency or not self.currency.strip():
            raise ValidationError("Currency is required")
        object.__setattr__(self, "currency", self.currency.strip().upper())

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        if factor < 0:
            raise ValidationError("Multiplication factor cannot be negative")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:,.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


# ---------------------------------------------------------------------------
# DateRange
# ---------------------------------------------------------------------------

# Sentinel end for work that is still ongoing.
OPEN_END = datetime.max.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """A closed time interval ``[start, end]`` of timezone-aware instants.

    An open-ended range (work in progress) uses ``OPEN_END`` as its end.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        for name, value in (("start", self.start), ("end", self.end)):
            if not isinstance(value, datetime):
                raise ValidationError(f"DateRange {name} must be a datetime")
            if value.tzinfo is None:
                raise ValidationError(f"DateRange {name} must be timezone-aware")
        if self.start > self.end:
            raise ValidationError(
                f"Start ({self.start.isoformat()}) must be before or equal to "
                f"end ({self.end.isoformat()})"
            )

    @staticmethod
    def open_ended(start: datetime) -> DateRange:
        return DateRange(start, OPEN_END)

    @property
    def is_open_ended(self) -> bool:
        return self.end == OPEN_END

    def duration(self) -> timedelta:
        """Length of the range; an open-ended range is measured up to now."""
        if self.is_open_ended:
            return utc_now() - self.start
        return self.end - self.start

    def duration_in_hours(self) -> Decimal:
        return Decimal(str(self.duration().total_seconds())) / Decimal(3600)

    def duration_in_days(self) -> int:
        return self.duration().days

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    def overlaps_with(self, other: DateRange) -> bool:
        return self.start <= other.end and self.end >= other.start

    def is_within(self, other: DateRange) -> bool:
        return self.start >= other.start and self.end <= other.end

    def close(self, end: datetime) -> DateRange:
        """Return a closed copy of this range ending at ``end``."""
        return DateRange(self.start, end)

    def extend_to(self, new_end: datetime) -> DateRange:
        if new_end < self.end:
            raise ValidationError("New end date must be after current end date")
        return DateRange(self.start, new_end)

    def __str__(self) -> str:
        start = self.start.strftime("%Y-%m-%d %H:%M")
        if self.is_open_ended:
            return f"{start} - (ongoing)"
        end = self.end.strftime("%Y-%m-%d %H:%M")
        return f"{start} - {end} ({self.duration_in_hours():.1f} hours)"


# ---------------------------------------------------------------------------
# EquipmentIdentifier
# ---------------------------------------------------------------------------

VIN_LENGTH = 17


@dataclass(frozen=True)
class EquipmentIdentifier:
    """Identifies the machine a work order is about.

    Equality is by VIN only: two identifiers with the same VIN describe the
    same piece of equipment even if type/model text differs.
    """

    vin: str
    equipment_type: str = field(compare=False)
    model: str = field(default="Unknown", compare=False)

    def __post_init__(self) -> None:
        if not self.vin or not self.vin.strip():
            raise ValidationError("Equipment VIN is required")
        vin = self.vin.strip().upper()
        if len(vin) != VIN_LENGTH:
            raise ValidationError(f"Equipment VIN must be exactly {VIN_LENGTH} characters")
        if not vin.isascii() or not vin.isalnum():
            raise ValidationError("Equipment VIN must contain only letters and numbers")
        if not self.equipment_type or not self.equipment_type.strip():
            raise ValidationError("Equipment type is required")
        model = self.model.strip() if self.model and self.model.strip() else "Unknown"

        object.__setattr__(self, "vin", vin)
        object.__setattr__(self, "equipment_type", self.equipment_type.strip())
        object.__setattr__(self, "model", model)

    @property
    def display_name(self) -> str:
        return f"{self.model} {self.equipment_type} ({self.vin})"

    @property
    def short_vin(self) -> str:
        return self.vin[-8:]

    def is_type(self, equipment_type: str) -> bool:
        return self.equipment_type.lower() == equipment_type.lower()

    def __str__(self) -> str:
        return self.display_name


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------

_US_ZIP = re.compile(r"^\d{5}(-\d{4})?$")


@dataclass(frozen=True)
class Address:
    """Postal address. Compared case-insensitively."""

    street: str
    city: str
    state: str
    zip_code: str
    street2: str | None = None
    country: str = "USA"

    def __post_init__(self) -> None:
        for name in ("street", "city", "state", "zip_code"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValidationError(f"Address {name.replace('_', ' ')} is required")
        country = (self.country or "USA").strip().upper()
        zip_code = self.zip_code.strip()
        if country == "USA" and not _US_ZIP.match(zip_code):
            raise ValidationError(
                "Invalid US ZIP code format. Expected: 12345 or 12345-6789"
            )

        object.__setattr__(self, "street", self.street.strip())
        object.__setattr__(self, "city", self.city.strip())
        object.__setattr__(self, "state", self.state.strip().upper())
        object.__setattr__(self, "zip_code", zip_code)
        object.__setattr__(
            self, "street2", self.street2.strip() if self.street2 and self.street2.strip() else None
        )
        object.__setattr__(self, "country", country)

    def _key(self) -> tuple[str, ...]:
        return tuple(
            (part or "").upper()
            for part in (self.street, self.street2, self.city, self.state, self.zip_code, self.country)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _lines(self) -> list[str]:
        lines = [self.street, self.street2, f"{self.city}, {self.state} {self.zip_code}"]
        if self.country != "USA":
            lines.append(self.country)
        return [line for line in lines if line]

    def full_address(self) -> str:
        return ", ".join(self._lines())

    def multi_line(self) -> str:
        return "\n".join(self._lines())

    def __str__(self) -> str:
        return self.full_address()
