"""
Value Objects for the domain layer.
Immutable objects that represent values and encapsulate business logic.
"""

from typing import Any, Dict, Optional, Union
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import datetime
from dataclasses import dataclass
import re


PIVOT_CURRENCY = "INR"

_CURRENCY_PATTERN = re.compile(r'^[A-Z]{3}$')

_DISPLAY_QUANTUM = Decimal('0.01')


def to_decimal(value: Union[Decimal, int, float, str], field_name: str = "amount") -> Decimal:
    """Coerce a numeric input into a Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid decimal value for {field_name}: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid decimal value for {field_name}: {value!r}")
    return result


def round_for_display(amount: Decimal) -> Decimal:
    """Round an amount to two places. Only used at the presentation boundary."""
    return amount.quantize(_DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)


def normalize_currency(code: str) -> str:
    """Validate and normalize an ISO-4217 style currency code."""
    if not code:
        raise ValueError("Currency code cannot be empty")
    normalized = code.strip().upper()
    if not _CURRENCY_PATTERN.match(normalized):
        raise ValueError(f"Invalid currency code: {code}")
    return normalized


@dataclass(frozen=True)
class ConversionRate:
    """
    Frozen snapshot of the two exchange hops used for one conversion.

    company_to_inr is INR per unit of company currency and inr_to_client is
    client currency per INR. The implied company-to-client cross rate is
    always their product.
    """

    company_to_inr: Decimal
    inr_to_client: Decimal
    timestamp: datetime

    def __post_init__(self):
        """Validate the rate snapshot."""
        object.__setattr__(self, 'company_to_inr', to_decimal(self.company_to_inr, "company_to_inr"))
        object.__setattr__(self, 'inr_to_client', to_decimal(self.inr_to_client, "inr_to_client"))

        if self.company_to_inr <= 0:
            raise ValueError("company_to_inr must be positive")
        if self.inr_to_client < 0:
            raise ValueError("inr_to_client cannot be negative")

    @classmethod
    def from_amounts(
        cls,
        amount: Decimal,
        amount_inr: Decimal,
        amount_client: Decimal,
        timestamp: datetime
    ) -> "ConversionRate":
        """Derive the snapshot from the amounts of a single two-hop conversion."""
        return cls(
            company_to_inr=amount_inr / amount,
            inr_to_client=amount_client / amount_inr,
            timestamp=timestamp
        )

    @property
    def company_to_client(self) -> Decimal:
        """Implied cross rate, company currency to client currency."""
        return self.company_to_inr * self.inr_to_client

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary. Decimals are kept as strings."""
        return {
            "company_to_inr": str(self.company_to_inr),
            "inr_to_client": str(self.inr_to_client),
            "timestamp": self.timestamp.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ConversionRate"]:
        """Rebuild a snapshot from its dictionary form."""
        if not data:
            return None
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            company_to_inr=Decimal(str(data["company_to_inr"])),
            inr_to_client=Decimal(str(data["inr_to_client"])),
            timestamp=timestamp
        )


@dataclass(frozen=True)
class BankDetails:
    """Optional bank transfer details attached to a cash receipt."""

    from_account: Optional[str] = None
    to_account: Optional[str] = None
    ifsc_code: Optional[str] = None

    def __post_init__(self):
        """Normalize the IFSC code."""
        if self.ifsc_code:
            object.__setattr__(self, 'ifsc_code', self.ifsc_code.strip().upper())

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "from_account": self.from_account,
            "to_account": self.to_account,
            "ifsc_code": self.ifsc_code
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["BankDetails"]:
        if not data:
            return None
        return cls(
            from_account=data.get("from_account"),
            to_account=data.get("to_account"),
            ifsc_code=data.get("ifsc_code")
        )
