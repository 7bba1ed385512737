"""
Exchange conversion gateway contract.
The settlement engine converts every payment through the INR pivot using it.
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class ExchangeGateway(ABC):
    """
    Port for live currency conversion through the INR pivot.

    Both operations use the rate prevailing at call time and raise
    ConversionUnavailableError when no rate can be obtained.
    """

    @abstractmethod
    def to_inr(self, amount: Decimal, currency: str) -> Decimal:
        """Convert an amount in `currency` to INR."""
        pass

    @abstractmethod
    def from_inr(self, amount_inr: Decimal, currency: str) -> Decimal:
        """Convert an INR amount to `currency`."""
        pass
