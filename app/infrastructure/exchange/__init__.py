"""
Exchange rate infrastructure.
"""

from .exchange_rate_gateway import ExchangeRateApiGateway

__all__ = [
    "ExchangeRateApiGateway",
]
