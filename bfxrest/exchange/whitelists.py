"""엔드포인트 인자 허용 목록."""

from __future__ import annotations

from typing import AbstractSet, Any

from ..utils.exceptions import InvalidParameterError

CURRENCIES: frozenset[str] = frozenset(
    {
        "BTG",
        "DSH",
        "ETC",
        "ETP",
        "EUR",
        "GBP",
        "IOT",
        "JPY",
        "LTC",
        "NEO",
        "OMG",
        "SAN",
        "USD",
        "XMR",
        "XRP",
        "ZEC",
    }
)

# https://bitfinex.readme.io/v1/reference#rest-auth-deposit
DEPOSIT_METHODS: frozenset[str] = frozenset(
    {
        "bcash",
        "bitcoin",
        "ethereum",
        "ethereumc",
        "litecoin",
        "mastercoin",
        "monero",
        "tetheruso",
        "zcash",
    }
)

WALLET_NAMES: frozenset[str] = frozenset({"trading", "exchange", "deposit"})

ORDER_TYPES: frozenset[str] = frozenset(
    {
        "market",
        "limit",
        "stop",
        "trailing-stop",
        "fill-or-kill",
        "exchange market",
        "exchange limit",
        "exchange stop",
        "exchange trailing-stop",
        "exchange fill-or-kill",
    }
)

ORDER_SIDES: frozenset[str] = frozenset({"buy", "sell"})

OFFER_DIRECTIONS: frozenset[str] = frozenset({"lend", "loan"})


def require_member(parameter: str, value: Any, allowed: AbstractSet[Any]) -> Any:
    """``value`` 가 ``allowed`` 에 없으면 ``InvalidParameterError``."""
    if value not in allowed:
        raise InvalidParameterError(parameter, value)
    return value


__all__ = [
    "CURRENCIES",
    "DEPOSIT_METHODS",
    "OFFER_DIRECTIONS",
    "ORDER_SIDES",
    "ORDER_TYPES",
    "WALLET_NAMES",
    "require_member",
]
