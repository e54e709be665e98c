from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from exchange_proxy.core.errors import CurrencyNotFoundError, InvalidInputError
from exchange_proxy.models.constants import CURRENCY_CODE_RE

from .base import RateTable

"""Rate translation over an already-fetched USD-based table.

Everything here is pure: no I/O, no mutation of the input table.

All rates in the table are "units of currency per 1 USD", so the rate from
``base`` to ``target`` is ``table[target] / table[base]``. Re-basing onto a
currency divides every entry by that currency's USD rate, which is the same
division, so ``pair_rate(t, a, b)`` and ``rebase(t, a)[b]`` agree bit for bit.
"""


@dataclass(frozen=True)
class ConversionResult:
    rate: float
    base: str
    target: str
    converted_amount: Optional[float] = None


def _require_code(code: str) -> str:
    if not isinstance(code, str) or not CURRENCY_CODE_RE.match(code):
        raise InvalidInputError(f"malformed currency code {code!r}")
    return code


def rebase(table: RateTable, target_currency: str) -> Optional[Dict[str, float]]:
    """Re-express every rate relative to ``target_currency``; None if it is not in the table."""
    target_currency = _require_code(target_currency)
    unit = table.get(target_currency)
    if unit is None:
        return None
    return {code: rate / unit for code, rate in table.items()}


def pair_rate(table: RateTable, base: str, target: str) -> float:
    """Units of ``target`` received per 1 unit of ``base``."""
    base = _require_code(base)
    target = _require_code(target)
    if base not in table:
        raise CurrencyNotFoundError(base, "base")
    if target not in table:
        raise CurrencyNotFoundError(target, "target")
    return table[target] / table[base]


def convert(table: RateTable, base: str, target: str, amount: float) -> ConversionResult:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidInputError("amount must be a number")
    try:
        value = float(amount)
    except OverflowError as e:
        raise InvalidInputError("amount out of range") from e
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError("amount must be a positive, finite number")
    rate = pair_rate(table, base, target)
    converted = rate * value
    if not math.isfinite(converted):
        raise InvalidInputError("converted amount out of range")
    return ConversionResult(rate=rate, base=base, target=target, converted_amount=converted)
