"""Currency code constants used for validation.

ISO_CURRENCY_CODES follows the ISO 4217 code list (active codes plus funds,
precious metals and testing codes).
"""

import re
from typing import FrozenSet, Tuple

CURRENCY_CODE_RE = re.compile(r"^[A-Z]{3}$")
TICKER_SYMBOL_RE = re.compile(r"^[A-Za-z]{2,7}$")

ISO_CURRENCY_CODES: FrozenSet[str] = frozenset(
    """
    AED AFN ALL AMD ANG AOA ARS AUD AWG AZN BAM BBD BDT BGN BHD BIF BMD BND
    BOB BOV BRL BSD BTN BWP BYN BZD CAD CDF CHE CHF CHW CLF CLP CNY COP COU
    CRC CUC CUP CVE CZK DJF DKK DOP DZD EGP ERN ETB EUR FJD FKP GBP GEL GHS
    GIP GMD GNF GTQ GYD HKD HNL HRK HTG HUF IDR ILS INR IQD IRR ISK JMD JOD
    JPY KES KGS KHR KMF KPW KRW KWD KYD KZT LAK LBP LKR LRD LSL LYD MAD MDL
    MGA MKD MMK MNT MOP MRU MUR MVR MWK MXN MXV MYR MZN NAD NGN NIO NOK NPR
    NZD OMR PAB PEN PGK PHP PKR PLN PYG QAR RON RSD RUB RWF SAR SBD SCR SDG
    SEK SGD SHP SLE SLL SOS SRD SSP STN SVC SYP SZL THB TJS TMT TND TOP TRY
    TTD TWD TZS UAH UGX USD USN UYI UYU UYW UZS VED VES VND VUV WST XAF XAG
    XAU XBA XBB XBC XBD XCD XCG XDR XOF XPD XPF XPT XSU XTS XUA XXX YER ZAR
    ZMW ZWG ZWL
    """.split()
)

# Widely traded currencies, handy for client-side pickers.
COMMON_CURRENCIES: Tuple[str, ...] = (
    "USD", "EUR", "CNY", "JPY", "GBP", "AUD", "CAD", "CHF",
    "HKD", "SGD", "SEK", "KRW", "NOK", "MXN", "INR", "RUB",
    "ZAR", "TRY", "BRL", "TWD", "DKK", "PLN", "THB", "IDR",
    "HUF", "CZK", "ILS", "CLP", "PHP", "AED", "COP", "SAR",
    "MYR", "RON",
)  # fmt: skip


def is_valid_currency_code(code: str) -> bool:
    return bool(CURRENCY_CODE_RE.match(code)) and code in ISO_CURRENCY_CODES
