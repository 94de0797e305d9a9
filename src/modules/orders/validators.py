"""NF-e access key validation.

An NF-e access key has 44 digits; the last one is a Modulo 11 check
digit over the first 43.  Weights 2..9 are applied right-to-left,
cycling back to 2 after 9.  With ``r = sum % 11`` the check digit is
``0`` when ``r < 2`` and ``11 - r`` otherwise.
"""

from __future__ import annotations

import re

from modules.orders.constants import NFE_ACCESS_KEY_LENGTH

_DIGITS_ONLY = re.compile(rf"^\d{{{NFE_ACCESS_KEY_LENGTH}}}$")
_WEIGHTS = (2, 3, 4, 5, 6, 7, 8, 9)


def nfe_check_digit(body: str) -> int:
    """Compute the Modulo 11 check digit for the first 43 digits of a key."""
    total = sum(
        int(digit) * _WEIGHTS[position % len(_WEIGHTS)]
        for position, digit in enumerate(reversed(body))
    )
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_nfe_access_key(key: str) -> bool:
    """Return ``True`` for a 44-digit key whose check digit matches."""
    if not isinstance(key, str) or not _DIGITS_ONLY.match(key):
        return False
    return nfe_check_digit(key[:-1]) == int(key[-1])
