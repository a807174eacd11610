"""Solana wallet address helpers."""

import re

BASE58_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")


def wallet_address_error(address: str | None) -> str | None:
    """Return a human message describing what is wrong with ``address``, or None."""
    if not address:
        return "Wallet address is required"
    if len(address) < 32 or len(address) > 44:
        return "Invalid wallet address length"
    if not BASE58_PATTERN.match(address):
        return "Invalid wallet address format"
    return None


def truncate_address(address: str, chars: int = 8) -> str:
    if len(address) <= chars * 2:
        return address
    return f"{address[:chars]}...{address[-chars:]}"
