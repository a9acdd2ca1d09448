"""Validation utilities for addresses, hashes and amounts."""

import re
from decimal import Decimal

from web3 import Web3


# Zero address - never a valid payout destination
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

EVM_NETWORKS = frozenset({"BEP20", "ERC20", "POLYGON", "ARBITRUM", "OPTIMISM"})

_TRON_ADDRESS_RE = re.compile(r"^T[1-9A-HJ-NP-Za-km-z]{33}$")
_BTC_ADDRESS_RE = re.compile(
    r"^(1|3)[a-km-zA-HJ-NP-Z1-9]{25,34}$|^bc1[a-z0-9]{39,59}$"
)
_HEX_64_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def validate_evm_address(address: str) -> bool:
    """
    Validate EVM (BSC / Ethereum / Polygon) wallet address.

    Args:
        address: Wallet address

    Returns:
        True if valid and not the zero address
    """
    if not address or not isinstance(address, str):
        return False
    if address.lower() == ZERO_ADDRESS:
        return False
    return Web3.is_address(address)


def validate_tron_address(address: str) -> bool:
    """Validate TRON base58 address format."""
    return bool(address) and bool(_TRON_ADDRESS_RE.match(address))


def validate_btc_address(address: str) -> bool:
    """Validate legacy, SegWit and native SegWit Bitcoin address format."""
    return bool(address) and bool(_BTC_ADDRESS_RE.match(address))


def validate_withdrawal_address(
    address: str, currency: str, network: str | None = None
) -> bool:
    """
    Validate payout address for a currency / network pair.

    Args:
        address: Destination address
        currency: Currency code
        network: Network code (ignored for BTC)

    Returns:
        True if the address format matches the network
    """
    address = (address or "").strip()

    if currency == "BTC":
        return validate_btc_address(address)
    if network == "TRC20":
        return validate_tron_address(address)
    if network is None or network in EVM_NETWORKS:
        return validate_evm_address(address)
    return False


def validate_transaction_hash(tx_hash: str) -> bool:
    """
    Validate transaction hash.

    Accepts EVM hashes (0x + 64 hex chars) and TRON hashes (64 hex chars).

    Args:
        tx_hash: Transaction hash

    Returns:
        True if valid
    """
    if not tx_hash or not isinstance(tx_hash, str):
        return False

    if tx_hash.startswith("0x"):
        tx_hash = tx_hash[2:]
    return bool(_HEX_64_RE.match(tx_hash))


def same_address(left: str | None, right: str | None) -> bool:
    """
    Compare two addresses.

    EVM addresses compare case-insensitively; base58 addresses exactly.
    """
    if not left or not right:
        return False
    left, right = left.strip(), right.strip()
    if left.lower().startswith("0x") and right.lower().startswith("0x"):
        return left.lower() == right.lower()
    return left == right


def validate_amount(
    amount: Decimal,
    min_amount: Decimal = Decimal("0.01"),
    max_amount: Decimal = Decimal("1000000"),
) -> bool:
    """
    Validate a money amount.

    Args:
        amount: Amount to validate
        min_amount: Minimum amount
        max_amount: Maximum amount

    Returns:
        True if valid
    """
    if not isinstance(amount, Decimal):
        return False

    if not amount.is_finite() or amount <= 0:
        return False

    return min_amount <= amount <= max_amount


def sanitize_input(text: str, max_length: int = 500) -> str:
    """
    Sanitize user input.

    Args:
        text: User input
        max_length: Maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Trim whitespace
    text = text.strip()

    # Limit length
    if len(text) > max_length:
        text = text[:max_length]

    # Remove null bytes
    text = text.replace("\x00", "")

    return text
