"""
Explorer response decoding.

Turns raw JSON-RPC and Tronscan payloads into TransactionLookup values.
"""

from decimal import Decimal
from typing import Any

from app.services.oracle.lookup import TransactionLookup

# ERC-20 Transfer(address,address,uint256) event signature
TRANSFER_TOPIC = (
    "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
)
# transfer(address,uint256) method selector
TRANSFER_SELECTOR = "0xa9059cbb"

# Stablecoin contracts and their decimals
TOKEN_DECIMALS: dict[str, int] = {
    # BSC USDT / USDC
    "0x55d398326f99059ff775485246999027b3197955": 18,
    "0x8ac76a51cc950d9822d68b83fe1ad97b32cd580d": 18,
    # Ethereum USDT / USDC
    "0xdac17f958d2ee523a2206206994597c13d831ec7": 6,
    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": 6,
    # Polygon USDT / USDC
    "0xc2132d05d31c914a87c6611c10748aeb04b58e8f": 6,
    "0x2791bca1f2de4661ed88a30c99a7a9449aa84174": 6,
}

# Fallback decimals for unknown tokens per network
NETWORK_DEFAULT_DECIMALS: dict[str, int] = {
    "BSC": 18,
    "ETHEREUM": 6,
    "POLYGON": 6,
}


def _hex_to_int(value: str | None) -> int | None:
    if not value:
        return None
    return int(value, 16)


def _topic_to_address(topic: str) -> str:
    return "0x" + topic[-40:].lower()


def _scale(raw: int, decimals: int) -> Decimal:
    return Decimal(raw) / (Decimal(10) ** decimals)


def token_decimals(contract: str | None, network: str) -> int:
    """Decimals of a token contract, falling back to the network default."""
    if contract and contract.lower() in TOKEN_DECIMALS:
        return TOKEN_DECIMALS[contract.lower()]
    return NETWORK_DEFAULT_DECIMALS.get(network, 18)


def decode_transfer_input(
    input_data: str, decimals: int
) -> tuple[str, Decimal] | None:
    """
    Decode transfer(address,uint256) call data.

    Args:
        input_data: Transaction input hex string
        decimals: Token decimals

    Returns:
        Tuple of (recipient, amount) or None if not a transfer call
    """
    if not input_data or not input_data.lower().startswith(TRANSFER_SELECTOR):
        return None
    if len(input_data) < 138:
        return None

    recipient = "0x" + input_data[34:74].lower()
    amount = _scale(int(input_data[-64:], 16), decimals)
    return recipient, amount


def parse_evm_lookup(
    network: str,
    tx: dict[str, Any] | None,
    receipt: dict[str, Any] | None,
) -> TransactionLookup:
    """
    Build a lookup from eth_getTransactionByHash and its receipt.

    The first ERC-20 Transfer log wins; without one the transfer call data
    is decoded; otherwise the native value transfer is reported.

    Args:
        network: Network name
        tx: Transaction object or None
        receipt: Receipt object or None (pending transactions)

    Returns:
        TransactionLookup
    """
    if not tx:
        return TransactionLookup.not_found()

    block_number = _hex_to_int(tx.get("blockNumber"))
    confirmed = (
        receipt is not None
        and bool(block_number)
        and receipt.get("status", "0x1") == "0x1"
    )

    sender = (tx.get("from") or "").lower() or None

    for log in (receipt or {}).get("logs") or []:
        topics = log.get("topics") or []
        if len(topics) >= 3 and topics[0].lower() == TRANSFER_TOPIC:
            contract = (log.get("address") or "").lower()
            return TransactionLookup(
                found=True,
                network=network,
                sender=_topic_to_address(topics[1]),
                recipient=_topic_to_address(topics[2]),
                amount=_scale(
                    _hex_to_int(log.get("data")) or 0,
                    token_decimals(contract, network),
                ),
                block_number=block_number,
                confirmed=confirmed,
                token_contract=contract,
            )

    contract = (tx.get("to") or "").lower() or None
    decoded = decode_transfer_input(
        tx.get("input") or "", token_decimals(contract, network)
    )
    if decoded:
        recipient, amount = decoded
        return TransactionLookup(
            found=True,
            network=network,
            sender=sender,
            recipient=recipient,
            amount=amount,
            block_number=block_number,
            confirmed=confirmed,
            token_contract=contract,
        )

    return TransactionLookup(
        found=True,
        network=network,
        sender=sender,
        recipient=contract,
        amount=_scale(_hex_to_int(tx.get("value")) or 0, 18),
        block_number=block_number,
        confirmed=confirmed,
    )


def parse_tronscan_lookup(data: dict[str, Any] | None) -> TransactionLookup:
    """
    Build a lookup from a Tronscan transaction-info response.

    Args:
        data: Decoded JSON body

    Returns:
        TransactionLookup
    """
    if not data or not data.get("hash"):
        return TransactionLookup.not_found()

    transfers = data.get("trc20TransferInfo") or []
    transfer = transfers[0] if transfers else data.get("tokenTransferInfo")

    if transfer:
        amount_str = transfer.get("amount_str")
        decimals = int(transfer.get("decimals") or 6)
        return TransactionLookup(
            found=True,
            network="TRON",
            recipient=transfer.get("to_address"),
            sender=transfer.get("from_address"),
            amount=_scale(int(amount_str), decimals) if amount_str else None,
            block_number=data.get("block"),
            confirmed=bool(data.get("confirmed")),
            token_contract=transfer.get("contract_address"),
        )

    return TransactionLookup(
        found=True,
        network="TRON",
        recipient=data.get("toAddress"),
        sender=data.get("ownerAddress"),
        block_number=data.get("block"),
        confirmed=bool(data.get("confirmed")),
    )
