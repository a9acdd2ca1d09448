"""
Transaction lookup types.

The oracle capability consumed by deposit verification.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol


@dataclass(frozen=True)
class TransactionLookup:
    """Result of looking a transaction hash up on the explorers."""

    found: bool
    network: str | None = None
    recipient: str | None = None
    sender: str | None = None
    amount: Decimal | None = None
    block_number: int | None = None
    confirmed: bool = False
    token_contract: str | None = None

    @classmethod
    def not_found(cls) -> "TransactionLookup":
        return cls(found=False)


class TransactionOracle(Protocol):
    """Looks a transaction hash up across the supported networks."""

    async def check_transaction_across_networks(
        self, tx_hash: str
    ) -> TransactionLookup:
        ...
