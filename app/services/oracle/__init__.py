"""
Transaction oracle package.

Blockchain explorer lookups used to verify deposits.
"""

from app.services.oracle.explorer import ExplorerTransactionOracle
from app.services.oracle.lookup import TransactionLookup, TransactionOracle

__all__ = [
    "ExplorerTransactionOracle",
    "TransactionLookup",
    "TransactionOracle",
]
