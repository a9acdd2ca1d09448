"""
Wallet ledger.

Single entry point for balance mutations. Every change of Wallet.balance
goes through adjust_balance, which applies the mutation and inserts the
matching audit Transaction in the caller's unit of work.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    CLAMPING_TRANSACTION_TYPES,
    WITHDRAWABLE_TRANSACTION_TYPES,
    quantize_money,
)
from app.models.enums import TransactionType
from app.models.transaction import Transaction
from app.models.wallet import Wallet
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.repositories.wallet_repository import WalletRepository
from app.services.base_service import BaseService, Clock
from app.services.wallet.allocation import (
    WithdrawalAllocation,
    allocate_withdrawal,
)
from app.utils.exceptions import (
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
)


@dataclass
class WithdrawalDebit:
    """Transaction and pool split recorded for a processed withdrawal."""

    transaction: Transaction
    allocation: WithdrawalAllocation


class WalletLedger(BaseService):
    """
    Atomic balance mutation plus audit trail.

    Methods flush but never commit; the calling service owns the unit of
    work so the mutation and its Transaction row land together or not at
    all.
    """

    def __init__(
        self, session: AsyncSession, clock: Clock | None = None
    ) -> None:
        super().__init__(session, clock)
        self.wallet_repo = WalletRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.user_repo = UserRepository(session)

    async def get_locked_wallet(self, user_id: int) -> Wallet:
        """
        Lock and return the user's wallet, creating it if missing.

        Args:
            user_id: Wallet owner

        Returns:
            Wallet row locked for the current transaction

        Raises:
            NotFoundError: If the user does not exist
        """
        wallet = await self.wallet_repo.get_by_user_id_for_update(user_id)
        if wallet:
            return wallet

        if not await self.user_repo.exists(id=user_id):
            raise NotFoundError(f"User {user_id} not found")

        return await self.wallet_repo.create(user_id=user_id)

    async def adjust_balance(
        self,
        user_id: int,
        signed_amount: Decimal,
        type: TransactionType | str,
        description: str,
        reference_id: Any = None,
    ) -> Transaction:
        """
        Apply a signed balance change and record it.

        Credits also bump the aggregate matching the type (total_deposits,
        total_earnings + daily_earnings, total_referral_bonus). A debit
        that would take the balance below zero is rejected, except for
        types in CLAMPING_TRANSACTION_TYPES, where the balance is set to
        zero and the difference is absorbed by the system.

        Args:
            user_id: Wallet owner
            signed_amount: Credit (> 0) or debit (< 0)
            type: Transaction type
            description: Audit description
            reference_id: Originating entity id

        Returns:
            Created Transaction

        Raises:
            ValidationError: If amount is zero
            NotFoundError: If the user does not exist
            LedgerIntegrityError: If the balance would go negative
        """
        amount = quantize_money(Decimal(signed_amount))
        if amount == 0:
            raise ValidationError("Balance adjustment amount must be non-zero")

        type = TransactionType(type)
        wallet = await self.get_locked_wallet(user_id)

        balance_before = wallet.balance
        balance_after = balance_before + amount

        if balance_after < 0:
            if type not in CLAMPING_TRANSACTION_TYPES:
                self.logger.warning(
                    "Rejected balance adjustment below zero",
                    extra={
                        "user_id": user_id,
                        "type": type.value,
                        "amount": str(amount),
                        "balance": str(balance_before),
                    },
                )
                raise LedgerIntegrityError(
                    f"Balance of user {user_id} would become negative"
                )

            balance_after = Decimal("0")

        wallet.balance = balance_after
        if amount > 0:
            self._apply_credit_aggregates(wallet, type, amount)

        transaction = await self.transaction_repo.create(
            user_id=user_id,
            type=type.value,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            description=description,
            reference_id=str(reference_id) if reference_id is not None else None,
            created_at=self.clock(),
        )

        if transaction.shortfall:
            self.logger.warning(
                "Clamping balance to zero, shortfall absorbed by system",
                extra={
                    "user_id": user_id,
                    "type": type.value,
                    "shortfall": str(transaction.shortfall),
                },
            )

        self.logger.info(
            "Balance adjusted",
            extra={
                "user_id": user_id,
                "type": type.value,
                "amount": str(amount),
                "balance_before": str(balance_before),
                "balance_after": str(balance_after),
                "reference_id": reference_id,
            },
        )
        return transaction

    @staticmethod
    def _apply_credit_aggregates(
        wallet: Wallet, type: TransactionType, amount: Decimal
    ) -> None:
        if type == TransactionType.DEPOSIT:
            wallet.total_deposits += amount
        elif type == TransactionType.VIP_EARNINGS:
            wallet.total_earnings += amount
            wallet.daily_earnings += amount
        elif type == TransactionType.REFERRAL_BONUS:
            wallet.total_referral_bonus += amount

    async def debit_withdrawal(
        self,
        user_id: int,
        amount: Decimal,
        description: str,
        reference_id: Any = None,
    ) -> WithdrawalDebit:
        """
        Debit a processed withdrawal and shrink the withdrawable pools.

        Args:
            user_id: Wallet owner
            amount: Withdrawal amount (positive)
            description: Audit description
            reference_id: Withdrawal id

        Returns:
            WithdrawalDebit with the WITHDRAWAL transaction and pool split
        """
        wallet = await self.get_locked_wallet(user_id)
        allocation = allocate_withdrawal(
            amount, wallet.total_earnings, wallet.total_referral_bonus
        )

        transaction = await self.adjust_balance(
            user_id=user_id,
            signed_amount=-amount,
            type=TransactionType.WITHDRAWAL,
            description=description,
            reference_id=reference_id,
        )

        wallet.total_earnings = allocation.earnings_remaining
        wallet.total_referral_bonus = allocation.bonus_remaining
        wallet.last_withdrawal_at = self.clock()
        await self.session.flush()

        return WithdrawalDebit(transaction=transaction, allocation=allocation)

    async def get_wallet_stats(self, user_id: int) -> dict[str, Any]:
        """
        Get wallet balances and aggregates.

        Args:
            user_id: Wallet owner

        Returns:
            Dict with balance, pools, withdrawable amount and totals

        Raises:
            NotFoundError: If the user has no wallet
        """
        wallet = await self.wallet_repo.get_by_user_id(user_id)
        if not wallet:
            raise NotFoundError(f"Wallet for user {user_id} not found")

        # Pools shrink on withdrawal, the audit rows keep lifetime totals
        lifetime = await self.transaction_repo.sum_by_types(
            user_id, WITHDRAWABLE_TRANSACTION_TYPES
        )

        return {
            "balance": wallet.balance,
            "total_deposits": wallet.total_deposits,
            "total_earnings": wallet.total_earnings,
            "total_referral_bonus": wallet.total_referral_bonus,
            "daily_earnings": wallet.daily_earnings,
            "withdrawable_balance": wallet.withdrawable_balance,
            "last_withdrawal_at": wallet.last_withdrawal_at,
            "lifetime_credits": {
                str(type): total for type, total in lifetime.items()
            },
        }

    async def get_transaction_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        type: str | None = None,
    ) -> dict[str, Any]:
        """
        Get paginated transaction history.

        Args:
            user_id: Wallet owner
            page: Page number (1-indexed)
            limit: Items per page
            type: Optional transaction type filter

        Returns:
            Dict with transactions and pagination info
        """
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")
        if type is not None:
            try:
                type = TransactionType(type).value
            except ValueError:
                raise ValidationError(f"Unknown transaction type: {type}")

        transactions, total = await self.transaction_repo.get_history(
            user_id, page=page, limit=limit, type=type
        )
        return {
            "transactions": transactions,
            "total": total,
            "page": page,
            "pages": (total + limit - 1) // limit,
        }
