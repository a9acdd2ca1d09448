"""
Withdrawal service.

Request, processing and rejection of user withdrawals. Processing debits the
wallet through the ledger and shrinks the earnings/referral pools with the
proportional allocation.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import SUPPORTED_CURRENCIES, quantize_money
from app.config.settings import Settings, settings as default_settings
from app.models.enums import WithdrawalStatus
from app.models.withdrawal import Withdrawal
from app.repositories.withdrawal_repository import WithdrawalRepository
from app.services.base_service import BaseService, Clock, transaction
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.wallet.ledger import WalletLedger
from app.utils.exceptions import (
    InsufficientBalance,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from app.utils.validation import (
    sanitize_input,
    validate_amount,
    validate_transaction_hash,
    validate_withdrawal_address,
)


class WithdrawalService(BaseService):
    """Withdrawal lifecycle service."""

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
        config: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(session, clock)
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.config = config or default_settings
        self.withdrawal_repo = WithdrawalRepository(session)
        self.ledger = WalletLedger(session, clock=self.clock)

    def calculate_fee(self, amount: Decimal) -> Decimal:
        """
        Fee charged for a withdrawal (paid by the system).

        Args:
            amount: Withdrawal amount

        Returns:
            amount * withdrawal_fee_percent + withdrawal_fee_fixed
        """
        percent = Decimal(str(self.config.withdrawal_fee_percent))
        fixed = Decimal(str(self.config.withdrawal_fee_fixed))
        return quantize_money(amount * percent + fixed)

    @transaction
    async def request_withdrawal(
        self,
        user_id: int,
        amount: Decimal,
        currency: str,
        wallet_address: str,
        network: str | None = None,
    ) -> Withdrawal:
        """
        Create a PENDING withdrawal request.

        The balance is not touched until the request is processed.

        Args:
            user_id: Requesting user
            amount: Requested amount
            currency: Currency code
            wallet_address: Destination address
            network: Network code

        Returns:
            Created withdrawal

        Raises:
            ValidationError: Withdrawals disabled, bad amount or address
            InsufficientBalance: Amount exceeds the withdrawable balance
            StateConflictError: User already has a pending withdrawal
        """
        if not self.config.withdrawals_enabled:
            raise ValidationError("Withdrawals are temporarily disabled")

        amount = quantize_money(Decimal(amount))
        min_amount = Decimal(str(self.config.min_withdrawal_amount))
        if not validate_amount(amount, min_amount=min_amount):
            raise ValidationError(
                f"Withdrawal amount must be at least {min_amount}"
            )
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {currency}")

        wallet_address = (wallet_address or "").strip()
        if not validate_withdrawal_address(wallet_address, currency, network):
            raise ValidationError(
                f"Invalid {network or currency} wallet address"
            )

        wallet = await self.ledger.get_locked_wallet(user_id)
        withdrawable = wallet.withdrawable_balance
        if amount > withdrawable:
            raise InsufficientBalance(
                f"Insufficient withdrawable balance: available "
                f"{withdrawable:.2f}, requested {amount:.2f}"
            )

        if await self.withdrawal_repo.get_pending_for_user(user_id):
            raise StateConflictError(
                "You already have a pending withdrawal request"
            )

        withdrawal = await self.withdrawal_repo.create(
            user_id=user_id,
            amount=amount,
            fee_amount=self.calculate_fee(amount),
            currency=currency,
            network=network,
            wallet_address=wallet_address,
            status=WithdrawalStatus.PENDING.value,
            created_at=self.clock(),
        )

        self.logger.info(
            "Withdrawal requested",
            extra={
                "withdrawal_id": withdrawal.id,
                "user_id": user_id,
                "amount": str(amount),
                "currency": currency,
                "network": network,
            },
        )
        return withdrawal

    async def process_withdrawal(
        self,
        withdrawal_id: int,
        admin_id: int,
        tx_hash: str | None = None,
    ) -> Withdrawal:
        """
        Process a PENDING withdrawal: debit the wallet and shrink the pools.

        With a transaction hash the withdrawal is COMPLETED, otherwise it is
        APPROVED and the payout happens off-platform.

        Args:
            withdrawal_id: Withdrawal ID
            admin_id: Processing admin
            tx_hash: Payout transaction hash

        Returns:
            The withdrawal

        Raises:
            NotFoundError: Unknown withdrawal
            StateConflictError: Withdrawal is not PENDING
            ValidationError: Bad transaction hash
        """
        withdrawal = await self._process(withdrawal_id, admin_id, tx_hash)
        self.dispatcher.notify(
            withdrawal.user_id,
            "withdrawal_processed",
            {
                "amount": f"{withdrawal.amount:.2f}",
                "currency": withdrawal.currency,
                "status": withdrawal.status,
            },
        )
        return withdrawal

    @transaction
    async def _process(
        self, withdrawal_id: int, admin_id: int, tx_hash: str | None
    ) -> Withdrawal:
        if tx_hash is not None:
            tx_hash = tx_hash.strip()
            if not validate_transaction_hash(tx_hash):
                raise ValidationError("Invalid transaction hash format")

        withdrawal = await self._get_pending_for_update(withdrawal_id)

        debit = await self.ledger.debit_withdrawal(
            user_id=withdrawal.user_id,
            amount=withdrawal.amount,
            description=(
                f"Withdrawal processed - {withdrawal.amount} "
                f"{withdrawal.currency} (fee {withdrawal.fee_amount} "
                f"paid by system)"
            ),
            reference_id=withdrawal.id,
        )

        withdrawal.earnings_deduction = debit.allocation.earnings_deduction
        withdrawal.bonus_deduction = debit.allocation.bonus_deduction
        withdrawal.processed_by = admin_id
        withdrawal.processed_at = self.clock()
        withdrawal.transaction_hash = tx_hash
        withdrawal.status = (
            WithdrawalStatus.COMPLETED.value
            if tx_hash
            else WithdrawalStatus.APPROVED.value
        )
        await self.session.flush()

        self.logger.info(
            "Withdrawal processed",
            extra={
                "withdrawal_id": withdrawal.id,
                "user_id": withdrawal.user_id,
                "amount": str(withdrawal.amount),
                "earnings_deduction": str(withdrawal.earnings_deduction),
                "bonus_deduction": str(withdrawal.bonus_deduction),
                "status": withdrawal.status,
                "admin_id": admin_id,
            },
        )
        return withdrawal

    async def reject_withdrawal(
        self, withdrawal_id: int, admin_id: int, reason: str
    ) -> Withdrawal:
        """
        Reject a PENDING withdrawal. The balance is untouched.

        Args:
            withdrawal_id: Withdrawal ID
            admin_id: Rejecting admin
            reason: Reason shown to the user

        Returns:
            The withdrawal
        """
        withdrawal = await self._reject(withdrawal_id, admin_id, reason)
        self.dispatcher.notify(
            withdrawal.user_id,
            "withdrawal_rejected",
            {
                "amount": f"{withdrawal.amount:.2f}",
                "currency": withdrawal.currency,
                "reason": withdrawal.rejection_reason,
            },
        )
        return withdrawal

    @transaction
    async def _reject(
        self, withdrawal_id: int, admin_id: int, reason: str
    ) -> Withdrawal:
        reason = sanitize_input(reason or "")
        if not reason:
            raise ValidationError("Rejection reason is required")

        withdrawal = await self._get_pending_for_update(withdrawal_id)
        withdrawal.status = WithdrawalStatus.REJECTED.value
        withdrawal.rejection_reason = reason
        withdrawal.processed_by = admin_id
        withdrawal.processed_at = self.clock()
        await self.session.flush()

        self.logger.info(
            "Withdrawal rejected",
            extra={
                "withdrawal_id": withdrawal_id,
                "admin_id": admin_id,
                "reason": reason,
            },
        )
        return withdrawal

    async def _get_pending_for_update(self, withdrawal_id: int) -> Withdrawal:
        withdrawal = await self.withdrawal_repo.get_for_update(withdrawal_id)
        if not withdrawal:
            raise NotFoundError(f"Withdrawal {withdrawal_id} not found")
        if withdrawal.status != WithdrawalStatus.PENDING:
            raise StateConflictError(
                f"Withdrawal is {withdrawal.status}, only pending "
                f"withdrawals can be processed"
            )
        return withdrawal

    async def get_user_withdrawals(self, user_id: int) -> list[Withdrawal]:
        """Withdrawal history of a user, newest first."""
        return await self.withdrawal_repo.get_by_user(user_id)
