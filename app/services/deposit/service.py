"""
Deposit service.

Deposit creation, confirmation (credit through the wallet ledger),
rejection and verification against the transaction oracle.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    DEPOSIT_AMOUNT_TOLERANCE,
    SUPPORTED_CURRENCIES,
    SUPPORTED_NETWORKS,
)
from app.config.settings import Settings, settings as default_settings
from app.models.deposit import Deposit
from app.models.enums import DepositStatus, TransactionType
from app.repositories.deposit_repository import DepositRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, Clock, transaction
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.oracle.lookup import TransactionLookup, TransactionOracle
from app.services.wallet.ledger import WalletLedger
from app.utils.exceptions import (
    ExternalServiceError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from app.utils.validation import (
    same_address,
    sanitize_input,
    validate_amount,
    validate_transaction_hash,
)


@dataclass
class DepositVerification:
    """Outcome of checking a deposit against the oracle."""

    deposit_id: int
    confirmed: bool
    reason: str | None = None
    lookup: TransactionLookup | None = None


class DepositService(BaseService):
    """Deposit lifecycle service."""

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
        self.deposit_repo = DepositRepository(session)
        self.user_repo = UserRepository(session)
        self.ledger = WalletLedger(session, clock=self.clock)

    @transaction
    async def create_deposit(
        self,
        user_id: int,
        amount: Decimal,
        currency: str = "USDT",
        network: str | None = None,
        tx_hash: str | None = None,
    ) -> Deposit:
        """
        Register a PENDING deposit.

        Args:
            user_id: Depositing user
            amount: Declared amount
            currency: Currency code
            network: Network code
            tx_hash: Blockchain transaction hash

        Returns:
            Created deposit

        Raises:
            ValidationError: Bad amount, currency, network or hash
            NotFoundError: Unknown user
            StateConflictError: Hash already used by another deposit
        """
        amount = Decimal(amount)
        min_amount = Decimal(str(self.config.min_deposit_amount))
        if not validate_amount(amount, min_amount=min_amount):
            raise ValidationError(
                f"Deposit amount must be at least {min_amount}"
            )
        if currency not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {currency}")
        if network is not None and network not in SUPPORTED_NETWORKS:
            raise ValidationError(f"Unsupported network: {network}")

        if tx_hash is not None:
            tx_hash = tx_hash.strip()
            if not validate_transaction_hash(tx_hash):
                raise ValidationError("Invalid transaction hash format")
            if await self.deposit_repo.get_by_tx_hash(tx_hash):
                raise StateConflictError(
                    "This transaction hash has already been submitted"
                )

        if not await self.user_repo.exists(id=user_id):
            raise NotFoundError(f"User {user_id} not found")

        deposit = await self.deposit_repo.create(
            user_id=user_id,
            amount=amount,
            currency=currency,
            network=network,
            tx_hash=tx_hash,
            status=DepositStatus.PENDING.value,
            created_at=self.clock(),
        )

        self.logger.info(
            "Deposit created",
            extra={
                "deposit_id": deposit.id,
                "user_id": user_id,
                "amount": str(amount),
                "currency": currency,
                "network": network,
            },
        )
        return deposit

    async def confirm_deposit(
        self,
        deposit_id: int,
        lookup: TransactionLookup | None = None,
    ) -> Deposit:
        """
        Confirm a deposit and credit the user's balance.

        Confirming an already CONFIRMED deposit is a no-op.

        Args:
            deposit_id: Deposit ID
            lookup: Oracle details to store on the deposit

        Returns:
            The deposit

        Raises:
            NotFoundError: Unknown deposit
            StateConflictError: Deposit was rejected
        """
        deposit, credited = await self._confirm(deposit_id, lookup)
        if credited:
            self.dispatcher.notify(
                deposit.user_id,
                "deposit_confirmed",
                {"amount": f"{deposit.amount:.2f}", "currency": deposit.currency},
            )
        return deposit

    @transaction
    async def _confirm(
        self, deposit_id: int, lookup: TransactionLookup | None
    ) -> tuple[Deposit, bool]:
        deposit = await self.deposit_repo.get_for_update(deposit_id)
        if not deposit:
            raise NotFoundError(f"Deposit {deposit_id} not found")

        if deposit.status == DepositStatus.CONFIRMED:
            self.logger.debug(
                "Deposit already confirmed", extra={"deposit_id": deposit_id}
            )
            return deposit, False
        if deposit.status == DepositStatus.REJECTED:
            raise StateConflictError("Rejected deposits cannot be confirmed")

        await self.ledger.adjust_balance(
            user_id=deposit.user_id,
            signed_amount=deposit.amount,
            type=TransactionType.DEPOSIT,
            description=(
                f"Deposit of {deposit.amount} {deposit.currency}"
                + (f" via {deposit.network}" if deposit.network else "")
            ),
            reference_id=deposit.id,
        )

        deposit.status = DepositStatus.CONFIRMED.value
        deposit.confirmed_at = self.clock()
        if lookup is not None:
            deposit.block_number = lookup.block_number
            deposit.sender_address = lookup.sender
        await self.session.flush()

        self.logger.info(
            "Deposit confirmed",
            extra={
                "deposit_id": deposit.id,
                "user_id": deposit.user_id,
                "amount": str(deposit.amount),
            },
        )
        return deposit, True

    @transaction
    async def reject_deposit(self, deposit_id: int, reason: str) -> Deposit:
        """
        Reject a PENDING deposit.

        Args:
            deposit_id: Deposit ID
            reason: Rejection reason

        Returns:
            The deposit

        Raises:
            NotFoundError: Unknown deposit
            StateConflictError: Deposit is not PENDING
        """
        deposit = await self.deposit_repo.get_for_update(deposit_id)
        if not deposit:
            raise NotFoundError(f"Deposit {deposit_id} not found")
        if deposit.status != DepositStatus.PENDING:
            raise StateConflictError(
                f"Deposit is {deposit.status}, only pending deposits "
                f"can be rejected"
            )

        deposit.status = DepositStatus.REJECTED.value
        deposit.rejection_reason = sanitize_input(reason)
        await self.session.flush()

        self.logger.info(
            "Deposit rejected",
            extra={"deposit_id": deposit_id, "reason": deposit.rejection_reason},
        )
        return deposit

    async def verify_with_oracle(
        self, deposit_id: int, oracle: TransactionOracle
    ) -> DepositVerification:
        """
        Check a PENDING deposit against the blockchain.

        The deposit is confirmed when the transaction is found, confirmed,
        sent to the company wallet and carries the declared amount (within
        DEPOSIT_AMOUNT_TOLERANCE). Otherwise it stays PENDING.

        Args:
            deposit_id: Deposit ID
            oracle: Transaction oracle

        Returns:
            DepositVerification
        """
        deposit = await self.deposit_repo.get_by_id(deposit_id)
        if not deposit:
            raise NotFoundError(f"Deposit {deposit_id} not found")
        if deposit.status != DepositStatus.PENDING:
            return DepositVerification(
                deposit_id=deposit_id,
                confirmed=deposit.status == DepositStatus.CONFIRMED,
                reason=f"Deposit is {deposit.status}",
            )
        if not deposit.tx_hash:
            return DepositVerification(
                deposit_id=deposit_id,
                confirmed=False,
                reason="Deposit has no transaction hash",
            )

        tx_hash = deposit.tx_hash
        declared_amount = deposit.amount

        try:
            lookup = await oracle.check_transaction_across_networks(tx_hash)
        except Exception as e:
            # Explorer text may hold braces, so it is a format argument
            self.logger.warning(
                "Transaction lookup failed: {}",
                e,
                extra={
                    "deposit_id": deposit_id,
                    "error_code": ExternalServiceError.code,
                },
            )
            lookup = TransactionLookup.not_found()

        reason = self._mismatch_reason(lookup, declared_amount)

        deposit.last_checked_at = self.clock()
        await self.commit()

        if reason is not None:
            self.logger.info(
                "Deposit not verified yet",
                extra={"deposit_id": deposit_id, "reason": reason},
            )
            return DepositVerification(
                deposit_id=deposit_id,
                confirmed=False,
                reason=reason,
                lookup=lookup,
            )

        await self.confirm_deposit(deposit_id, lookup=lookup)
        return DepositVerification(
            deposit_id=deposit_id, confirmed=True, lookup=lookup
        )

    def _mismatch_reason(
        self, lookup: TransactionLookup, declared_amount: Decimal
    ) -> str | None:
        if not lookup.found:
            return "Transaction not found"
        if not lookup.confirmed:
            return "Transaction not confirmed"

        expected = (
            self.config.company_tron_wallet_address
            if lookup.network == "TRON"
            else self.config.company_wallet_address
        )
        if not expected:
            return "Company wallet address is not configured"
        if not same_address(lookup.recipient, expected):
            return "Recipient does not match company wallet"

        if lookup.amount is None:
            return "Transfer amount unknown"
        if abs(lookup.amount - declared_amount) > DEPOSIT_AMOUNT_TOLERANCE:
            return (
                f"Amount mismatch: declared {declared_amount}, "
                f"received {lookup.amount}"
            )
        return None

    async def get_user_deposits(
        self, user_id: int, status: str | None = None
    ) -> list[Deposit]:
        """Deposits of a user, optionally filtered by status."""
        return await self.deposit_repo.get_by_user(user_id, status=status)
