"""
Platform service.

Boundary facade used by the route layer. Every method returns a
ServiceResult: typed platform errors become failed results with their
message and code, infrastructure errors propagate.
"""

from datetime import timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    EARNING_HISTORY_LIMIT,
    REFERRAL_TREE_DEFAULT_DEPTH,
)
from app.config.settings import Settings, settings as default_settings
from app.services.base_service import (
    BaseService,
    Clock,
    ServiceResult,
    log_operation,
    service_result,
)
from app.services.deposit import DepositService
from app.services.earnings import (
    EarningSessionService,
    SessionCompletionScheduler,
    SessionProfile,
)
from app.services.notification import NotificationDispatcher
from app.services.oracle import TransactionOracle
from app.services.referral import (
    ReferralChainManager,
    ReferralQueryManager,
    ReferralStatisticsManager,
)
from app.services.vip import VipService
from app.services.wallet import WalletLedger
from app.services.withdrawal import WithdrawalService


class PlatformService(BaseService):
    """
    Facade over the platform engines.

    Engines commit their own unit of work before any notification is
    scheduled, so a failed result never leaves a notification behind.
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
        scheduler: SessionCompletionScheduler | None = None,
        config: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(session, clock)
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.config = config or default_settings

        self.sessions = EarningSessionService(
            session,
            dispatcher=self.dispatcher,
            scheduler=scheduler,
            clock=self.clock,
        )
        self.vip = VipService(
            session, dispatcher=self.dispatcher, clock=self.clock
        )
        self.deposits = DepositService(
            session,
            dispatcher=self.dispatcher,
            config=self.config,
            clock=self.clock,
        )
        self.withdrawals = WithdrawalService(
            session,
            dispatcher=self.dispatcher,
            config=self.config,
            clock=self.clock,
        )
        self.ledger = WalletLedger(session, clock=self.clock)
        self.referral_chain = ReferralChainManager(session)
        self.referral_stats = ReferralStatisticsManager(session)
        self.referral_queries = ReferralQueryManager(session)

    # Earning sessions

    @service_result
    @log_operation
    async def start_session(
        self,
        user_id: int,
        duration: SessionProfile | timedelta = SessionProfile.VIP,
    ) -> ServiceResult:
        """Start an earning session (VIP flow by default)."""
        return await self.sessions.start_session(user_id, duration)

    @service_result
    async def complete_session(self, session_id: int) -> ServiceResult:
        """Complete a session; repeated calls are no-ops."""
        return await self.sessions.complete_session(session_id)

    @service_result
    @log_operation
    async def stop_session(self, user_id: int) -> ServiceResult:
        """Stop the active session early with a prorated credit."""
        return await self.sessions.stop_session(user_id)

    @service_result
    async def get_session_status(self, user_id: int) -> ServiceResult:
        return await self.sessions.get_status(user_id)

    @service_result
    async def get_session_history(
        self, user_id: int, limit: int = EARNING_HISTORY_LIMIT
    ) -> ServiceResult:
        return await self.sessions.get_history(user_id, limit)

    # VIP

    @service_result
    async def list_vip_levels(self) -> ServiceResult:
        return await self.vip.list_levels()

    @service_result
    @log_operation
    async def purchase_vip(
        self, user_id: int, vip_level_id: int
    ) -> ServiceResult:
        """Join or upgrade a VIP tier and pay the referral chain."""
        return await self.vip.purchase(user_id, vip_level_id)

    @service_result
    async def get_vip_stats(self, user_id: int) -> ServiceResult:
        return await self.vip.get_vip_stats(user_id)

    # Referrals

    @service_result
    async def assign_referrer(
        self, user_id: int, referrer_id: int
    ) -> ServiceResult:
        await self.referral_chain.assign_referrer(user_id, referrer_id)
        return {"user_id": user_id, "referrer_id": referrer_id}

    @service_result
    async def get_referral_chain(self, user_id: int) -> ServiceResult:
        return await self.referral_chain.get_referral_chain(user_id)

    @service_result
    async def get_referral_stats(self, user_id: int) -> ServiceResult:
        return await self.referral_stats.get_referral_stats(user_id)

    @service_result
    async def get_referral_bonus_history(
        self, user_id: int, page: int = 1, limit: int = 20
    ) -> ServiceResult:
        return await self.referral_queries.get_bonus_history(
            user_id, page=page, limit=limit
        )

    @service_result
    async def get_referral_tree(
        self, user_id: int, depth: int = REFERRAL_TREE_DEFAULT_DEPTH
    ) -> ServiceResult:
        """Downline below the user, up to ``depth`` levels."""
        return await self.referral_queries.get_referral_tree(user_id, depth)

    # Deposits

    @service_result
    @log_operation
    async def create_deposit(
        self,
        user_id: int,
        amount: Decimal,
        currency: str = "USDT",
        network: str | None = None,
        tx_hash: str | None = None,
    ) -> ServiceResult:
        return await self.deposits.create_deposit(
            user_id, amount, currency=currency, network=network,
            tx_hash=tx_hash,
        )

    @service_result
    async def confirm_deposit(self, deposit_id: int) -> ServiceResult:
        return await self.deposits.confirm_deposit(deposit_id)

    @service_result
    async def reject_deposit(
        self, deposit_id: int, reason: str
    ) -> ServiceResult:
        return await self.deposits.reject_deposit(deposit_id, reason)

    @service_result
    async def verify_deposit(
        self, deposit_id: int, oracle: TransactionOracle
    ) -> ServiceResult:
        """Check a pending deposit against the blockchain."""
        return await self.deposits.verify_with_oracle(deposit_id, oracle)

    @service_result
    async def get_user_deposits(
        self, user_id: int, status: str | None = None
    ) -> ServiceResult:
        return await self.deposits.get_user_deposits(user_id, status=status)

    # Withdrawals

    @service_result
    @log_operation
    async def request_withdrawal(
        self,
        user_id: int,
        amount: Decimal,
        currency: str,
        wallet_address: str,
        network: str | None = None,
    ) -> ServiceResult:
        return await self.withdrawals.request_withdrawal(
            user_id, amount, currency, wallet_address, network=network
        )

    @service_result
    @log_operation
    async def process_withdrawal(
        self,
        withdrawal_id: int,
        admin_id: int,
        tx_hash: str | None = None,
    ) -> ServiceResult:
        return await self.withdrawals.process_withdrawal(
            withdrawal_id, admin_id, tx_hash=tx_hash
        )

    @service_result
    async def reject_withdrawal(
        self, withdrawal_id: int, admin_id: int, reason: str
    ) -> ServiceResult:
        return await self.withdrawals.reject_withdrawal(
            withdrawal_id, admin_id, reason
        )

    @service_result
    async def get_user_withdrawals(self, user_id: int) -> ServiceResult:
        return await self.withdrawals.get_user_withdrawals(user_id)

    # Wallet

    @service_result
    async def get_wallet_stats(self, user_id: int) -> ServiceResult:
        return await self.ledger.get_wallet_stats(user_id)

    @service_result
    async def get_transaction_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        type: str | None = None,
    ) -> ServiceResult:
        return await self.ledger.get_transaction_history(
            user_id, page=page, limit=limit, type=type
        )
