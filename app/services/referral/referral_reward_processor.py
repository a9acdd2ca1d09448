"""
Referral reward processor.

Multi-level referral bonus engine: walks up to three referrers above the
paying user and credits each one in its own database transaction.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import TransactionType
from app.repositories.referral_bonus_repository import (
    ReferralBonusRepository,
)
from app.repositories.user_repository import UserRepository
from app.services.base_service import Clock
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.referral.chain_manager import (
    ChainLink,
    ReferralChainManager,
)
from app.services.referral.config import REFERRAL_RATES, calculate_level_bonus
from app.services.referral.referral_notifications import (
    notify_referral_bonus,
)
from app.services.wallet.ledger import WalletLedger
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import NotFoundError

# Type alias for the event a bonus originates from
SourceKind = Literal["vip", "deposit"]


@dataclass
class BonusResult:
    """One credited referral level."""

    referrer_id: int
    level: int
    rate: Decimal
    amount: Decimal
    transaction_id: int
    referral_bonus_id: int


class ReferralRewardProcessor:
    """
    Referral bonus engine.

    Every credited level is committed on its own: wallet credit, the
    REFERRAL_BONUS transaction and the ReferralBonus row. A failing level
    is rolled back and re-raised; levels credited before it stay
    committed. Callers must have committed their own work beforehand.
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize referral reward processor.

        Args:
            session: Async database session
            dispatcher: Notification dispatcher for credited referrers
            clock: Callable returning the current UTC datetime
        """
        self.session = session
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.clock = clock or utc_now
        self.user_repo = UserRepository(session)
        self.bonus_repo = ReferralBonusRepository(session)
        self.chain_manager = ReferralChainManager(session)
        self.ledger = WalletLedger(session, clock=self.clock)

    async def process_multi_level_bonus(
        self,
        paying_user_id: int,
        qualifying_amount: Decimal,
        source_event_id: int | None = None,
        source_kind: SourceKind = "vip",
    ) -> list[BonusResult]:
        """
        Credit referral bonuses for a qualifying payment.

        Args:
            paying_user_id: User who paid
            qualifying_amount: Amount the bonuses are computed from
            source_event_id: VIP level id or deposit id of the payment
            source_kind: "vip" or "deposit"

        Returns:
            BonusResult per credited level (empty without referrer)

        Raises:
            NotFoundError: If the paying user does not exist
            Exception: Whatever aborted a level's credit
        """
        payer = await self.user_repo.get_by_id(paying_user_id)
        if not payer:
            raise NotFoundError(f"User {paying_user_id} not found")

        payer_name = payer.display_name
        chain = await self.chain_manager.get_referral_chain(paying_user_id)

        if not chain:
            logger.debug(
                "No referrers found for user",
                extra={"user_id": paying_user_id},
            )
            return []

        amount = Decimal(qualifying_amount)
        results: list[BonusResult] = []

        for link in chain:
            bonus = calculate_level_bonus(amount, link.level)
            if bonus <= 0:
                continue

            result = await self._credit_level(
                link=link,
                bonus=bonus,
                paying_user_id=paying_user_id,
                payer_name=payer_name,
                amount=amount,
                source_event_id=source_event_id,
                source_kind=source_kind,
            )
            results.append(result)

            notify_referral_bonus(
                self.dispatcher,
                result,
                source_name=payer_name,
                source_amount=amount,
            )

        logger.info(
            "Referral bonuses processed",
            extra={
                "user_id": paying_user_id,
                "qualifying_amount": str(amount),
                "source_kind": source_kind,
                "source_event_id": source_event_id,
                "levels_credited": len(results),
                "total_bonus": str(sum(r.amount for r in results)),
            },
        )
        return results

    async def _credit_level(
        self,
        link: ChainLink,
        bonus: Decimal,
        paying_user_id: int,
        payer_name: str,
        amount: Decimal,
        source_event_id: int | None,
        source_kind: SourceKind,
    ) -> BonusResult:
        rate = REFERRAL_RATES[link.level]
        source_label = "VIP payment" if source_kind == "vip" else "deposit"
        description = (
            f"Level {link.level} referral bonus from {payer_name} "
            f"({source_label}: ${amount})"
        )

        try:
            transaction = await self.ledger.adjust_balance(
                user_id=link.user_id,
                signed_amount=bonus,
                type=TransactionType.REFERRAL_BONUS,
                description=description,
                reference_id=paying_user_id,
            )
            record = await self.bonus_repo.create(
                referrer_id=link.user_id,
                referred_id=paying_user_id,
                bonus_amount=bonus,
                bonus_rate=rate,
                level=link.level,
                vip_level_id=source_event_id if source_kind == "vip" else None,
                deposit_id=(
                    source_event_id if source_kind == "deposit" else None
                ),
                transaction_id=transaction.id,
                created_at=self.clock(),
            )
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Referral bonus credit failed",
                extra={
                    "referrer_id": link.user_id,
                    "referred_id": paying_user_id,
                    "level": link.level,
                    "amount": str(bonus),
                    "error": str(e),
                },
            )
            raise

        logger.info(
            "Referral bonus credited",
            extra={
                "referrer_id": link.user_id,
                "referred_id": paying_user_id,
                "level": link.level,
                "rate": str(rate),
                "amount": str(bonus),
            },
        )

        return BonusResult(
            referrer_id=link.user_id,
            level=link.level,
            rate=rate,
            amount=bonus,
            transaction_id=transaction.id,
            referral_bonus_id=record.id,
        )
