"""
VIP service.

Tier catalog, membership purchase and upgrade, and VIP statistics.
A successful purchase triggers the referral bonus engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import DEFAULT_VIP_LEVELS
from app.models.enums import TransactionType
from app.models.vip_level import VipLevel
from app.repositories.earnings_session_repository import (
    EarningsSessionRepository,
)
from app.repositories.user_repository import UserRepository
from app.repositories.vip_repository import (
    UserVipRepository,
    VipLevelRepository,
)
from app.services.base_service import BaseService, Clock, transaction
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.referral.referral_reward_processor import (
    BonusResult,
    ReferralRewardProcessor,
)
from app.services.vip.pricing import calculate_upgrade_payment
from app.services.wallet.ledger import WalletLedger
from app.utils.datetime_utils import start_of_day
from app.utils.exceptions import InsufficientBalance, NotFoundError


@dataclass
class PurchaseResult:
    """Outcome of a VIP purchase or upgrade."""

    user_id: int
    user_vip_id: int
    vip_level_id: int
    vip_level_name: str
    daily_earning: Decimal
    amount_paid: Decimal
    total_paid: Decimal
    is_upgrade: bool
    bonuses: list[BonusResult] = field(default_factory=list)
    bonus_error: str | None = None


class VipService(BaseService):
    """VIP membership service."""

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(session, clock)
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.level_repo = VipLevelRepository(session)
        self.user_vip_repo = UserVipRepository(session)
        self.user_repo = UserRepository(session)
        self.session_repo = EarningsSessionRepository(session)
        self.ledger = WalletLedger(session, clock=self.clock)
        self.referral_processor = ReferralRewardProcessor(
            session, dispatcher=self.dispatcher, clock=self.clock
        )

    async def list_levels(self) -> list[VipLevel]:
        """Active tiers, cheapest first."""
        return await self.level_repo.get_active_levels()

    async def get_level(self, vip_level_id: int) -> VipLevel:
        """
        Get a tier by id, active or not.

        Raises:
            NotFoundError: Unknown tier
        """
        level = await self.level_repo.get_by_id(vip_level_id)
        if not level:
            raise NotFoundError(f"VIP level {vip_level_id} not found")
        return level

    async def purchase(
        self, user_id: int, vip_level_id: int
    ) -> PurchaseResult:
        """
        Join a VIP tier or upgrade to a more expensive one.

        The payment is committed first. Referral bonuses for the amount
        actually paid are processed afterwards; a bonus failure is logged
        and reported in the result but never undoes the purchase.

        Args:
            user_id: Buyer
            vip_level_id: Target tier

        Returns:
            PurchaseResult

        Raises:
            NotFoundError: Unknown user or inactive/unknown tier
            DowngradeNotAllowed: Target price not above total paid
            InsufficientBalance: Balance below the payment
        """
        result = await self._charge(user_id, vip_level_id)

        try:
            result.bonuses = (
                await self.referral_processor.process_multi_level_bonus(
                    paying_user_id=user_id,
                    qualifying_amount=result.amount_paid,
                    source_event_id=vip_level_id,
                )
            )
        except Exception as e:
            result.bonus_error = str(e)
            self.logger.error(
                "Referral bonus processing failed after VIP purchase",
                extra={
                    "user_id": user_id,
                    "vip_level_id": vip_level_id,
                    "amount": str(result.amount_paid),
                    "error": str(e),
                },
            )

        self.dispatcher.notify(
            user_id,
            "vip_purchased",
            {
                "level_name": result.vip_level_name,
                "amount": f"{result.amount_paid:.2f}",
                "daily_earning": f"{result.daily_earning:.2f}",
            },
        )
        return result

    @transaction
    async def _charge(self, user_id: int, vip_level_id: int) -> PurchaseResult:
        level = await self.get_level(vip_level_id)
        if not level.is_active:
            raise NotFoundError(f"VIP level {vip_level_id} not found")

        if not await self.user_repo.exists(id=user_id):
            raise NotFoundError(f"User {user_id} not found")

        membership = await self.user_vip_repo.get_by_user_id(
            user_id, for_update=True
        )
        is_upgrade = membership is not None
        total_paid = membership.total_paid if membership else Decimal("0")

        payment = calculate_upgrade_payment(total_paid, level.amount)

        wallet = await self.ledger.get_locked_wallet(user_id)
        if wallet.balance < payment:
            raise InsufficientBalance(
                f"Insufficient balance: {payment} required, "
                f"{wallet.balance} available"
            )

        action = "upgrade" if is_upgrade else "purchase"
        await self.ledger.adjust_balance(
            user_id=user_id,
            signed_amount=-payment,
            type=TransactionType.VIP_PAYMENT,
            description=f"VIP {level.name} {action}",
            reference_id=level.id,
        )

        if membership:
            membership.vip_level_id = level.id
            membership.vip_level = level
            membership.total_paid = total_paid + payment
            membership.is_active = True
            await self.session.flush()
        else:
            membership = await self.user_vip_repo.create(
                user_id=user_id,
                vip_level_id=level.id,
                total_paid=payment,
                is_active=True,
                vip_level=level,
            )

        self.logger.info(
            "VIP {} completed",
            action,
            extra={
                "user_id": user_id,
                "vip_level": level.name,
                "payment": str(payment),
                "total_paid": str(membership.total_paid),
            },
        )

        return PurchaseResult(
            user_id=user_id,
            user_vip_id=membership.id,
            vip_level_id=level.id,
            vip_level_name=level.name,
            daily_earning=level.daily_earning,
            amount_paid=payment,
            total_paid=membership.total_paid,
            is_upgrade=is_upgrade,
        )

    async def get_vip_stats(self, user_id: int) -> dict[str, Any]:
        """
        Get membership and earnings summary.

        Args:
            user_id: User ID

        Returns:
            Dict with membership, earnings totals and the active session id
        """
        membership = await self.user_vip_repo.get_by_user_id(user_id)

        today = await self.session_repo.sum_completed_earnings(
            user_id, since=start_of_day(self.clock())
        )
        total = await self.session_repo.sum_completed_earnings(user_id)
        active = await self.session_repo.get_active_for_user(user_id)

        vip: dict[str, Any] | None = None
        if membership:
            vip = {
                "vip_level_id": membership.vip_level_id,
                "name": membership.vip_level.name,
                "daily_earning": membership.vip_level.daily_earning,
                "total_paid": membership.total_paid,
                "is_active": membership.is_active,
            }

        return {
            "vip": vip,
            "today_earnings": today,
            "total_earnings": total,
            "active_session_id": active.id if active else None,
        }

    @transaction
    async def seed_levels(
        self, levels: list[dict[str, Any]] | None = None
    ) -> dict[str, int]:
        """
        Insert or update the tier catalog by name.

        Args:
            levels: Tier definitions (defaults to DEFAULT_VIP_LEVELS)

        Returns:
            Dict with created and updated counts
        """
        created = updated = 0
        for data in levels or DEFAULT_VIP_LEVELS:
            existing = await self.level_repo.get_by_name(data["name"])
            if existing:
                for key, value in data.items():
                    setattr(existing, key, value)
                updated += 1
            else:
                await self.level_repo.create(**data)
                created += 1

        await self.session.flush()
        self.logger.info(
            "VIP levels seeded",
            extra={"created": created, "updated": updated},
        )
        return {"created": created, "updated": updated}
