"""
Referral query management module.

Read-only referral views: the bonuses a referrer has received and the
downline tree below a user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    REFERRAL_BONUS_PAGE_LIMIT,
    REFERRAL_TREE_DEFAULT_DEPTH,
    REFERRAL_TREE_MAX_DEPTH,
)
from app.models.user import User
from app.repositories.referral_bonus_repository import (
    ReferralBonusRepository,
)
from app.repositories.user_repository import UserRepository
from app.utils.exceptions import NotFoundError, ValidationError


@dataclass
class ReferralTreeNode:
    """One user in a downline tree."""

    user_id: int
    name: str
    referral_code: str | None
    level: int
    joined_at: datetime
    is_active: bool
    balance: Decimal
    total_deposits: Decimal
    children: list["ReferralTreeNode"] = field(default_factory=list)

    @property
    def children_count(self) -> int:
        return len(self.children)


class ReferralQueryManager:
    """Manages referral query operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize query manager."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.bonus_repo = ReferralBonusRepository(session)

    async def get_bonus_history(
        self, user_id: int, page: int = 1, limit: int = 20
    ) -> dict[str, Any]:
        """
        Get bonuses received by a referrer, newest first.

        Args:
            user_id: Referrer user ID
            page: Page number (1-indexed)
            limit: Items per page (at most REFERRAL_BONUS_PAGE_LIMIT)

        Returns:
            Dict with bonuses, total, page, pages

        Raises:
            ValidationError: Page or limit out of range
        """
        if page < 1:
            raise ValidationError("Page must be a positive integer")
        if not 1 <= limit <= REFERRAL_BONUS_PAGE_LIMIT:
            raise ValidationError(
                f"Limit must be between 1 and {REFERRAL_BONUS_PAGE_LIMIT}"
            )

        bonuses, total = await self.bonus_repo.get_history(
            user_id, page=page, limit=limit
        )
        return {
            "bonuses": bonuses,
            "total": total,
            "page": page,
            "pages": (total + limit - 1) // limit,
        }

    async def get_referral_tree(
        self, user_id: int, depth: int = REFERRAL_TREE_DEFAULT_DEPTH
    ) -> dict[str, Any]:
        """
        Build the downline below a user, one query per level.

        A user already placed in the tree is not expanded again, so corrupt
        parent pointers cannot loop.

        Args:
            user_id: Root user ID (not part of the tree)
            depth: Levels to include (1 to REFERRAL_TREE_MAX_DEPTH)

        Returns:
            Dict with tree (level 1 nodes), depth, total_nodes and
            total_deposits over all nodes

        Raises:
            ValidationError: Depth out of range
            NotFoundError: Unknown user
        """
        if not 1 <= depth <= REFERRAL_TREE_MAX_DEPTH:
            raise ValidationError(
                f"Depth must be between 1 and {REFERRAL_TREE_MAX_DEPTH}"
            )
        if not await self.user_repo.exists(id=user_id):
            raise NotFoundError(f"User {user_id} not found")

        roots: list[ReferralTreeNode] = []
        placed: dict[int, ReferralTreeNode] = {}
        seen = {user_id}
        frontier = [user_id]
        total_deposits = Decimal("0")

        for level in range(1, depth + 1):
            users = await self.user_repo.get_direct_referrals(frontier)
            frontier = []
            for user in users:
                if user.id in seen:
                    continue
                seen.add(user.id)

                node = self._make_node(user, level)
                total_deposits += node.total_deposits
                if level == 1:
                    roots.append(node)
                else:
                    placed[user.referred_by].children.append(node)
                placed[user.id] = node
                frontier.append(user.id)

            if not frontier:
                break

        return {
            "tree": roots,
            "depth": depth,
            "total_nodes": len(placed),
            "total_deposits": total_deposits,
        }

    @staticmethod
    def _make_node(user: User, level: int) -> ReferralTreeNode:
        wallet = user.wallet
        return ReferralTreeNode(
            user_id=user.id,
            name=user.display_name,
            referral_code=user.referral_code,
            level=level,
            joined_at=user.created_at,
            is_active=user.is_active,
            balance=wallet.balance if wallet else Decimal("0"),
            total_deposits=wallet.total_deposits if wallet else Decimal("0"),
        )
