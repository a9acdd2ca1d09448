"""
Referral chain management module.

Handles parent-pointer traversal of the referral forest and referrer
assignment.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.user_repository import UserRepository
from app.services.referral.config import REFERRAL_DEPTH
from app.utils.exceptions import (
    NotFoundError,
    StateConflictError,
    ValidationError,
)


@dataclass(frozen=True)
class ChainLink:
    """Ancestor of a user at a given referral level."""

    user_id: int
    level: int


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_referral_chain(
        self, user_id: int, depth: int | None = REFERRAL_DEPTH
    ) -> list[ChainLink]:
        """
        Get ancestors of a user, direct referrer first.

        Follows referred_by one hop at a time. Stops after `depth` hops, at
        a root, or when an id repeats (a cycle introduced by bad data).

        Args:
            user_id: User ID
            depth: Max hops; None walks until a root or a repeat

        Returns:
            List of ChainLink from level 1 upwards
        """
        chain: list[ChainLink] = []
        seen = {user_id}
        current = user_id
        level = 0

        while depth is None or level < depth:
            parent = await self.user_repo.get_referrer_id(current)
            if parent is None:
                break
            if parent in seen:
                logger.warning(
                    "Referral cycle detected, chain walk stopped",
                    extra={
                        "user_id": user_id,
                        "repeated_id": parent,
                        "chain": [link.user_id for link in chain],
                    },
                )
                break

            level += 1
            chain.append(ChainLink(user_id=parent, level=level))
            seen.add(parent)
            current = parent

        logger.debug(
            "Referral chain retrieved",
            extra={
                "user_id": user_id,
                "depth": depth,
                "chain_length": len(chain),
            },
        )
        return chain

    async def assign_referrer(self, user_id: int, referrer_id: int) -> None:
        """
        Set the referrer of a user.

        Args:
            user_id: User being referred
            referrer_id: Direct referrer

        Raises:
            ValidationError: Self referral or an assignment closing a cycle
            NotFoundError: Unknown user or referrer
            StateConflictError: User already has a referrer
        """
        if user_id == referrer_id:
            raise ValidationError("A user cannot refer themselves")

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        if not await self.user_repo.exists(id=referrer_id):
            raise NotFoundError(f"Referrer {referrer_id} not found")

        if user.referred_by is not None:
            raise StateConflictError("Referrer is already assigned")

        ancestors = await self.get_referral_chain(referrer_id, depth=None)
        if user_id in {link.user_id for link in ancestors}:
            logger.warning(
                "Referral loop detected",
                extra={
                    "user_id": user_id,
                    "referrer_id": referrer_id,
                    "chain_ids": [link.user_id for link in ancestors],
                },
            )
            raise ValidationError("Referral chain cannot contain a cycle")

        user.referred_by = referrer_id
        await self.session.commit()

        logger.info(
            "Referrer assigned",
            extra={"user_id": user_id, "referrer_id": referrer_id},
        )
