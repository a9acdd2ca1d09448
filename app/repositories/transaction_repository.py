"""
Transaction repository.

Data access layer for the append-only Transaction audit trail.
"""

from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.transaction import Transaction
from app.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Transaction repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize transaction repository."""
        super().__init__(Transaction, session)

    async def find_by_reference(
        self,
        type: str,
        reference_id: str,
        user_id: int | None = None,
    ) -> Transaction | None:
        """
        Find a transaction of a type linked to an originating entity.

        Args:
            type: Transaction type
            reference_id: Originating entity id
            user_id: Optional owner filter

        Returns:
            First matching transaction or None
        """
        filters: dict[str, int | str] = {
            "type": type,
            "reference_id": reference_id,
        }
        if user_id is not None:
            filters["user_id"] = user_id
        return await self.get_by(**filters)

    async def sum_by_types(
        self, user_id: int, types: Iterable[str]
    ) -> dict[str, Decimal]:
        """
        Sum transaction amounts per type in a single query.

        Args:
            user_id: Owner
            types: Transaction types to include

        Returns:
            Dict type -> sum (0 for types without rows)
        """
        types = list(types)
        stmt = (
            select(
                Transaction.type,
                func.coalesce(func.sum(Transaction.amount), 0).label("total"),
            )
            .where(
                Transaction.user_id == user_id,
                Transaction.type.in_(types),
            )
            .group_by(Transaction.type)
        )
        result = await self.session.execute(stmt)

        totals = {t: Decimal("0") for t in types}
        for row in result.all():
            totals[row.type] = Decimal(str(row.total))
        return totals

    async def get_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        type: str | None = None,
    ) -> tuple[list[Transaction], int]:
        """
        Get paginated transaction history, newest first.

        Args:
            user_id: Owner
            page: Page number (1-indexed)
            limit: Items per page
            type: Optional type filter

        Returns:
            Tuple of (transactions, total_count)
        """
        conditions = [Transaction.user_id == user_id]
        if type:
            conditions.append(Transaction.type == type)

        count_stmt = select(func.count(Transaction.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Transaction)
            .where(*conditions)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
