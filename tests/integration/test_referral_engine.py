"""
Integration tests for the referral chain and the bonus engine.
"""

from decimal import Decimal

import pytest
from sqlalchemy import update

from app.models import TransactionType, User
from app.services.referral import (
    ReferralChainManager,
    ReferralQueryManager,
    ReferralRewardProcessor,
    ReferralStatisticsManager,
)
from app.utils.exceptions import (
    NotFoundError,
    StateConflictError,
    ValidationError,
)


pytestmark = pytest.mark.integration


@pytest.fixture
def processor(session, dispatcher, clock):
    return ReferralRewardProcessor(session, dispatcher=dispatcher, clock=clock)


@pytest.fixture
def chain_manager(session):
    return ReferralChainManager(session)


async def build_chain(make_user, length: int) -> list[int]:
    """Create users u0 <- u1 <- ... and return their ids, root first."""
    ids: list[int] = []
    for _ in range(length):
        user = await make_user(referred_by=ids[-1] if ids else None)
        ids.append(user.id)
    return ids


class TestReferralChain:
    """Test chain traversal."""

    async def test_chain_stops_at_three_levels(self, chain_manager, make_user):
        ids = await build_chain(make_user, 5)

        chain = await chain_manager.get_referral_chain(ids[-1])

        assert [(link.user_id, link.level) for link in chain] == [
            (ids[3], 1),
            (ids[2], 2),
            (ids[1], 3),
        ]

    async def test_root_has_empty_chain(self, chain_manager, make_user):
        user = await make_user()
        assert await chain_manager.get_referral_chain(user.id) == []

    async def test_cycle_stops_walk(self, chain_manager, session, make_user):
        a, b = await build_chain(make_user, 2)
        # Corrupt data: a is referred by b while b is referred by a
        await session.execute(
            update(User).where(User.id == a).values(referred_by=b)
        )
        await session.commit()

        chain = await chain_manager.get_referral_chain(b, depth=None)

        assert [link.user_id for link in chain] == [a]


class TestAssignReferrer:
    """Test referrer assignment rules."""

    async def test_assigns_referrer(self, chain_manager, make_user, session):
        parent = await make_user()
        child = await make_user()
        child_id = child.id

        await chain_manager.assign_referrer(child_id, parent.id)

        chain = await chain_manager.get_referral_chain(child_id)
        assert [link.user_id for link in chain] == [parent.id]

    async def test_self_referral(self, chain_manager, make_user):
        user = await make_user()
        with pytest.raises(ValidationError):
            await chain_manager.assign_referrer(user.id, user.id)

    async def test_cycle_rejected(self, chain_manager, make_user):
        root, middle, leaf = await build_chain(make_user, 3)
        with pytest.raises(ValidationError):
            await chain_manager.assign_referrer(root, leaf)

    async def test_already_assigned(self, chain_manager, make_user):
        root, child = await build_chain(make_user, 2)
        other = await make_user()
        with pytest.raises(StateConflictError):
            await chain_manager.assign_referrer(child, other.id)

    async def test_unknown_referrer(self, chain_manager, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await chain_manager.assign_referrer(user.id, 9999)


class TestMultiLevelBonus:
    """Test process_multi_level_bonus."""

    async def test_rates_per_level(
        self, processor, make_user, get_wallet, count_transactions
    ):
        ids = await build_chain(make_user, 5)
        payer = ids[-1]

        results = await processor.process_multi_level_bonus(
            payer, Decimal("100")
        )

        assert [(r.referrer_id, r.level, r.amount) for r in results] == [
            (ids[3], 1, Decimal("10")),
            (ids[2], 2, Decimal("5")),
            (ids[1], 3, Decimal("2")),
        ]
        assert (await get_wallet(ids[3])).balance == Decimal("10")
        assert (await get_wallet(ids[2])).balance == Decimal("5")
        assert (await get_wallet(ids[1])).balance == Decimal("2")
        assert (await get_wallet(ids[0])).balance == Decimal("0")
        assert await count_transactions(TransactionType.REFERRAL_BONUS) == 3

    async def test_no_referrer(self, processor, make_user, count_transactions):
        user = await make_user()

        assert await processor.process_multi_level_bonus(
            user.id, Decimal("100")
        ) == []
        assert await count_transactions(TransactionType.REFERRAL_BONUS) == 0

    async def test_unknown_payer(self, processor):
        with pytest.raises(NotFoundError):
            await processor.process_multi_level_bonus(9999, Decimal("100"))

    async def test_referrers_are_notified(
        self, processor, make_user, dispatcher, sender
    ):
        parent, child = await build_chain(make_user, 2)

        await processor.process_multi_level_bonus(
            child, Decimal("50"), source_kind="deposit"
        )
        await dispatcher.drain()

        assert sender.sent == [
            (
                parent,
                "referral_bonus",
                {
                    "amount": "5.00",
                    "level": 1,
                    "source_name": "User 2",
                    "source_amount": "50.00",
                },
            )
        ]

    async def test_failed_level_keeps_earlier_levels(
        self, processor, make_user, get_wallet, monkeypatch
    ):
        ids = await build_chain(make_user, 3)
        original = processor.ledger.adjust_balance

        async def fail_on_level_two(**kwargs):
            if kwargs["user_id"] == ids[0]:
                raise RuntimeError("wallet unavailable")
            return await original(**kwargs)

        monkeypatch.setattr(processor.ledger, "adjust_balance", fail_on_level_two)

        with pytest.raises(RuntimeError):
            await processor.process_multi_level_bonus(ids[2], Decimal("100"))

        assert (await get_wallet(ids[1])).balance == Decimal("10")
        assert (await get_wallet(ids[0])).balance == Decimal("0")


class TestReferralStatistics:
    """Test referral statistics."""

    async def test_counts_and_totals(self, session, processor, make_user):
        root, child, grandchild = await build_chain(make_user, 3)
        await make_user(referred_by=root)
        await processor.process_multi_level_bonus(grandchild, Decimal("100"))

        stats = await ReferralStatisticsManager(session).get_referral_stats(root)

        assert stats["direct_referrals"] == 2
        assert stats["indirect_referrals"] == 1
        assert stats["total_referrals"] == 3
        assert stats["bonus_by_level"] == {
            1: Decimal("0"),
            2: Decimal("5"),
            3: Decimal("0"),
        }
        assert stats["total_bonus"] == Decimal("5")


class TestReferralQueries:
    """Test bonus history and the downline tree."""

    @pytest.fixture
    def queries(self, session):
        return ReferralQueryManager(session)

    async def test_bonus_history_newest_first(
        self, queries, processor, make_user
    ):
        parent, child = await build_chain(make_user, 2)
        for amount in ("10", "20", "30"):
            await processor.process_multi_level_bonus(child, Decimal(amount))

        first = await queries.get_bonus_history(parent, page=1, limit=2)
        second = await queries.get_bonus_history(parent, page=2, limit=2)

        assert [b.bonus_amount for b in first["bonuses"]] == [
            Decimal("3"),
            Decimal("2"),
        ]
        assert [b.bonus_amount for b in second["bonuses"]] == [Decimal("1")]
        assert first["total"] == 3
        assert first["pages"] == 2

    async def test_bonus_history_empty(self, queries, make_user):
        user = await make_user()

        history = await queries.get_bonus_history(user.id)

        assert history["bonuses"] == []
        assert history["total"] == 0
        assert history["pages"] == 0

    @pytest.mark.parametrize("page,limit", [(0, 20), (1, 0), (1, 51)])
    async def test_bonus_history_bounds(
        self, queries, make_user, page, limit
    ):
        user = await make_user()
        with pytest.raises(ValidationError):
            await queries.get_bonus_history(user.id, page=page, limit=limit)

    async def test_tree_nests_by_level(self, queries, make_user):
        root = (await make_user()).id
        a = (await make_user(
            referred_by=root, total_deposits=Decimal("100")
        )).id
        b = (await make_user(
            referred_by=root, total_deposits=Decimal("40")
        )).id
        a1 = (await make_user(
            referred_by=a, total_deposits=Decimal("10")
        )).id
        a2 = (await make_user(referred_by=a1)).id
        await make_user(referred_by=a2)

        view = await queries.get_referral_tree(root, depth=3)

        tree = view["tree"]
        assert [(node.user_id, node.level) for node in tree] == [
            (a, 1),
            (b, 1),
        ]
        assert [node.user_id for node in tree[0].children] == [a1]
        assert tree[0].children_count == 1
        assert tree[1].children == []
        assert [node.user_id for node in tree[0].children[0].children] == [a2]
        assert tree[0].children[0].children[0].children == []
        assert view["total_nodes"] == 4
        assert view["total_deposits"] == Decimal("150")

    async def test_tree_depth_one(self, queries, make_user):
        root, child, _ = await build_chain(make_user, 3)

        view = await queries.get_referral_tree(root, depth=1)

        assert [node.user_id for node in view["tree"]] == [child]
        assert view["tree"][0].children == []
        assert view["total_nodes"] == 1

    async def test_tree_survives_cycle(self, queries, session, make_user):
        a, b = await build_chain(make_user, 2)
        # Corrupt data: a is referred by b while b is referred by a
        await session.execute(
            update(User).where(User.id == a).values(referred_by=b)
        )
        await session.commit()

        view = await queries.get_referral_tree(a, depth=5)

        assert [node.user_id for node in view["tree"]] == [b]
        assert view["tree"][0].children == []
        assert view["total_nodes"] == 1

    @pytest.mark.parametrize("depth", [0, 6])
    async def test_tree_depth_bounds(self, queries, make_user, depth):
        user = await make_user()
        with pytest.raises(ValidationError):
            await queries.get_referral_tree(user.id, depth=depth)

    async def test_tree_unknown_user(self, queries):
        with pytest.raises(NotFoundError):
            await queries.get_referral_tree(9999)
