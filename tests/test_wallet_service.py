"""Tests for the service entrypoints."""

from datetime import datetime, timedelta, timezone, UTC

import pytest

from greenwallet.badges import ECO_HERO, WELCOME
from greenwallet.errors import (
    AccountExists,
    AccountNotFound,
    InsufficientBalance,
    ValidationError,
)
from greenwallet.models import Submission, TransactionKind, UserTier


def smartphone(**overrides) -> Submission:
    fields = dict(item_type="Smartphone", condition="Working", quantity=1)
    fields.update(overrides)
    return Submission(**fields)


@pytest.fixture
def alice(service):
    return service.register_account("alice", name="  Alice ", email="Alice@Example.COM ")


class TestRegistration:
    def test_register(self, alice, clock):
        assert alice.name == "Alice"
        assert alice.email == "alice@example.com"
        assert alice.wallet.balance == 0
        assert alice.created_at == clock()

    def test_duplicate(self, service, alice):
        with pytest.raises(AccountExists):
            service.register_account("alice")

    def test_unknown_account(self, service):
        with pytest.raises(AccountNotFound):
            service.get_balance("nobody")


class TestSubmit:
    def test_first_submission(self, service, alice):
        result = service.submit("alice", smartphone())

        assert result.points == 95
        assert result.weight_bonus == 0
        assert result.breakdown.total == 95
        assert result.new_balance == 95
        assert result.tier == UserTier.FIRST_TIME
        assert result.new_badges == [WELCOME]
        assert result.transaction.source == "Sold Smartphone"
        assert result.transaction.kind == TransactionKind.CREDIT
        assert result.transaction.metadata.user_tier == UserTier.FIRST_TIME

    def test_weight_bonus_added(self, service, alice):
        result = service.submit(
            "alice", Submission(item_type="Laptop", condition="Repairable", quantity=1, weight=2.5)
        )
        assert result.breakdown.total == 110
        assert result.weight_bonus == 5
        assert result.points == 115
        assert service.get_balance("alice").total_weight_recycled == pytest.approx(2.5)

    def test_invalid_submission_persists_nothing(self, service, store, alice):
        with pytest.raises(ValidationError) as exc_info:
            service.submit("alice", Submission(item_type="Toaster", quantity=0))

        assert exc_info.value.errors == [
            "Invalid item type: Toaster",
            "Item condition is required",
            "Quantity must be at least 1",
        ]
        loaded = store.load("alice")
        assert loaded.version == 0
        assert loaded.wallet.history == ()

    @pytest.mark.parametrize("weight", [float("nan"), float("inf")])
    def test_non_finite_weight_rejected(self, service, store, alice, weight):
        with pytest.raises(ValidationError) as exc_info:
            service.submit("alice", smartphone(weight=weight))
        assert exc_info.value.errors == ["Weight must be a finite number"]
        assert store.load("alice").version == 0

    def test_tier_bonus_follows_tier(self, service, alice):
        for _ in range(3):
            result = service.submit("alice", smartphone())
            assert result.breakdown.frequency_bonus == 0
        fourth = service.submit("alice", smartphone())
        assert fourth.breakdown.frequency_bonus == 10
        assert fourth.points == 105
        assert fourth.transaction.metadata.user_tier == UserTier.OCCASIONAL

    def test_badges_reported_once(self, service, alice):
        service.submit("alice", smartphone())
        second = service.submit("alice", smartphone())
        assert second.new_badges == []

    def test_preview_does_not_credit(self, service, store, alice):
        preview = service.preview_points("alice", smartphone(weight=3.0))
        assert preview.estimated_points == 95
        assert preview.weight_bonus == 6
        assert preview.tier == UserTier.FIRST_TIME
        assert store.load("alice").wallet.balance == 0

    def test_preview_validates(self, service, alice):
        with pytest.raises(ValidationError):
            service.preview_points("alice", Submission())


class TestRedeem:
    @pytest.fixture
    def funded(self, service, alice):
        service.ledger.credit("alice", 100, "Sold Laptop")
        return service

    def test_redeem_inside_window(self, funded, clock):
        clock.advance(hours=10)
        result = funded.redeem("alice", 50, "LED Bulb Set")

        assert result.used_2x_value is True
        assert result.multiplier == 2
        assert result.points_redeemed == 50
        assert result.effective_value == 100
        assert result.new_balance == 50
        assert result.transaction.points == -50
        assert result.transaction.source == "Redeemed for LED Bulb Set (2X Value)"

    def test_redeem_after_window(self, funded, clock):
        clock.advance(hours=25)
        result = funded.redeem("alice", 40, "Seed Pack")

        assert result.used_2x_value is False
        assert result.multiplier == 1
        assert result.effective_value == 40
        assert result.transaction.source == "Redeemed for Seed Pack"

    def test_insufficient_balance(self, funded, store):
        with pytest.raises(InsufficientBalance) as exc_info:
            funded.redeem("alice", 150, "X")
        assert exc_info.value.current == 100
        assert exc_info.value.requested == 150
        assert store.load("alice").wallet.balance == 100

    def test_redeem_whole_balance(self, funded):
        assert funded.redeem("alice", 100, "Compost Bin").new_balance == 0

    def test_invalid_request_collects_errors(self, funded):
        with pytest.raises(ValidationError) as exc_info:
            funded.redeem("alice", 0, "  ")
        assert len(exc_info.value.errors) == 2

    def test_redeem_keeps_tier_and_badges(self, service, alice):
        service.ledger.credit("alice", 600, "big haul")
        before = service.get_account("alice")
        service.redeem("alice", 600, "Solar Charger")
        after = service.get_account("alice")
        assert after.badges == before.badges
        assert ECO_HERO in after.badges
        assert after.tier == before.tier


class TestHistory:
    @pytest.fixture
    def busy(self, service, alice, clock):
        for i in range(5):
            service.ledger.credit("alice", 10 + i, f"credit {i}")
            clock.advance(minutes=1)
        service.redeem("alice", 5, "Sticker")
        return service

    def test_newest_first(self, busy):
        page = busy.get_history("alice")
        assert page.total_transactions == 6
        assert page.transactions[0].source.startswith("Redeemed for Sticker")
        assert [t.source for t in page.transactions[1:]] == [
            "credit 4", "credit 3", "credit 2", "credit 1", "credit 0",
        ]
        assert page.has_next is False
        assert page.has_prev is False

    def test_pagination(self, busy):
        page = busy.get_history("alice", page=2, limit=4)
        assert page.current_page == 2
        assert page.total_pages == 2
        assert len(page.transactions) == 2
        assert page.has_prev is True
        assert page.has_next is False

    def test_kind_filter(self, busy):
        debits = busy.get_history("alice", kind=TransactionKind.DEBIT)
        assert debits.total_transactions == 1
        credits = busy.get_history("alice", kind="credit")
        assert credits.total_transactions == 5

    def test_limit_capped(self, busy):
        page = busy.get_history("alice", limit=1000)
        assert page.total_pages == 1

    def test_same_timestamp_later_first(self, service, alice):
        service.ledger.credit("alice", 10, "first")
        service.ledger.credit("alice", 10, "second")
        page = service.get_history("alice")
        assert [t.source for t in page.transactions] == ["second", "first"]

    def test_empty(self, service, alice):
        page = service.get_history("alice")
        assert page.transactions == []
        assert page.total_pages == 0

    def test_bad_page(self, busy):
        with pytest.raises(ValidationError):
            busy.get_history("alice", page=0)
        with pytest.raises(ValidationError):
            busy.get_history("alice", limit=0)


class TestQueries:
    def test_bonus_status(self, service, alice, clock):
        assert service.get_bonus_status("alice").active is False
        service.submit("alice", smartphone())
        clock.advance(hours=3, minutes=15)
        status = service.get_bonus_status("alice")
        assert status.active is True
        assert status.remaining_formatted == "20h 45m"

    def test_badges(self, service, alice):
        assert service.get_badges("alice") == []
        service.submit("alice", smartphone())
        assert [b.name for b in service.get_badges("alice")] == [WELCOME]

    def test_dashboard(self, service, alice, clock):
        service.submit("alice", smartphone(quantity=2))
        service.submit("alice", Submission(item_type="Cable", condition="Dead", quantity=3))
        clock.now = datetime(2026, 4, 2, 9, 0, tzinfo=UTC)
        service.submit("alice", smartphone())
        service.redeem("alice", 30, "Tote Bag")

        dashboard = service.get_dashboard("alice")
        # March: 100 + 20; April: 95 credited, 30 redeemed
        assert dashboard.total_earned == 215
        assert dashboard.this_month_earned == 95
        assert dashboard.this_month_redeemed == 30
        assert dashboard.balance == 185
        assert dashboard.items_submitted_by_type == {"Smartphone": 3, "Cable": 3}
        assert dashboard.total_items_submitted == 6
        assert dashboard.average_points_per_credit == 72
        assert dashboard.total_transactions == 4
        assert dashboard.recent_transactions[0].is_debit
        assert [b.name for b in dashboard.badges] == [WELCOME]


class TestStats:
    def test_last_six_months(self, service, alice, clock):
        start = clock()
        for when, points in [
            (datetime(2025, 9, 30, 23, 59, 59, tzinfo=UTC), 40),
            (datetime(2025, 10, 1, 0, 0, tzinfo=UTC), 10),
            (datetime(2025, 12, 31, 23, 59, tzinfo=UTC), 20),
            (datetime(2026, 1, 1, 0, 0, tzinfo=UTC), 30),
        ]:
            clock.now = when
            service.ledger.credit("alice", points, "seed")
        service.ledger.debit("alice", 15, "Redeemed for Mug")
        clock.now = start
        service.ledger.credit("alice", 5, "now")

        stats = service.get_stats("alice")

        assert [(m.month, m.earned, m.redeemed, m.transactions) for m in stats.monthly_stats] == [
            ("2025-10", 10, 0, 1),
            ("2025-11", 0, 0, 0),
            ("2025-12", 20, 0, 1),
            ("2026-01", 30, 15, 2),
            ("2026-02", 0, 0, 0),
            ("2026-03", 5, 0, 1),
        ]
        assert stats.total_earned == 105
        assert stats.total_redeemed == 15
        assert stats.balance == 90
        assert stats.total_transactions == 6
        assert stats.member_since == start

    def test_buckets_cross_year(self, service, alice, clock):
        clock.now = datetime(2026, 1, 15, tzinfo=UTC)
        months = [m.month for m in service.get_stats("alice", months=3).monthly_stats]
        assert months == ["2025-11", "2025-12", "2026-01"]

    def test_offset_timestamps_bucket_by_utc(self, service, alice, clock):
        # 02:00 on 1 March in UTC+05:30 is still 28 February in UTC
        clock.now = datetime(2026, 3, 1, 2, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        service.ledger.credit("alice", 25, "seed")
        clock.now = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

        by_month = {m.month: m.earned for m in service.get_stats("alice", months=2).monthly_stats}
        assert by_month == {"2026-02": 25, "2026-03": 0}

    def test_months_must_be_positive(self, service, alice):
        with pytest.raises(ValidationError):
            service.get_stats("alice", months=0)


class TestReferralCode:
    def test_generated_once(self, service, store, alice):
        code = service.get_referral_code("alice")
        assert code.startswith("GP")
        assert len(code) == 8
        assert code[2:].isalnum() and code[2:].upper() == code[2:]
        assert service.get_referral_code("alice") == code
        assert store.load("alice").referral_code == code

    def test_codes_are_unique(self, service):
        codes = set()
        for i in range(20):
            service.register_account(f"user-{i}")
            codes.add(service.get_referral_code(f"user-{i}"))
        assert len(codes) == 20
