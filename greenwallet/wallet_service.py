"""Green Wallet Service - the entrypoints request handlers call.

This module wraps the calculator, ledger, tier, badge and bonus window
components into the operations the application exposes:
- Registering accounts
- Submitting e-waste for points (and previewing the award)
- Redeeming points, reported at 2X value inside the bonus window
- Querying balance, history, badges, bonus status, dashboard data and
  monthly statistics
- Handing out referral codes
"""

import logging
import math
import secrets
import string
from datetime import datetime, UTC
from typing import Callable, Dict, List, Optional, Tuple
from pydantic import BaseModel, Field

from greenwallet.badges import Badge, BadgeEngine
from greenwallet.bonus_window import BonusStatus, BonusWindow
from greenwallet.config import Settings, get_settings
from greenwallet.errors import InsufficientBalance, ValidationError
from greenwallet.ledger_manager import LedgerManager, apply_credit, apply_debit
from greenwallet.models import (
    PointsBreakdown,
    Profile,
    Submission,
    Transaction,
    TransactionKind,
    TransactionMetadata,
    UserAccount,
    UserTier,
    weight_bonus,
)
from greenwallet.points_calculator import PointsCalculator
from greenwallet.storage import AccountStore

logger = logging.getLogger("greenwallet.service")

REFERRAL_PREFIX = "GP"
REFERRAL_LENGTH = 6
_REFERRAL_ALPHABET = string.ascii_uppercase + string.digits
RECENT_TRANSACTIONS = 5
STATS_MONTHS = 6


class PointsPreview(BaseModel):
    estimated_points: int
    weight_bonus: int
    breakdown: PointsBreakdown
    tier: UserTier


class SubmissionResult(BaseModel):
    """Outcome of a credited submission.

    Attributes:
        points (int): Points actually credited, weight bonus included
        weight_bonus (int): Part of ``points`` that came from the weight
        breakdown (PointsBreakdown): Calculator terms; ``breakdown.total``
            excludes the weight bonus
        new_balance (int): Wallet balance after the credit
        tier (UserTier): Tier after the credit
        new_badges (List[str]): Badges awarded by this submission
        transaction (Transaction): The appended history record
    """

    points: int
    weight_bonus: int
    breakdown: PointsBreakdown
    new_balance: int
    tier: UserTier
    new_badges: List[str] = Field(default_factory=list)
    transaction: Transaction


class RedemptionResult(BaseModel):
    """Outcome of a redemption.

    ``effective_value`` is ``points_redeemed * multiplier``; the wallet was
    debited by ``points_redeemed`` only.
    """

    points_redeemed: int
    effective_value: int
    multiplier: int
    used_2x_value: bool
    new_balance: int
    transaction: Transaction


class BalanceSnapshot(BaseModel):
    balance: int
    total_earned: int
    total_redeemed: int
    tier: UserTier
    total_items_recycled: int
    total_weight_recycled: float


class HistoryPage(BaseModel):
    transactions: List[Transaction]
    current_page: int
    total_pages: int
    total_transactions: int
    has_next: bool
    has_prev: bool


class Dashboard(BaseModel):
    balance: int
    total_earned: int
    total_redeemed: int
    this_month_earned: int
    this_month_redeemed: int
    tier: UserTier
    total_transactions: int
    total_items_submitted: int
    items_submitted_by_type: Dict[str, int]
    average_points_per_credit: int
    recent_transactions: List[Transaction]
    badges: List[Badge]


class MonthlyStats(BaseModel):
    """Activity within one UTC calendar month, keyed ``YYYY-MM``."""

    month: str
    earned: int
    redeemed: int
    transactions: int


class UserStats(BaseModel):
    monthly_stats: List[MonthlyStats]
    balance: int
    total_earned: int
    total_redeemed: int
    total_transactions: int
    tier: UserTier
    member_since: datetime


class GreenWalletService:
    """High-level API for the Green Points ledger engine.

    Usage Example:
        ```python
        service = GreenWalletService(DocumentAccountStore())
        service.register_account("alice", name="Alice", email="alice@example.com")

        result = service.submit("alice", Submission(
            item_type="Smartphone", condition="Working", quantity=1,
        ))
        print(result.points)        # 95

        redemption = service.redeem("alice", 50, "LED Bulb Set")
        print(redemption.used_2x_value, redemption.effective_value)  # True 100
        ```

    Attributes:
        store (AccountStore): Storage collaborator
        settings (Settings): Runtime configuration
        ledger (LedgerManager): Atomic mutation runner
        bonus_window (BonusWindow): 2X value rules
    """

    def __init__(self, store: AccountStore, settings: Optional[Settings] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.ledger = LedgerManager(store, self.settings.persist_max_retries, self.clock)
        self.bonus_window = BonusWindow(
            hours=self.settings.bonus_window_hours,
            multiplier=self.settings.bonus_multiplier,
        )

    # ========== Accounts ==========

    def register_account(self, user_id: str, name: str = "", email: str = "",
                         profile: Optional[Profile] = None) -> UserAccount:
        """Create an account with an empty wallet.

        Raises:
            AccountExists: If ``user_id`` is taken
        """
        now = self.clock()
        account = UserAccount(
            user_id=user_id,
            name=name.strip(),
            email=email.strip().lower(),
            profile=profile or Profile(),
            created_at=now,
            updated_at=now,
        )
        stored = self.store.create(account)
        logger.info("registered account %s", user_id)
        return stored

    def get_account(self, user_id: str) -> UserAccount:
        return self.store.load(user_id)

    # ========== Submissions ==========

    @staticmethod
    def _score(submission: Submission, tier: UserTier) -> Tuple[int, PointsBreakdown]:
        candidate = submission.model_copy(update={"user_tier": tier.value})
        errors = PointsCalculator.validate(candidate)
        if errors:
            raise ValidationError(errors)
        return PointsCalculator.compute(candidate)

    def preview_points(self, user_id: str, submission: Submission) -> PointsPreview:
        """Compute what a submission would earn without crediting it.

        Raises:
            ValidationError: If the submission is malformed
            AccountNotFound: If the account does not exist
        """
        account = self.store.load(user_id)
        points, breakdown = self._score(submission, account.tier)
        return PointsPreview(
            estimated_points=points,
            weight_bonus=weight_bonus(submission.weight),
            breakdown=breakdown,
            tier=account.tier,
        )

    def submit(self, user_id: str, submission: Submission) -> SubmissionResult:
        """Credit the points earned by a submission.

        The user's tier at the moment of the credit feeds the tier bonus and
        is recorded in the transaction metadata.

        Raises:
            ValidationError: If the submission is malformed (nothing persisted)
            AccountNotFound: If the account does not exist
            PersistConflict: If concurrent writers kept winning
        """
        def _apply(account: UserAccount) -> Tuple[UserAccount, Tuple[PointsBreakdown, List[str]]]:
            points, breakdown = self._score(submission, account.tier)
            metadata = TransactionMetadata(
                item_type=submission.item_type,
                condition=submission.condition,
                quantity=submission.quantity,
                weight=submission.weight,
                user_tier=account.tier,
                description=submission.description,
                image_url=submission.image_url,
            )
            updated = apply_credit(account, points, f"Sold {submission.item_type}",
                                   metadata, self.clock())
            new_badges = [b for b in updated.badges if not account.has_badge(b)]
            return updated, (breakdown, new_badges)

        try:
            stored, (breakdown, new_badges) = self.ledger.mutate(user_id, _apply)
        except ValidationError as exc:
            logger.info("rejected submission for %s: %s", user_id, exc.errors)
            raise

        transaction = stored.wallet.last_transaction
        logger.info("credited %s with %d points for %s", user_id,
                    transaction.points, submission.item_type)
        return SubmissionResult(
            points=transaction.points,
            weight_bonus=transaction.points - breakdown.total,
            breakdown=breakdown,
            new_balance=stored.wallet.balance,
            tier=stored.tier,
            new_badges=new_badges,
            transaction=transaction,
        )

    # ========== Redemptions ==========

    def redeem(self, user_id: str, points: int, redeem_for: str,
               description: Optional[str] = None) -> RedemptionResult:
        """Spend points on a reward.

        Inside the bonus window the redemption is reported at the bonus
        multiplier and the source is tagged "(2X Value)"; the debit is
        always exactly ``points``.

        Raises:
            ValidationError: If points is not positive or redeem_for is empty
            InsufficientBalance: If the balance is below ``points``
            AccountNotFound: If the account does not exist
        """
        errors = []
        if points is None or points <= 0:
            errors.append("Points must be a positive number")
        if not redeem_for or not redeem_for.strip():
            errors.append("Redemption purpose is required")
        if errors:
            raise ValidationError(errors)

        def _apply(account: UserAccount) -> Tuple[UserAccount, BonusStatus]:
            now = self.clock()
            status = self.bonus_window.status(account.wallet.history, now)
            source = f"Redeemed for {redeem_for.strip()}"
            if status.active:
                source += " (2X Value)"
            metadata = TransactionMetadata(description=description) if description else None
            return apply_debit(account, points, source, metadata, now), status

        try:
            stored, status = self.ledger.mutate(user_id, _apply)
        except InsufficientBalance as exc:
            logger.warning("redemption of %d points by %s refused, balance %d",
                           exc.requested, user_id, exc.current)
            raise

        logger.info("%s redeemed %d points for %s (multiplier %d)",
                    user_id, points, redeem_for, status.multiplier)
        return RedemptionResult(
            points_redeemed=points,
            effective_value=points * status.multiplier,
            multiplier=status.multiplier,
            used_2x_value=status.active,
            new_balance=stored.wallet.balance,
            transaction=stored.wallet.last_transaction,
        )

    # ========== Queries ==========

    def get_balance(self, user_id: str) -> BalanceSnapshot:
        account = self.store.load(user_id)
        return BalanceSnapshot(
            balance=account.wallet.balance,
            total_earned=account.wallet.total_earned,
            total_redeemed=account.wallet.total_redeemed,
            tier=account.tier,
            total_items_recycled=account.total_items_recycled,
            total_weight_recycled=account.total_weight_recycled,
        )

    @staticmethod
    def _newest_first(history) -> List[Transaction]:
        # ties on timestamp: later appended comes first
        indexed = sorted(enumerate(history), key=lambda p: (p[1].timestamp, p[0]), reverse=True)
        return [t for _, t in indexed]

    def get_history(self, user_id: str, page: int = 1, limit: Optional[int] = None,
                    kind: Optional[TransactionKind] = None) -> HistoryPage:
        """One page of transactions, newest first.

        Args:
            user_id (str): Account to query
            page (int): 1-based page number
            limit (Optional[int]): Page size, defaults to the configured size
                and is capped at ``history_max_page_size``
            kind (Optional[TransactionKind]): Only credits or only debits

        Raises:
            ValidationError: If page or limit is below 1
        """
        limit = self.settings.history_page_size if limit is None else limit
        errors = []
        if page < 1:
            errors.append("Page must be at least 1")
        if limit < 1:
            errors.append("Limit must be at least 1")
        if errors:
            raise ValidationError(errors)
        limit = min(limit, self.settings.history_max_page_size)

        account = self.store.load(user_id)
        history = account.wallet.history
        if kind is not None:
            history = [t for t in history if t.kind == TransactionKind(kind)]
        ordered = self._newest_first(history)

        start = (page - 1) * limit
        end = start + limit
        return HistoryPage(
            transactions=ordered[start:end],
            current_page=page,
            total_pages=math.ceil(len(ordered) / limit),
            total_transactions=len(ordered),
            has_next=end < len(ordered),
            has_prev=start > 0,
        )

    def get_badges(self, user_id: str) -> List[Badge]:
        account = self.store.load(user_id)
        return BadgeEngine.describe(account.badges)

    def get_bonus_status(self, user_id: str) -> BonusStatus:
        account = self.store.load(user_id)
        return self.bonus_window.status(account.wallet.history, self.clock())

    def get_dashboard(self, user_id: str) -> Dashboard:
        """Aggregates for the user's dashboard page."""
        account = self.store.load(user_id)
        wallet = account.wallet
        now = self.clock()

        this_month = [
            t for t in wallet.history
            if t.timestamp.year == now.year and t.timestamp.month == now.month
        ]
        credits = [t for t in wallet.history if t.is_credit]

        by_type: Dict[str, int] = {}
        for t in credits:
            if t.metadata and t.metadata.item_type:
                by_type[t.metadata.item_type] = (
                    by_type.get(t.metadata.item_type, 0) + (t.metadata.quantity or 1)
                )

        return Dashboard(
            balance=wallet.balance,
            total_earned=wallet.total_earned,
            total_redeemed=wallet.total_redeemed,
            this_month_earned=sum(t.points for t in this_month if t.is_credit),
            this_month_redeemed=sum(t.magnitude for t in this_month if t.is_debit),
            tier=account.tier,
            total_transactions=len(wallet.history),
            total_items_submitted=sum(by_type.values()),
            items_submitted_by_type=by_type,
            average_points_per_credit=round(wallet.total_earned / len(credits)) if credits else 0,
            recent_transactions=self._newest_first(wallet.history)[:RECENT_TRANSACTIONS],
            badges=BadgeEngine.describe(account.badges),
        )

    def get_stats(self, user_id: str, months: int = STATS_MONTHS) -> UserStats:
        """Per-month earned, redeemed and transaction counts plus lifetime totals.

        Buckets are UTC calendar months, oldest first, ending with the
        month of the current clock.

        Raises:
            ValidationError: If months is below 1
        """
        if months < 1:
            raise ValidationError(["Months must be at least 1"])

        account = self.store.load(user_id)
        wallet = account.wallet
        now = self.clock().astimezone(UTC)

        buckets: Dict[Tuple[int, int], MonthlyStats] = {}
        for offset in range(months - 1, -1, -1):
            year, month = divmod(now.year * 12 + now.month - 1 - offset, 12)
            buckets[(year, month + 1)] = MonthlyStats(
                month=f"{year:04d}-{month + 1:02d}", earned=0, redeemed=0, transactions=0,
            )

        for t in wallet.history:
            stamp = t.timestamp.astimezone(UTC)
            bucket = buckets.get((stamp.year, stamp.month))
            if bucket is None:
                continue
            bucket.transactions += 1
            if t.is_credit:
                bucket.earned += t.points
            else:
                bucket.redeemed += t.magnitude

        return UserStats(
            monthly_stats=list(buckets.values()),
            balance=wallet.balance,
            total_earned=wallet.total_earned,
            total_redeemed=wallet.total_redeemed,
            total_transactions=len(wallet.history),
            tier=account.tier,
            member_since=account.created_at,
        )

    # ========== Referrals ==========

    def _new_referral_code(self) -> str:
        while True:
            code = REFERRAL_PREFIX + "".join(
                secrets.choice(_REFERRAL_ALPHABET) for _ in range(REFERRAL_LENGTH)
            )
            if self.store.find_by_referral_code(code) is None:
                return code

    def get_referral_code(self, user_id: str) -> str:
        """The user's referral code, generated and stored on first access."""
        account = self.store.load(user_id)
        if account.referral_code:
            return account.referral_code

        def _apply(current: UserAccount) -> Tuple[UserAccount, str]:
            if current.referral_code:
                return current, current.referral_code
            code = self._new_referral_code()
            return current.model_copy(update={"referral_code": code}), code

        _, code = self.ledger.mutate(user_id, _apply)
        logger.info("issued referral code to %s", user_id)
        return code
