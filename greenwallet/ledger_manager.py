"""Ledger Manager - applies credits and debits to user accounts atomically.

The LedgerManager is responsible for:
- Applying a credit or debit to an account snapshot, together with every
  field derived from it (tier, badges, recycling counters)
- Running "load, check, apply, persist" as one unit per account
- Retrying that unit when the store reports a concurrent write

Key Principle: a transaction is applied by a pure function that takes an
immutable account snapshot and returns the next snapshot. Only the complete
snapshot is ever handed to the store, so a failed operation leaves the
stored account untouched.
"""

import logging
import threading
from datetime import datetime, UTC
from typing import Callable, Dict, Optional, Tuple, TypeVar

from greenwallet.badges import BadgeEngine
from greenwallet.errors import PersistConflict
from greenwallet.models import TransactionMetadata, UserAccount
from greenwallet.storage import AccountStore
from greenwallet.tiers import TierClassifier

logger = logging.getLogger("greenwallet.ledger")

T = TypeVar("T")


def apply_credit(account: UserAccount, points: int, source: str,
                 metadata: Optional[TransactionMetadata] = None,
                 timestamp: Optional[datetime] = None) -> UserAccount:
    """Return the account after crediting ``points``.

    The wallet adds the weight bonus (if any), then recycling counters, tier
    and badges are recomputed from the new wallet.

    Args:
        account (UserAccount): Current snapshot
        points (int): Points from the calculator, before the weight bonus
        source (str): Provenance, e.g. "Sold Smartphone"
        metadata (Optional[TransactionMetadata]): Submission attributes
        timestamp (Optional[datetime]): Transaction time, defaults to now (UTC)

    Returns:
        UserAccount: New snapshot; ``version`` is unchanged

    Example:
        ```python
        account = apply_credit(account, 95, "Sold Smartphone",
                               TransactionMetadata(item_type="Smartphone", quantity=1))
        assert account.badges[0] == "Welcome"
        ```
    """
    timestamp = timestamp or datetime.now(UTC)
    wallet = account.wallet.credit(points, source, metadata, timestamp)

    items = account.total_items_recycled
    weight = account.total_weight_recycled
    if metadata is not None:
        if metadata.quantity is not None:
            items += metadata.quantity
        if metadata.weight is not None:
            weight += metadata.weight

    updated = account.model_copy(update={
        "wallet": wallet,
        "tier": TierClassifier.classify(wallet.history),
        "total_items_recycled": items,
        "total_weight_recycled": weight,
        "updated_at": timestamp,
    })
    return updated.model_copy(update={"badges": BadgeEngine.evaluate(updated)})


def apply_debit(account: UserAccount, points: int, source: str,
                metadata: Optional[TransactionMetadata] = None,
                timestamp: Optional[datetime] = None) -> UserAccount:
    """Return the account after debiting ``points``.

    Tier and badges are left as they are.

    Raises:
        InsufficientBalance: If ``points`` exceeds the wallet balance
        ValueError: If ``points`` is not positive
    """
    timestamp = timestamp or datetime.now(UTC)
    wallet = account.wallet.debit(points, source, metadata, timestamp)
    return account.model_copy(update={"wallet": wallet, "updated_at": timestamp})


class LedgerManager:
    """Runs account mutations as atomic load-apply-persist units.

    Concurrency:
        Two layers protect the balance check of a debit.
        1. A lock per user id is held across load, apply and persist, so
           mutations of one account inside this process run one at a time.
        2. The store persists with compare-and-swap on the account version.
           If another process wrote first, the whole unit is retried from a
           fresh load, up to ``max_retries`` attempts.

        Reads never take the lock.

    Usage Example:
        ```python
        store = DocumentAccountStore()
        store.create(UserAccount(user_id="alice"))
        ledger = LedgerManager(store)

        ledger.credit("alice", 95, "Sold Smartphone")
        ledger.debit("alice", 50, "Redeemed for LED Bulb Set")
        print(store.load("alice").wallet.balance)  # 45
        ```
    """

    def __init__(self, store: AccountStore, max_retries: int = 3,
                 clock: Optional[Callable[[], datetime]] = None):
        """Initialize the ledger manager.

        Args:
            store (AccountStore): Storage collaborator
            max_retries (int): Attempts per operation when persist conflicts
            clock (Optional[Callable]): Source of "now", defaults to UTC wall clock
        """
        self.store = store
        self.max_retries = max_retries
        self.clock = clock or (lambda: datetime.now(UTC))
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    def mutate(self, user_id: str,
               apply: Callable[[UserAccount], Tuple[UserAccount, T]]) -> Tuple[UserAccount, T]:
        """Load, apply and persist one account as a single unit.

        ``apply`` receives the freshly loaded snapshot and returns the next
        snapshot plus any value the caller wants back. It may raise to abort;
        nothing is persisted in that case.

        Returns:
            Tuple[UserAccount, T]: The persisted snapshot and ``apply``'s value

        Raises:
            AccountNotFound: If the account does not exist
            PersistConflict: If every attempt lost a race with another writer
        """
        with self._lock_for(user_id):
            for attempt in range(1, self.max_retries + 1):
                account = self.store.load(user_id)
                updated, value = apply(account)
                try:
                    return self.store.persist(updated), value
                except PersistConflict:
                    if attempt == self.max_retries:
                        logger.error("giving up on %s after %d conflicting writes",
                                     user_id, attempt)
                        raise
                    logger.info("retrying update of %s (attempt %d)", user_id, attempt + 1)
        raise AssertionError("unreachable")

    def credit(self, user_id: str, points: int, source: str,
               metadata: Optional[TransactionMetadata] = None) -> UserAccount:
        """Credit points to an account and persist it.

        Returns:
            UserAccount: The persisted snapshot
        """
        def _apply(account: UserAccount) -> Tuple[UserAccount, None]:
            return apply_credit(account, points, source, metadata, self.clock()), None

        stored, _ = self.mutate(user_id, _apply)
        logger.info("credited %s with %d points (%s), balance %d",
                    user_id, stored.wallet.last_transaction.points, source,
                    stored.wallet.balance)
        return stored

    def debit(self, user_id: str, points: int, source: str,
              metadata: Optional[TransactionMetadata] = None) -> UserAccount:
        """Debit points from an account and persist it.

        Raises:
            InsufficientBalance: If the balance is below ``points``
        """
        def _apply(account: UserAccount) -> Tuple[UserAccount, None]:
            return apply_debit(account, points, source, metadata, self.clock()), None

        stored, _ = self.mutate(user_id, _apply)
        logger.info("debited %s by %d points (%s), balance %d",
                    user_id, points, source, stored.wallet.balance)
        return stored
