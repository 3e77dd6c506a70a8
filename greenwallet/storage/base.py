"""Base Account Store Interface.

Defines the storage collaborator contract the ledger engine relies on. A
store may be backed by a document database or by flat files; the engine
only ever calls the methods below.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from greenwallet.errors import AccountNotFound, PersistConflict
from greenwallet.models import UserAccount

logger = logging.getLogger("greenwallet.storage")


class AccountStore(ABC):
    """Abstract base class for account storage backends.

    Contract:
    - **load**: return a fresh snapshot of the stored account. Callers never
      share an object graph with the store or with each other.
    - **persist**: compare-and-swap on ``UserAccount.version``. The write
      succeeds only if the stored version still equals the version of the
      snapshot being persisted; the stored copy then gets ``version + 1``.
      Otherwise ``PersistConflict`` is raised and nothing is written.
    - **create**: store a brand-new account, refusing duplicates.

    Stores do not offer multi-account transactions and the engine never
    needs them: every operation touches exactly one account.

    Usage Example:
        ```python
        class MyStore(AccountStore):
            def get_name(self) -> str:
                return "my_store"
            ...

        account = store.load("u-1")
        updated = account.model_copy(update={"name": "Ada"})
        saved = store.persist(updated)     # saved.version == account.version + 1
        store.persist(updated)             # raises PersistConflict
        ```
    """

    @abstractmethod
    def get_name(self) -> str:
        """Short backend name, e.g. "document" or "file"."""
        pass

    @abstractmethod
    def load(self, user_id: str) -> UserAccount:
        """Load an account.

        Raises:
            AccountNotFound: If no account is stored under ``user_id``
        """
        pass

    @abstractmethod
    def persist(self, account: UserAccount) -> UserAccount:
        """Write an account snapshot if nobody else wrote it first.

        Args:
            account (UserAccount): Snapshot whose ``version`` is the version
                it was loaded at

        Returns:
            UserAccount: The stored snapshot, with its version incremented

        Raises:
            AccountNotFound: If the account was never created
            PersistConflict: If the stored version moved on since load
        """
        pass

    @abstractmethod
    def create(self, account: UserAccount) -> UserAccount:
        """Store a new account at version 0.

        Raises:
            AccountExists: If ``account.user_id`` is already stored
        """
        pass

    @abstractmethod
    def list_user_ids(self) -> List[str]:
        pass

    def exists(self, user_id: str) -> bool:
        try:
            self.load(user_id)
        except AccountNotFound:
            return False
        return True

    def find_by_referral_code(self, code: str) -> Optional[UserAccount]:
        """Find the account owning a referral code.

        The default implementation scans every account; backends with an
        index should override it.
        """
        for user_id in self.list_user_ids():
            account = self.load(user_id)
            if account.referral_code == code:
                return account
        return None

    @staticmethod
    def _check_version(account: UserAccount, stored_version: int) -> None:
        if stored_version != account.version:
            logger.warning(
                "persist conflict for %s: expected version %d, stored %d",
                account.user_id, account.version, stored_version,
            )
            raise PersistConflict(account.user_id, account.version, stored_version)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(backend={self.get_name()})>"
