"""Document Account Store - accounts kept as JSON-compatible documents.

Accounts are stored the way a document database holds them: one plain dict
per user, keyed by user id. Every load decodes a fresh ``UserAccount`` from
its document, so no two callers ever share model instances.

By default the documents live in an in-process dictionary. Any
``MutableMapping`` of documents can be passed in instead.
"""

import threading
from typing import Any, Dict, List, MutableMapping, Optional

from greenwallet.errors import AccountExists, AccountNotFound
from greenwallet.models import UserAccount
from greenwallet.storage.base import AccountStore


class DocumentAccountStore(AccountStore):
    """Account store backed by a mapping of user id to document.

    Thread Safety:
        The compare-and-swap inside ``persist`` and the duplicate check in
        ``create`` run under an internal lock, matching the single-document
        atomic update a document database provides.

    Usage Example:
        ```python
        store = DocumentAccountStore()
        store.create(UserAccount(user_id="u-1", name="Ada"))
        account = store.load("u-1")
        print(account.version)  # 0
        ```
    """

    def __init__(self, documents: Optional[MutableMapping[str, Dict[str, Any]]] = None):
        self._documents: MutableMapping[str, Dict[str, Any]] = (
            documents if documents is not None else {}
        )
        self._lock = threading.Lock()

    def get_name(self) -> str:
        return "document"

    def load(self, user_id: str) -> UserAccount:
        document = self._documents.get(user_id)
        if document is None:
            raise AccountNotFound(user_id)
        return UserAccount.model_validate(document)

    def persist(self, account: UserAccount) -> UserAccount:
        with self._lock:
            document = self._documents.get(account.user_id)
            if document is None:
                raise AccountNotFound(account.user_id)
            self._check_version(account, document["version"])

            stored = account.model_copy(update={"version": account.version + 1})
            self._documents[account.user_id] = stored.model_dump(mode="json")
        return stored

    def create(self, account: UserAccount) -> UserAccount:
        with self._lock:
            if account.user_id in self._documents:
                raise AccountExists(account.user_id)
            stored = account.model_copy(update={"version": 0})
            self._documents[account.user_id] = stored.model_dump(mode="json")
        return stored

    def list_user_ids(self) -> List[str]:
        return list(self._documents.keys())

    def find_by_referral_code(self, code: str) -> Optional[UserAccount]:
        for document in list(self._documents.values()):
            if document.get("referral_code") == code:
                return UserAccount.model_validate(document)
        return None

    def count(self) -> int:
        return len(self._documents)

    def clear(self) -> None:
        """Remove all documents.

        Warning:
            Destructive; intended for tests.
        """
        with self._lock:
            self._documents.clear()
