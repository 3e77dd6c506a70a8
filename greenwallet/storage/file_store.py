"""File Account Store - one JSON file per account.

Each account lives in ``<data_dir>/<quoted user id>.json``. Writes go to a
temporary file in the same directory and are moved into place with
``os.replace`` so a reader never sees a half-written account.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Union
from urllib.parse import quote, unquote

from greenwallet.errors import AccountExists, AccountNotFound
from greenwallet.models import UserAccount
from greenwallet.storage.base import AccountStore

logger = logging.getLogger("greenwallet.storage.file")

_SUFFIX = ".json"


class FileAccountStore(AccountStore):
    """Account store persisting each account as a JSON file.

    Thread Safety:
        Version check and file replacement happen under a per-store lock.
        This serializes writers within one process; separate processes
        sharing a data directory should use the document store instead.

    Usage Example:
        ```python
        store = FileAccountStore("var/accounts")
        store.create(UserAccount(user_id="u-1"))
        print(store.list_user_ids())  # ['u-1']
        ```
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def get_name(self) -> str:
        return "file"

    def _path(self, user_id: str) -> Path:
        return self.data_dir / (quote(user_id, safe="") + _SUFFIX)

    def _read(self, user_id: str) -> UserAccount:
        path = self._path(user_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise AccountNotFound(user_id) from None
        return UserAccount.model_validate_json(raw)

    def _write(self, account: UserAccount) -> None:
        path = self._path(account.user_id)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(account.model_dump(mode="json"), fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def load(self, user_id: str) -> UserAccount:
        return self._read(user_id)

    def persist(self, account: UserAccount) -> UserAccount:
        with self._lock:
            current = self._read(account.user_id)
            self._check_version(account, current.version)
            stored = account.model_copy(update={"version": account.version + 1})
            self._write(stored)
        logger.debug("wrote %s at version %d", account.user_id, stored.version)
        return stored

    def create(self, account: UserAccount) -> UserAccount:
        with self._lock:
            if self._path(account.user_id).exists():
                raise AccountExists(account.user_id)
            stored = account.model_copy(update={"version": 0})
            self._write(stored)
        return stored

    def list_user_ids(self) -> List[str]:
        return sorted(
            unquote(p.name[: -len(_SUFFIX)])
            for p in self.data_dir.glob("*" + _SUFFIX)
            if not p.name.startswith(".tmp-")
        )
