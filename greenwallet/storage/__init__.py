"""Storage backends for user accounts.

Both backends satisfy the same ``AccountStore`` contract; ``build_store``
picks one from settings at startup.
"""

from greenwallet.config import Settings
from greenwallet.storage.base import AccountStore
from greenwallet.storage.document_store import DocumentAccountStore
from greenwallet.storage.file_store import FileAccountStore


def build_store(settings: Settings) -> AccountStore:
    if settings.storage_backend == "file":
        return FileAccountStore(settings.data_dir)
    return DocumentAccountStore()


__all__ = [
    "AccountStore",
    "DocumentAccountStore",
    "FileAccountStore",
    "build_store",
]
