"""Error taxonomy for the Green Wallet ledger engine.

Every error raised here is recoverable from the caller's point of view: an
operation that fails never leaves a partially mutated account in storage.
"""

from typing import List, Optional


class GreenWalletError(Exception):
    """Base class for all ledger engine errors."""

    code = "GREEN_WALLET_ERROR"


class ValidationError(GreenWalletError):
    """One or more submission or request fields are malformed.

    All problems are collected so a caller can show every failure at once.

    Attributes:
        errors (List[str]): Human-readable validation messages
    """

    code = "VALIDATION_FAILED"

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


class InsufficientBalance(GreenWalletError):
    """A debit asked for more points than the wallet holds.

    Attributes:
        current (int): Balance at the time of the check
        requested (int): Points the caller tried to debit
    """

    code = "INSUFFICIENT_BALANCE"

    def __init__(self, current: int, requested: int):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Insufficient points balance: have {current}, requested {requested}"
        )


class AccountNotFound(GreenWalletError):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Account {user_id} not found")


class AccountExists(GreenWalletError):
    code = "ACCOUNT_EXISTS"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Account with ID {user_id} already exists")


class PersistConflict(GreenWalletError):
    """The stored account changed between load and persist.

    Raised by stores doing compare-and-swap on the account version. The
    caller should retry the whole operation from a fresh load.
    """

    code = "PERSIST_CONFLICT"

    def __init__(self, user_id: str, expected_version: int,
                 actual_version: Optional[int] = None):
        self.user_id = user_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrent update on account {user_id}: expected version "
            f"{expected_version}, found {actual_version}"
        )
