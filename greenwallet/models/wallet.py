"""Green Wallet model - a user's point balance and transaction history.

This module provides the GreenWallet class (the per-user ledger). A wallet is
an immutable snapshot: ``credit`` and ``debit`` return a new wallet with the
transaction appended and every aggregate updated in the same step.
"""

import math
from datetime import datetime
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator

from greenwallet.errors import InsufficientBalance
from greenwallet.models.transaction import (
    Transaction,
    TransactionKind,
    TransactionMetadata,
)

WEIGHT_BONUS_PER_KG = 2


def weight_bonus(weight: Optional[float]) -> int:
    """Points added for the weight of a submission.

    ``floor(weight * 2)``, so balances stay whole numbers. Missing,
    non-finite or non-positive weights earn nothing.
    """
    if weight is None or not math.isfinite(weight) or weight <= 0:
        return 0
    return math.floor(weight * WEIGHT_BONUS_PER_KG)


class GreenWallet(BaseModel):
    """Per-user ledger of Green Points.

    Important Design Decisions:
    - Points are whole integers; the weight bonus is floored (see ``weight_bonus``)
    - ``history`` is append-only and kept in insertion order, which is not
      guaranteed to be sorted by timestamp if clocks skew
    - ``balance`` always equals the sum of ``points`` over ``history``;
      this is validated on every construction

    Usage Example:
        ```python
        wallet = GreenWallet()
        wallet = wallet.credit(95, "Sold Smartphone")
        wallet = wallet.debit(50, "Redeemed for LED Bulb Set")
        print(wallet.balance)        # 45
        print(wallet.total_earned)   # 95
        print(wallet.total_redeemed) # 50
        ```

    Attributes:
        balance (int): Spendable points. Must be >= 0.
        total_earned (int): Lifetime credited points, including weight bonuses
        total_redeemed (int): Lifetime debited points (absolute value)
        history (Tuple[Transaction, ...]): Every transaction, oldest first
    """

    model_config = ConfigDict(frozen=True)

    balance: int = Field(default=0, ge=0, description="Spendable points")
    total_earned: int = Field(default=0, ge=0, description="Lifetime credited points")
    total_redeemed: int = Field(default=0, ge=0, description="Lifetime redeemed points")
    history: Tuple[Transaction, ...] = Field(
        default=(),
        description="Append-only transaction history"
    )

    @model_validator(mode="after")
    def _check_balance(self) -> "GreenWallet":
        expected = sum(t.points for t in self.history)
        if self.balance != expected:
            raise ValueError(
                f"Wallet balance {self.balance} does not match history total {expected}"
            )
        return self

    @property
    def credit_count(self) -> int:
        return sum(1 for t in self.history if t.is_credit)

    @property
    def last_transaction(self) -> Optional[Transaction]:
        return self.history[-1] if self.history else None

    def can_spend(self, points: int) -> bool:
        """Check if the wallet can cover a debit of ``points``."""
        return self.balance >= points

    def credit(self, points: int, source: str,
               metadata: Optional[TransactionMetadata] = None,
               timestamp: Optional[datetime] = None) -> "GreenWallet":
        """Return a new wallet with a credit appended.

        When ``metadata.weight`` is positive the weight bonus is added to
        ``points`` first, so the recorded transaction carries the full
        applied amount.

        Args:
            points (int): Points awarded by the calculator, must be >= 0
            source (str): Provenance, e.g. "Sold Laptop"
            metadata (Optional[TransactionMetadata]): Submission attributes
            timestamp (Optional[datetime]): Creation time, defaults to now (UTC)

        Returns:
            GreenWallet: The updated wallet

        Raises:
            ValueError: If points is negative
        """
        if points < 0:
            raise ValueError("Credit points must be non-negative")

        applied = points + weight_bonus(metadata.weight if metadata else None)

        fields = dict(points=applied, kind=TransactionKind.CREDIT,
                      source=source, metadata=metadata)
        if timestamp is not None:
            fields["timestamp"] = timestamp
        transaction = Transaction(**fields)

        return GreenWallet(
            balance=self.balance + applied,
            total_earned=self.total_earned + applied,
            total_redeemed=self.total_redeemed,
            history=self.history + (transaction,),
        )

    def debit(self, points: int, source: str,
              metadata: Optional[TransactionMetadata] = None,
              timestamp: Optional[datetime] = None) -> "GreenWallet":
        """Return a new wallet with a debit appended.

        Args:
            points (int): Points to spend, must be > 0
            source (str): Provenance, e.g. "Redeemed for Compost Bin"
            metadata (Optional[TransactionMetadata]): Optional redemption notes
            timestamp (Optional[datetime]): Creation time, defaults to now (UTC)

        Returns:
            GreenWallet: The updated wallet

        Raises:
            ValueError: If points <= 0
            InsufficientBalance: If points exceeds the current balance
        """
        if points <= 0:
            raise ValueError("Debit points must be positive")
        if not self.can_spend(points):
            raise InsufficientBalance(current=self.balance, requested=points)

        fields = dict(points=-points, kind=TransactionKind.DEBIT,
                      source=source, metadata=metadata)
        if timestamp is not None:
            fields["timestamp"] = timestamp
        transaction = Transaction(**fields)

        return GreenWallet(
            balance=self.balance - points,
            total_earned=self.total_earned,
            total_redeemed=self.total_redeemed + points,
            history=self.history + (transaction,),
        )
