"""Transaction models - the append-only Green Wallet history records.

This module provides the Transaction class and TransactionKind enum. Every
point movement in a wallet is recorded as exactly one Transaction.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4
from datetime import datetime, UTC
from pydantic import BaseModel, ConfigDict, Field, model_validator

from greenwallet.models.submission import UserTier


class TransactionKind(str, Enum):
    """Direction of a wallet transaction.

    Attributes:
        CREDIT (str): Points earned, usually from an e-waste submission.
            Stored with ``points >= 0``.
        DEBIT (str): Points spent on a reward redemption.
            Stored with ``points <= 0``.
    """
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionMetadata(BaseModel):
    """Attributes of the submission that produced a credit.

    Debits carry no metadata, or only the parts that make sense for a
    redemption (``description``).
    """

    model_config = ConfigDict(frozen=True)

    item_type: Optional[str] = None
    condition: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    weight: Optional[float] = Field(default=None, ge=0)
    user_tier: Optional[UserTier] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class Transaction(BaseModel):
    """A single, immutable Green Wallet history record.

    The sign of ``points`` carries the direction and is kept exactly as
    applied: a redemption of 50 points is stored as ``points=-50``.

    Invariants (checked on construction):
    - kind == CREDIT implies points >= 0
    - kind == DEBIT implies points <= 0

    Usage Example:
        ```python
        earned = Transaction(
            points=95,
            kind=TransactionKind.CREDIT,
            source="Sold Smartphone",
            metadata=TransactionMetadata(item_type="Smartphone", quantity=1),
        )
        spent = Transaction(
            points=-50,
            kind=TransactionKind.DEBIT,
            source="Redeemed for LED Bulb Set",
        )
        assert earned.is_credit and spent.is_debit
        assert spent.magnitude == 50
        ```

    Attributes:
        transaction_id (str): Auto-generated UUID
        timestamp (datetime): UTC creation time
        points (int): Signed point delta
        kind (TransactionKind): credit or debit
        source (str): Human readable provenance ("Sold Laptop", "Redeemed for X")
        metadata (Optional[TransactionMetadata]): Submission attributes for credits
    """

    model_config = ConfigDict(frozen=True)

    transaction_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique transaction ID"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Creation timestamp"
    )
    points: int = Field(description="Signed point delta")
    kind: TransactionKind = Field(description="credit or debit")
    source: str = Field(min_length=1, description="Provenance of the points")
    metadata: Optional[TransactionMetadata] = Field(
        default=None,
        description="Submission attributes (credits only)"
    )

    @model_validator(mode="after")
    def _check_sign(self) -> "Transaction":
        if self.kind == TransactionKind.CREDIT and self.points < 0:
            raise ValueError("Credit transactions must have non-negative points")
        if self.kind == TransactionKind.DEBIT and self.points > 0:
            raise ValueError("Debit transactions must have non-positive points")
        return self

    @property
    def is_credit(self) -> bool:
        return self.kind == TransactionKind.CREDIT

    @property
    def is_debit(self) -> bool:
        return self.kind == TransactionKind.DEBIT

    @property
    def magnitude(self) -> int:
        """Absolute number of points moved."""
        return abs(self.points)
