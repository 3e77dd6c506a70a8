"""User account model - the unit of persistence for the ledger engine.

This module provides the UserAccount class, which bundles a user's Green
Wallet with the fields derived from it (tier, badges, recycling counters)
and the profile data the rest of the application stores alongside.
"""

from typing import Optional, Tuple
from datetime import datetime, UTC
from pydantic import BaseModel, ConfigDict, Field

from greenwallet.models.submission import UserTier
from greenwallet.models.wallet import GreenWallet


class Profile(BaseModel):
    """Contact details captured at registration."""

    model_config = ConfigDict(frozen=True)

    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class UserAccount(BaseModel):
    """A user's Green Wallet together with every field derived from it.

    UserAccount is an immutable snapshot. The ledger engine never edits an
    account in place; applying a credit or debit produces a new snapshot in
    which wallet, tier, badges and counters were all updated together, and
    that snapshot is what gets persisted.

    Key Concepts:
    - **Wallet**: balance, totals and append-only history
    - **Tier**: recomputed from the credit count after every credit
    - **Badges**: award order is kept for display; never removed
    - **Version**: bumped by the store on each persist, used for
      compare-and-swap between concurrent writers

    Usage Example:
        ```python
        account = UserAccount(user_id="u-1", name="Ada", email="ada@example.com")
        assert account.wallet.balance == 0
        assert account.tier == UserTier.FIRST_TIME
        assert account.badges == ()
        ```

    Attributes:
        user_id (str): Unique identifier, the storage key
        name (str): Display name
        email (str): Contact email (lower-cased)
        profile (Profile): Optional address/phone details
        wallet (GreenWallet): The user's ledger
        tier (UserTier): Activity tier derived from the credit count
        badges (Tuple[str, ...]): Earned badge names, in award order
        total_items_recycled (int): Sum of submitted quantities
        total_weight_recycled (float): Sum of submitted weights (kg)
        referral_code (Optional[str]): Generated on first access
        version (int): Optimistic concurrency counter, managed by the store
        created_at (datetime): Registration time
        updated_at (datetime): Time of the last applied transaction
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1, description="Unique user identifier")
    name: str = Field(default="", description="Display name")
    email: str = Field(default="", description="Contact email")
    profile: Profile = Field(default_factory=Profile)
    wallet: GreenWallet = Field(default_factory=GreenWallet)
    tier: UserTier = Field(default=UserTier.FIRST_TIME)
    badges: Tuple[str, ...] = Field(default=())
    total_items_recycled: int = Field(default=0, ge=0)
    total_weight_recycled: float = Field(default=0.0, ge=0)
    referral_code: Optional[str] = Field(default=None)
    version: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def display_name(self) -> str:
        return self.name or self.user_id

    def has_badge(self, name: str) -> bool:
        return name in self.badges
