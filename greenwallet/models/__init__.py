"""Core data models for the Green Wallet ledger engine."""

from greenwallet.models.submission import (
    ItemType,
    Condition,
    UserTier,
    Submission,
    PointsBreakdown,
)
from greenwallet.models.transaction import Transaction, TransactionKind, TransactionMetadata
from greenwallet.models.wallet import GreenWallet, weight_bonus
from greenwallet.models.account import UserAccount, Profile

__all__ = [
    "ItemType",
    "Condition",
    "UserTier",
    "Submission",
    "PointsBreakdown",
    "Transaction",
    "TransactionKind",
    "TransactionMetadata",
    "GreenWallet",
    "weight_bonus",
    "UserAccount",
    "Profile",
]
