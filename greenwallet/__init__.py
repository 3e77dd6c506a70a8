"""Green Wallet - Green Points ledger engine for e-waste recycling rewards."""

__version__ = "0.1.0"

# Main service interface
from greenwallet.wallet_service import (
    GreenWalletService,
    SubmissionResult,
    RedemptionResult,
    HistoryPage,
    MonthlyStats,
    UserStats,
)

# Core models (for advanced usage)
from greenwallet.models import (
    ItemType,
    Condition,
    UserTier,
    Submission,
    PointsBreakdown,
    Transaction,
    TransactionKind,
    TransactionMetadata,
    GreenWallet,
    UserAccount,
    Profile,
)

# Components (for advanced usage)
from greenwallet.points_calculator import PointsCalculator
from greenwallet.tiers import TierClassifier
from greenwallet.badges import Badge, BadgeEngine
from greenwallet.bonus_window import BonusStatus, BonusWindow
from greenwallet.ledger_manager import LedgerManager, apply_credit, apply_debit
from greenwallet.storage import AccountStore, DocumentAccountStore, FileAccountStore
from greenwallet.errors import (
    GreenWalletError,
    ValidationError,
    InsufficientBalance,
    AccountNotFound,
    AccountExists,
    PersistConflict,
)

__all__ = [
    # Service
    "GreenWalletService",
    "SubmissionResult",
    "RedemptionResult",
    "HistoryPage",
    "MonthlyStats",
    "UserStats",
    # Models
    "ItemType",
    "Condition",
    "UserTier",
    "Submission",
    "PointsBreakdown",
    "Transaction",
    "TransactionKind",
    "TransactionMetadata",
    "GreenWallet",
    "UserAccount",
    "Profile",
    # Components
    "PointsCalculator",
    "TierClassifier",
    "Badge",
    "BadgeEngine",
    "BonusStatus",
    "BonusWindow",
    "LedgerManager",
    "apply_credit",
    "apply_debit",
    "AccountStore",
    "DocumentAccountStore",
    "FileAccountStore",
    # Errors
    "GreenWalletError",
    "ValidationError",
    "InsufficientBalance",
    "AccountNotFound",
    "AccountExists",
    "PersistConflict",
]
