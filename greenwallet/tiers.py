"""Tier classification from a wallet's credit history."""

from typing import Iterable

from greenwallet.models import Transaction, UserTier

REGULAR_MIN_CREDITS = 10
OCCASIONAL_MIN_CREDITS = 3


class TierClassifier:
    """Maps the number of credit transactions to a ``UserTier``.

    The credit count never shrinks, so the tier never goes down either.
    """

    @staticmethod
    def for_credit_count(count: int) -> UserTier:
        if count >= REGULAR_MIN_CREDITS:
            return UserTier.REGULAR
        if count >= OCCASIONAL_MIN_CREDITS:
            return UserTier.OCCASIONAL
        return UserTier.FIRST_TIME

    @classmethod
    def classify(cls, history: Iterable[Transaction]) -> UserTier:
        return cls.for_credit_count(sum(1 for t in history if t.is_credit))
