"""Points Calculator - deterministic Green Points rules for a submission.

The rules are a fixed table: every term depends on the submission alone, the
terms are added together, and the sum is floored at ``MINIMUM_POINTS``. The
weight bonus is not part of this total; the wallet adds it when the points
are credited (see ``greenwallet.models.wallet.weight_bonus``).
"""

import math
from typing import Dict, List, Tuple

from greenwallet.models import Condition, ItemType, PointsBreakdown, Submission, UserTier

BASE_POINTS: Dict[ItemType, int] = {
    ItemType.SMARTPHONE: 50,
    ItemType.BATTERY: 30,
    ItemType.LAPTOP: 80,
    ItemType.TABLET: 40,
    ItemType.CHARGER: 15,
    ItemType.HEADPHONES: 20,
    ItemType.MONITOR: 60,
    ItemType.KEYBOARD: 10,
    ItemType.MOUSE: 8,
    ItemType.CABLE: 5,
    ItemType.OTHER: 10,
}
DEFAULT_BASE_POINTS = 10

CONDITION_BONUS: Dict[Condition, int] = {
    Condition.WORKING: 30,
    Condition.REPAIRABLE: 15,
    Condition.DEAD: 0,
}

TIER_BONUS: Dict[UserTier, int] = {
    UserTier.REGULAR: 20,
    UserTier.OCCASIONAL: 10,
    UserTier.FIRST_TIME: 0,
}

POINTS_PER_ITEM = 5

RARE_ITEMS = frozenset({
    ItemType.SMARTPHONE,
    ItemType.LAPTOP,
    ItemType.TABLET,
    ItemType.MONITOR,
})
BULK_QUANTITY = 5
BULK_BONUS = 25
RARE_ITEM_BONUS = 10
PERFECT_CONDITION_QUANTITY = 3
PERFECT_CONDITION_BONUS = 15

MINIMUM_POINTS = 5

_VALID_ITEM_TYPES = {t.value for t in ItemType}
_VALID_CONDITIONS = {c.value for c in Condition}
_VALID_TIERS = {t.value for t in UserTier}


class PointsCalculator:
    """Stateless rule set turning a submission into Green Points.

    Usage Example:
        ```python
        submission = Submission(
            item_type="Smartphone",
            condition="Working",
            quantity=1,
            user_tier="First-time",
        )
        assert PointsCalculator.validate(submission) == []
        total, breakdown = PointsCalculator.compute(submission)
        print(total)                   # 95
        print(breakdown.bonus_points)  # 10 (rare item)
        ```
    """

    @staticmethod
    def validate(submission: Submission) -> List[str]:
        """Collect every problem with a submission.

        Never raises. An empty list means the submission can be computed.

        Args:
            submission (Submission): Raw submission attributes

        Returns:
            List[str]: Human-readable error messages, in field order
        """
        errors: List[str] = []

        if not submission.item_type:
            errors.append("Item type is required")
        elif submission.item_type not in _VALID_ITEM_TYPES:
            errors.append(f"Invalid item type: {submission.item_type}")

        if not submission.condition:
            errors.append("Item condition is required")
        elif submission.condition not in _VALID_CONDITIONS:
            errors.append(f"Invalid item condition: {submission.condition}")

        if submission.quantity is None or submission.quantity < 1:
            errors.append("Quantity must be at least 1")

        if submission.weight is not None:
            if not math.isfinite(submission.weight):
                errors.append("Weight must be a finite number")
            elif submission.weight < 0:
                errors.append("Weight cannot be negative")

        if not submission.user_tier:
            errors.append("User tier is required")
        elif submission.user_tier not in _VALID_TIERS:
            errors.append(f"Invalid user tier: {submission.user_tier}")

        return errors

    @staticmethod
    def special_bonus(item_type: ItemType, condition: Condition, quantity: int) -> int:
        """Bulk, rare-item and perfect-condition bonuses. They stack."""
        bonus = 0
        if quantity >= BULK_QUANTITY:
            bonus += BULK_BONUS
        if item_type in RARE_ITEMS:
            bonus += RARE_ITEM_BONUS
        if condition == Condition.WORKING and quantity >= PERFECT_CONDITION_QUANTITY:
            bonus += PERFECT_CONDITION_BONUS
        return bonus

    @classmethod
    def breakdown(cls, submission: Submission) -> PointsBreakdown:
        """Itemize the award for a valid submission.

        Raises:
            ValueError: If the submission fails validation
        """
        errors = cls.validate(submission)
        if errors:
            raise ValueError("; ".join(errors))

        item_type = ItemType(submission.item_type)
        condition = Condition(submission.condition)
        tier = UserTier(submission.user_tier)
        quantity = submission.quantity

        base = BASE_POINTS.get(item_type, DEFAULT_BASE_POINTS)
        condition_bonus = CONDITION_BONUS[condition]
        quantity_bonus = quantity * POINTS_PER_ITEM
        frequency_bonus = TIER_BONUS[tier]
        bonus = cls.special_bonus(item_type, condition, quantity)

        total = max(
            base + condition_bonus + quantity_bonus + frequency_bonus + bonus,
            MINIMUM_POINTS,
        )
        return PointsBreakdown(
            base_points=base,
            condition_bonus=condition_bonus,
            quantity_bonus=quantity_bonus,
            frequency_bonus=frequency_bonus,
            bonus_points=bonus,
            total=total,
        )

    @classmethod
    def compute(cls, submission: Submission) -> Tuple[int, PointsBreakdown]:
        """Compute the point award for a valid submission.

        Returns:
            Tuple[int, PointsBreakdown]: ``(total, breakdown)`` with
            ``total == breakdown.total``

        Raises:
            ValueError: If the submission fails validation
        """
        result = cls.breakdown(submission)
        return result.total, result
