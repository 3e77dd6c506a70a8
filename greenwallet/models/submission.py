"""Submission models - the e-waste item a user hands in.

This module provides the enumerations shared by the points rules (item type,
condition, user tier), the raw ``Submission`` a caller sends, and the
``PointsBreakdown`` returned for transparency.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ItemType(str, Enum):
    """Kinds of e-waste accepted for Green Points."""
    SMARTPHONE = "Smartphone"
    BATTERY = "Battery"
    LAPTOP = "Laptop"
    TABLET = "Tablet"
    CHARGER = "Charger"
    HEADPHONES = "Headphones"
    MONITOR = "Monitor"
    KEYBOARD = "Keyboard"
    MOUSE = "Mouse"
    CABLE = "Cable"
    OTHER = "Other"


class Condition(str, Enum):
    WORKING = "Working"
    REPAIRABLE = "Repairable"
    DEAD = "Dead"


class UserTier(str, Enum):
    """Activity tier, ordered from least to most active.

    Members compare by rank, so ``UserTier.REGULAR > UserTier.OCCASIONAL``.
    """
    FIRST_TIME = "First-time"
    OCCASIONAL = "Occasional"
    REGULAR = "Regular"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, UserTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, UserTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, UserTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, UserTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_RANK = {
    UserTier.FIRST_TIME: 0,
    UserTier.OCCASIONAL: 1,
    UserTier.REGULAR: 2,
}


class Submission(BaseModel):
    """Raw submission attributes as received from a caller.

    Fields are deliberately loose (plain strings, optional values) so that
    ``PointsCalculator.validate`` can report every problem at once instead of
    pydantic rejecting the first bad field.

    Attributes:
        item_type (Optional[str]): One of the ``ItemType`` values
        condition (Optional[str]): One of the ``Condition`` values
        quantity (Optional[int]): Number of items, must be >= 1
        weight (Optional[float]): Total weight in kg, must be >= 0 when given
        user_tier (Optional[str]): Tier of the submitting user at submit time
        description (Optional[str]): Free text from the user
        image_url (Optional[str]): Photo of the items
    """

    item_type: Optional[str] = None
    condition: Optional[str] = None
    quantity: Optional[int] = None
    weight: Optional[float] = None
    user_tier: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class PointsBreakdown(BaseModel):
    """Itemized point award. ``total`` excludes any weight bonus."""

    base_points: int = Field(description="Lookup by item type")
    condition_bonus: int = Field(description="Working/Repairable bonus")
    quantity_bonus: int = Field(description="5 points per item")
    frequency_bonus: int = Field(description="Bonus for the user's tier")
    bonus_points: int = Field(description="Bulk, rare item and perfect condition bonuses")
    total: int = Field(ge=5, description="Sum of all terms, floored at 5")
