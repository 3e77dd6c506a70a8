"""Badge Engine - achievement badges derived from account aggregates.

Badges are evaluated after every credit. A badge is awarded the first time
its rule holds and is never taken away again.
"""

from typing import Callable, List, Tuple
from pydantic import BaseModel, ConfigDict, Field

from greenwallet.models import UserAccount, UserTier


class Badge(BaseModel):
    """Display metadata for an achievement badge."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Badge identifier, also the display name")
    icon: str = Field(description="Emoji shown next to the name")
    description: str = Field(description="What the user did to earn it")


class BadgeRule:
    """A badge together with the predicate that awards it."""

    def __init__(self, badge: Badge, earned: Callable[[UserAccount], bool]):
        self.badge = badge
        self.earned = earned

    def __repr__(self) -> str:
        return f"BadgeRule(badge={self.badge.name})"


WELCOME = "Welcome"
ECO_HERO = "Eco Hero"
GREEN_CHAMPION = "Green Champion"
BULK_RECYCLER = "Bulk Recycler"
HEAVY_LIFTER = "Heavy Lifter"
REGULAR_RECYCLER = "Regular Recycler"

BADGE_RULES: Tuple[BadgeRule, ...] = (
    BadgeRule(
        Badge(name=WELCOME, icon="🌱", description="Made your first e-waste submission"),
        lambda account: True,
    ),
    BadgeRule(
        Badge(name=ECO_HERO, icon="🦸", description="Earned 500 Green Points"),
        lambda account: account.wallet.total_earned >= 500,
    ),
    BadgeRule(
        Badge(name=GREEN_CHAMPION, icon="🏆", description="Earned 1000 Green Points"),
        lambda account: account.wallet.total_earned >= 1000,
    ),
    BadgeRule(
        Badge(name=BULK_RECYCLER, icon="📦", description="Recycled 10 or more items"),
        lambda account: account.total_items_recycled >= 10,
    ),
    BadgeRule(
        Badge(name=HEAVY_LIFTER, icon="🏋️", description="Recycled 50 kg of e-waste"),
        lambda account: account.total_weight_recycled >= 50,
    ),
    BadgeRule(
        Badge(name=REGULAR_RECYCLER, icon="♻️", description="Reached the Regular tier"),
        lambda account: account.tier == UserTier.REGULAR,
    ),
)

_CATALOG = {rule.badge.name: rule.badge for rule in BADGE_RULES}


class BadgeEngine:
    """Awards badges whose rules hold for an account.

    Usage Example:
        ```python
        new_badges = BadgeEngine.newly_earned(account)
        account = account.model_copy(update={"badges": account.badges + new_badges})
        ```
    """

    @staticmethod
    def newly_earned(account: UserAccount) -> Tuple[str, ...]:
        """Badges the account qualifies for but does not hold yet, in catalog order."""
        return tuple(
            rule.badge.name
            for rule in BADGE_RULES
            if not account.has_badge(rule.badge.name) and rule.earned(account)
        )

    @staticmethod
    def evaluate(account: UserAccount) -> Tuple[str, ...]:
        """Return the account's full badge tuple after awarding new badges.

        Held badges keep their position; new ones are appended.
        """
        return account.badges + BadgeEngine.newly_earned(account)

    @staticmethod
    def describe(badge_names: Tuple[str, ...]) -> List[Badge]:
        """Resolve badge names to display metadata, skipping unknown names."""
        return [_CATALOG[name] for name in badge_names if name in _CATALOG]

    @staticmethod
    def catalog() -> List[Badge]:
        return [rule.badge for rule in BADGE_RULES]
