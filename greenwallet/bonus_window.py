"""Bonus Window - the time-boxed "2X value" state after a credit.

The window is never stored. It is derived on demand from the wallet history:
for ``hours`` after the most recent credit, redemptions are reported at
``multiplier`` times their point value. The number of points debited is
never changed by the window.
"""

from datetime import datetime, timedelta, UTC
from typing import Iterable, Optional
from pydantic import BaseModel, Field

from greenwallet.models import Transaction

DEFAULT_WINDOW_HOURS = 24
DEFAULT_MULTIPLIER = 2


class BonusStatus(BaseModel):
    """Snapshot of the bonus window at a given instant.

    Attributes:
        active (bool): True while a redemption earns the multiplier
        remaining_seconds (int): Whole seconds left, 0 when expired
        remaining_formatted (str): "5h 12m", "42m" or "Expired"
        multiplier (int): Multiplier applied to the effective value
            (1 when the window is not active)
        last_credit_at (Optional[datetime]): Timestamp of the credit that
            opened the window, None if the user never earned points
    """

    active: bool
    remaining_seconds: int = Field(ge=0)
    remaining_formatted: str
    multiplier: int = Field(ge=1)
    last_credit_at: Optional[datetime] = None


def format_remaining(seconds: int) -> str:
    """Render a remaining duration for display."""
    if seconds <= 0:
        return "Expired"
    hours, rest = divmod(seconds, 3600)
    minutes = rest // 60
    if hours >= 1:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class BonusWindow:
    """Derives ``BonusStatus`` from a transaction history.

    Usage Example:
        ```python
        window = BonusWindow()
        status = window.status(account.wallet.history)
        if status.active:
            print(f"2X value for {status.remaining_formatted}")
        ```
    """

    def __init__(self, hours: int = DEFAULT_WINDOW_HOURS,
                 multiplier: int = DEFAULT_MULTIPLIER):
        self.duration = timedelta(hours=hours)
        self.multiplier = multiplier

    @staticmethod
    def last_credit(history: Iterable[Transaction]) -> Optional[Transaction]:
        """Most recent credit by timestamp.

        Among credits sharing the latest timestamp, the last appended wins.
        """
        latest: Optional[Transaction] = None
        for transaction in history:
            if not transaction.is_credit:
                continue
            if latest is None or transaction.timestamp >= latest.timestamp:
                latest = transaction
        return latest

    def status(self, history: Iterable[Transaction],
               now: Optional[datetime] = None) -> BonusStatus:
        now = now or datetime.now(UTC)
        credit = self.last_credit(history)
        if credit is None:
            return BonusStatus(
                active=False,
                remaining_seconds=0,
                remaining_formatted=format_remaining(0),
                multiplier=1,
            )

        elapsed = now - credit.timestamp
        active = elapsed <= self.duration
        remaining = max(timedelta(0), self.duration - elapsed)
        # a credit stamped in the future (clock skew) cannot extend the window
        remaining = min(remaining, self.duration)
        remaining_seconds = int(remaining.total_seconds())

        return BonusStatus(
            active=active,
            remaining_seconds=remaining_seconds,
            remaining_formatted=format_remaining(remaining_seconds),
            multiplier=self.multiplier if active else 1,
            last_credit_at=credit.timestamp,
        )

    def is_active(self, history: Iterable[Transaction],
                  now: Optional[datetime] = None) -> bool:
        return self.status(history, now).active
