"""Shared fixtures."""

from datetime import datetime, timedelta, UTC

import pytest

from greenwallet.config import Settings
from greenwallet.storage import DocumentAccountStore
from greenwallet.wallet_service import GreenWalletService


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(storage_backend="document", history_page_size=20, history_max_page_size=50)


@pytest.fixture
def store():
    return DocumentAccountStore()


@pytest.fixture
def service(store, settings, clock):
    return GreenWalletService(store, settings=settings, clock=clock)
