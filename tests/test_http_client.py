"""Tests for the HTTP client, against a fake requests session."""

import pytest
import requests

from greenwallet.errors import (
    AccountNotFound,
    InsufficientBalance,
    PersistConflict,
    ValidationError,
)
from greenwallet.http_client import GreenWalletClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response):
        self.headers = {}
        self.response = response
        self.calls = []
        self.closed = False

    def request(self, **kwargs):
        self.calls.append(kwargs)
        return self.response

    def close(self):
        self.closed = True


def make_client(response):
    session = FakeSession(response)
    return GreenWalletClient("http://wallet.test/", session=session, timeout=5), session


class TestRequests:
    def test_headers(self):
        _, session = make_client(FakeResponse(payload={}))
        assert session.headers["Content-Type"] == "application/json"

    def test_submit(self):
        client, session = make_client(FakeResponse(payload={"points": 95}))
        result = client.submit("alice", "Smartphone", "Working", quantity=1)

        assert result == {"points": 95}
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "http://wallet.test/v1/users/alice/submissions"
        assert call["json"]["item_type"] == "Smartphone"
        assert call["json"]["quantity"] == 1
        assert call["timeout"] == 5

    def test_history_params(self):
        client, session = make_client(FakeResponse(payload={"transactions": []}))
        client.get_history("alice", page=2, kind="debit")
        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["params"] == {"page": 2, "kind": "debit"}

    def test_preview(self):
        client, session = make_client(FakeResponse(payload={"estimated_points": 95}))
        client.preview("alice", "Smartphone", "Working", quantity=1, weight=0.5)
        call = session.calls[0]
        assert call["url"] == "http://wallet.test/v1/users/alice/submissions/preview"
        assert call["json"]["weight"] == 0.5

    def test_stats_params(self):
        client, session = make_client(FakeResponse(payload={"monthly_stats": []}))
        client.get_stats("alice", months=3)
        call = session.calls[0]
        assert call["url"] == "http://wallet.test/v1/users/alice/stats"
        assert call["params"] == {"months": 3}

    def test_referral_code_unwrapped(self):
        client, _ = make_client(FakeResponse(payload={"referral_code": "GPAB12CD"}))
        assert client.get_referral_code("alice") == "GPAB12CD"

    def test_context_manager_closes(self):
        client, session = make_client(FakeResponse(payload={}))
        with client:
            client.health()
        assert session.closed is True


class TestErrors:
    def test_insufficient_balance(self):
        client, _ = make_client(FakeResponse(400, {"detail": {
            "message": "Insufficient points balance",
            "code": "INSUFFICIENT_BALANCE",
            "current_balance": 100,
            "requested": 150,
        }}))
        with pytest.raises(InsufficientBalance) as exc_info:
            client.redeem("alice", 150, "Bike")
        assert exc_info.value.current == 100
        assert exc_info.value.requested == 150

    def test_validation(self):
        client, _ = make_client(FakeResponse(400, {"detail": {
            "code": "VALIDATION_FAILED",
            "errors": ["Item type is required"],
        }}))
        with pytest.raises(ValidationError) as exc_info:
            client.post("/v1/users/alice/submissions", data={})
        assert exc_info.value.errors == ["Item type is required"]

    def test_not_found(self):
        client, _ = make_client(FakeResponse(404, {"detail": {
            "message": "Account nobody not found",
            "code": "ACCOUNT_NOT_FOUND",
            "user_id": "nobody",
        }}))
        with pytest.raises(AccountNotFound) as exc_info:
            client.get_balance("nobody")
        assert exc_info.value.user_id == "nobody"
        assert str(exc_info.value) == "Account nobody not found"

    def test_other_errors_are_http_errors(self):
        client, _ = make_client(FakeResponse(500))
        with pytest.raises(requests.HTTPError):
            client.get_balance("alice")

    def test_framework_errors_are_http_errors(self):
        client, _ = make_client(FakeResponse(422, {"detail": [{"msg": "field required"}]}))
        with pytest.raises(requests.HTTPError):
            client.register("")

    def test_conflict_keeps_versions(self):
        client, _ = make_client(FakeResponse(409, {"detail": {
            "code": "PERSIST_CONFLICT",
            "user_id": "alice",
            "expected_version": 3,
            "actual_version": 4,
        }}))
        with pytest.raises(PersistConflict) as exc_info:
            client.redeem("alice", 10, "Mug")
        assert exc_info.value.user_id == "alice"
        assert exc_info.value.expected_version == 3
        assert exc_info.value.actual_version == 4
