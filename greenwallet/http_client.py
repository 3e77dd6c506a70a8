"""
HTTP client for the Green Wallet API.
Lets other services (the web frontend backend, scripts) talk to a running
Green Wallet server without importing the engine.
"""

import requests
from typing import Dict, Any, List, Optional

from greenwallet.errors import (
    AccountExists,
    AccountNotFound,
    GreenWalletError,
    InsufficientBalance,
    PersistConflict,
    ValidationError,
)


class GreenWalletClient:
    """
    HTTP client for a Green Wallet server.

    Engine errors reported by the server are raised again as the matching
    ``greenwallet.errors`` exception; anything else surfaces as
    ``requests.HTTPError``.
    """

    def __init__(self, base_url: str = "http://localhost:8000",
                 session: Optional[requests.Session] = None, timeout: float = 30):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the Green Wallet API (default: http://localhost:8000)
            session: Optional pre-configured session (proxies, auth headers, ...)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

        self.session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': 'GreenWallet-Client/1.0'
        })

    @staticmethod
    def _raise_engine_error(response: requests.Response) -> None:
        try:
            detail = response.json().get('detail')
        except ValueError:
            return
        if not isinstance(detail, dict):
            return

        code = detail.get('code')
        if code == InsufficientBalance.code:
            raise InsufficientBalance(detail.get('current_balance', 0), detail.get('requested', 0))
        if code == ValidationError.code:
            raise ValidationError(detail.get('errors') or [])
        if code == AccountNotFound.code:
            raise AccountNotFound(detail.get('user_id', ''))
        if code == AccountExists.code:
            raise AccountExists(detail.get('user_id', ''))
        if code == PersistConflict.code:
            raise PersistConflict(detail.get('user_id', ''),
                                  detail.get('expected_version', -1),
                                  detail.get('actual_version'))
        if code is not None:
            raise GreenWalletError(detail.get('message', code))

    def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint path (e.g., '/v1/users/alice/balance')
            data: Request body data (for POST)
            params: Query parameters (for GET)

        Returns:
            Decoded JSON response

        Raises:
            GreenWalletError: If the server reported an engine error
            requests.HTTPError: For any other non-2xx response
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=data,
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise TimeoutError(f"Request to {url} timed out")
        except requests.exceptions.ConnectionError:
            raise ConnectionError(f"Failed to connect to {url}. Is the server running?")

        if response.status_code >= 400:
            self._raise_engine_error(response)
            response.raise_for_status()

        return response.json()

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a GET request."""
        return self._make_request('GET', endpoint, params=params)

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Make a POST request."""
        return self._make_request('POST', endpoint, data=data)

    def health(self) -> Dict[str, Any]:
        return self.get('/health')

    # ========== Accounts ==========

    def register(self, user_id: str, name: str = "", email: str = "") -> Dict[str, Any]:
        return self.post('/v1/users', data={'user_id': user_id, 'name': name, 'email': email})

    def get_balance(self, user_id: str) -> Dict[str, Any]:
        return self.get(f'/v1/users/{user_id}/balance')

    # ========== Points ==========

    def preview(
        self,
        user_id: str,
        item_type: str,
        condition: str,
        quantity: int,
        weight: Optional[float] = None
    ) -> Dict[str, Any]:
        """Estimate the points a submission would earn, without crediting it."""
        data = {'item_type': item_type, 'condition': condition,
                'quantity': quantity, 'weight': weight}
        return self.post(f'/v1/users/{user_id}/submissions/preview', data=data)

    def submit(
        self,
        user_id: str,
        item_type: str,
        condition: str,
        quantity: int,
        weight: Optional[float] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Submit e-waste and earn Green Points.

        Example:
            ```python
            result = client.submit("alice", "Laptop", "Repairable", quantity=1, weight=2.5)
            print(f"Earned {result['points']} points, balance {result['new_balance']}")
            ```
        """
        data = {
            'item_type': item_type,
            'condition': condition,
            'quantity': quantity,
            'weight': weight,
            'description': description,
            'image_url': image_url
        }
        return self.post(f'/v1/users/{user_id}/submissions', data=data)

    def redeem(self, user_id: str, points: int, redeem_for: str,
               description: Optional[str] = None) -> Dict[str, Any]:
        """
        Redeem Green Points for a reward.

        Raises:
            InsufficientBalance: If the user cannot afford ``points``
        """
        data = {'points': points, 'redeem_for': redeem_for, 'description': description}
        return self.post(f'/v1/users/{user_id}/redemptions', data=data)

    def get_history(self, user_id: str, page: int = 1, limit: Optional[int] = None,
                    kind: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {'page': page}
        if limit is not None:
            params['limit'] = limit
        if kind is not None:
            params['kind'] = kind
        return self.get(f'/v1/users/{user_id}/history', params=params)

    def get_badges(self, user_id: str) -> List[Dict[str, Any]]:
        return self.get(f'/v1/users/{user_id}/badges')

    def get_bonus_status(self, user_id: str) -> Dict[str, Any]:
        return self.get(f'/v1/users/{user_id}/bonus')

    def get_dashboard(self, user_id: str) -> Dict[str, Any]:
        return self.get(f'/v1/users/{user_id}/dashboard')

    def get_stats(self, user_id: str, months: int = 6) -> Dict[str, Any]:
        return self.get(f'/v1/users/{user_id}/stats', params={'months': months})

    def get_referral_code(self, user_id: str) -> str:
        return self.get(f'/v1/users/{user_id}/referral-code')['referral_code']

    def close(self):
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
