"""
Backend REST API client

Fetches the order and employee salary records documents are rendered from.
The backend owns auth; the caller's bearer token is forwarded as-is.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from revline.services.exceptions import RecordFetchError

logger = logging.getLogger(__name__)


class OrderClient:
    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, endpoint: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"Calling backend API: GET {url}")
        try:
            response = self.session.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Backend API request failed for {endpoint}: {e}")
            raise RecordFetchError("Could not reach the order service. Please try again later.") from e

        if not response.ok:
            try:
                message = response.json().get("message") or "Request failed"
            except (ValueError, AttributeError):
                message = "Request failed"
            logger.warning(f"Backend API returned {response.status_code} for {endpoint}: {message}")
            raise RecordFetchError(message, upstream_status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Backend API returned invalid JSON for {endpoint}")
            raise RecordFetchError("The order service returned an unreadable response.") from e

    def get_order(self, order_id) -> Dict[str, Any]:
        payload = self._get(f"/sec/orders/{order_id}")
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict):
            raise RecordFetchError(f"Order {order_id} was not returned as an object.")
        return payload

    def get_employees(self) -> List[Dict[str, Any]]:
        """All employees with salary details; paged responses keep them under 'content'."""
        payload = self._get("/api/employees")
        if isinstance(payload, dict):
            payload = payload.get("content") or []
        if not isinstance(payload, list):
            raise RecordFetchError("Employee list was not returned as a list.")
        return payload
