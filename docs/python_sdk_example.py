"""
SuiWallet API Python client example.

Uses the requests library. Mirrors the FastAPI routes in backend_suiwallet.api_server.
Run: pip install requests

Usage:
    from docs.python_sdk_example import SuiWalletClient
    client = SuiWalletClient("http://localhost:8000")
    page = client.get_history("0x7d20dcdb2bca4f508ea9613994683eb4e76e9c4ed371169677c1be02aaf0b58e")
"""

from __future__ import annotations

from typing import Any, Iterator

import requests


class SuiWalletClientError(Exception):
    """Raised when the API returns an error response."""

    def __init__(self, message: str, status_code: int | None = None, response: requests.Response | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class SuiWalletClient:
    """Client for the SuiWallet history API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        resp = self._session.request(method, url, params=params, json=json, timeout=self.timeout)
        if not resp.ok:
            detail = resp.json().get("detail", resp.text) if resp.headers.get("content-type", "").startswith("application/json") else resp.text
            raise SuiWalletClientError(
                f"API error: {detail}",
                status_code=resp.status_code,
                response=resp,
            )
        return resp

    def health(self) -> dict[str, str]:
        """Liveness probe."""
        return self._request("GET", "/health").json()

    def get_history(self, address: str, page: int = 1, page_size: int = 10) -> dict[str, Any]:
        """One page of history: {entries, hasNextPage, nextPageToken}."""
        r = self._request("GET", f"/history/{address}", params={"page": page, "page_size": page_size})
        return r.json()

    def iter_history(self, address: str, page_size: int = 10, max_pages: int = 20) -> Iterator[dict[str, Any]]:
        """Yield entries page by page until hasNextPage is false or max_pages is reached."""
        page = 1
        while page <= max_pages:
            result = self.get_history(address, page=page, page_size=page_size)
            yield from result.get("entries", [])
            if not result.get("hasNextPage"):
                return
            page += 1

    def get_balance(self, address: str, coin_type: str | None = None, save: bool = False) -> dict[str, Any]:
        params: dict[str, Any] = {"save": str(save).lower()}
        if coin_type:
            params["coin_type"] = coin_type
        return self._request("GET", f"/balance/{address}", params=params).json()

    def get_transaction(self, digest: str, include_raw: bool = False) -> dict[str, Any]:
        params = {"include_raw": "true"} if include_raw else None
        return self._request("GET", f"/transaction/{digest}", params=params).json()

    def list_searched_addresses(self) -> list[dict[str, Any]]:
        return self._request("GET", "/searched-addresses").json()

    def save_searched_address(self, address: str, balance: str, source_info: dict[str, Any] | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"address": address, "balance": balance}
        if source_info is not None:
            body["sourceInfo"] = source_info
        return self._request("POST", "/searched-addresses", json=body).json()

    def delete_searched_address(self, address: str) -> dict[str, Any]:
        return self._request("DELETE", f"/searched-addresses/{address}").json()


# -----------------------------------------------------------------------------
# Example usage
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    client = SuiWalletClient("http://localhost:8000")
    address = "0x7d20dcdb2bca4f508ea9613994683eb4e76e9c4ed371169677c1be02aaf0b58e"

    print("Health:", client.health())

    balance = client.get_balance(address, save=True)
    print("Balance:", balance.get("formattedBalance"))

    page = client.get_history(address, page=1, page_size=5)
    for entry in page["entries"]:
        print(entry["formattedDatetime"], entry["direction"], entry["amount"], entry["assetSymbol"], entry["to"])
    print("More:", page["hasNextPage"])

    try:
        client.get_transaction("not-a-digest")
    except SuiWalletClientError as e:
        print("Lookup failed:", e.status_code)
