from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import requests

from order_portal.errors import SharePointAuthError, StorageError
from order_portal.logging import get_logger
from order_portal.sharepoint.auth import SharePointAuthentication

ODATA_VERBOSE = "application/json;odata=verbose"


def list_endpoint(site_url: str, list_title: str) -> str:
    title = list_title.replace("'", "''")
    return f"{site_url.rstrip('/')}/_api/web/lists/getbytitle('{title}')"


class SharePointClient:
    """
    Thin REST client for one SharePoint list.
    - Reads are plain GETs; writes are POSTs carrying a form digest.
    - Updates use POST tunnelling with ``X-HTTP-Method: MERGE`` and ``IF-MATCH: *``
      (no optimistic concurrency: last write wins).
    - Every transport or payload failure surfaces as StorageError.
    """

    def __init__(
        self,
        site_url: str,
        list_title: str,
        session: Optional[requests.Session] = None,
        auth: Optional[SharePointAuthentication] = None,
        timeout: int = 30,
    ) -> None:
        self.site_url = site_url.rstrip("/")
        self.list_title = list_title
        self.session = session or requests.Session()
        self.auth = auth
        self.timeout = timeout
        self.logger = get_logger(__name__)
        self._digest: Optional[str] = None
        self._digest_expires_at: float = 0.0
        self._entity_type: Optional[str] = None

    @property
    def list_url(self) -> str:
        return list_endpoint(self.site_url, self.list_title)

    # ---------- transport ----------

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Accept": ODATA_VERBOSE, "Content-Type": ODATA_VERBOSE}
        if self.auth is not None:
            headers.update(self.auth.get_auth_headers())
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method: str, url: str, headers: Optional[Dict[str, str]] = None, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, headers=self._headers(headers), timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error(f"SharePoint {method} {url} failed: {e}")
            raise StorageError(f"SharePoint request failed: {e}") from e
        except SharePointAuthError as e:
            self.logger.error(f"SharePoint authentication failed for {method} {url}: {e}")
            raise StorageError(f"SharePoint authentication failed: {e}") from e
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"SharePoint returned a non-JSON body for {url}") from e

    # ---------- contract calls ----------

    def get_form_digest(self) -> str:
        """Security digest required on every write, cached until it times out."""
        if self._digest and time.time() < self._digest_expires_at:
            return self._digest
        payload = self._request("POST", f"{self.site_url}/_api/contextinfo")
        try:
            info = payload["d"]["GetContextWebInformation"]
            digest = info["FormDigestValue"]
        except (KeyError, TypeError) as e:
            raise StorageError("contextinfo response carries no FormDigestValue") from e
        timeout = int(info.get("FormDigestTimeoutSeconds", 1800))
        self._digest = digest
        # Renew a minute early.
        self._digest_expires_at = time.time() + max(timeout - 60, 0)
        self.logger.debug("Fetched new SharePoint form digest")
        return digest

    def get_list_item_entity_type(self) -> str:
        """Discover the ``__metadata.type`` that list item payloads must carry."""
        if self._entity_type is None:
            payload = self._request("GET", f"{self.list_url}?$select=ListItemEntityTypeFullName")
            try:
                self._entity_type = payload["d"]["ListItemEntityTypeFullName"]
            except (KeyError, TypeError) as e:
                raise StorageError("List metadata carries no ListItemEntityTypeFullName") from e
        return self._entity_type

    def get_items(self, select: List[str], top: int = 500) -> List[Dict[str, Any]]:
        """All list items, following ``__next`` links until the last page."""
        url: Optional[str] = f"{self.list_url}/items?$select={','.join(select)}&$top={top}"
        items: List[Dict[str, Any]] = []
        while url:
            payload = self._request("GET", url)
            data = payload.get("d", {})
            items.extend(data.get("results", []))
            url = data.get("__next")
        return items

    def create_item(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        body = {"__metadata": {"type": self.get_list_item_entity_type()}, **fields}
        payload = self._request(
            "POST",
            f"{self.list_url}/items",
            headers={"X-RequestDigest": self.get_form_digest()},
            json=body,
        )
        return payload.get("d", {})

    def merge_item(self, item_id: int, fields: Dict[str, Any]) -> None:
        body = {"__metadata": {"type": self.get_list_item_entity_type()}, **fields}
        self._request(
            "POST",
            f"{self.list_url}/items({item_id})",
            headers={
                "X-RequestDigest": self.get_form_digest(),
                "X-HTTP-Method": "MERGE",
                "IF-MATCH": "*",
            },
            json=body,
        )
