"""In-memory emulation of the SharePoint list REST contract.

Mount it on a ``requests.Session`` to run ``SharePointClient`` without a tenant::

    session = requests.Session()
    session.mount("https://mock.sharepoint.local", MockSharePointAdapter())

Supported calls: contextinfo (form digest), list metadata (entity type), item
listing with ``$top`` paging via ``__next``, item creation and MERGE updates.
Writes without a valid digest are refused with 403, as SharePoint does.
"""
from __future__ import annotations

import json
import re
import secrets
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlencode, urlsplit

from requests import PreparedRequest, Response
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from order_portal.logging import get_logger

LIST_PATH = re.compile(r"/_api/web/lists/getbytitle\('(?P<title>(?:[^']|'')*)'\)(?P<rest>.*)$")
ITEM_PATH = re.compile(r"^/items\((?P<id>\d+)\)$")


def entity_type_for(list_title: str) -> str:
    return f"SP.Data.{list_title.replace(' ', '_x0020_')}ListItem"


class MockSharePointAdapter(BaseAdapter):
    """requests transport adapter that answers like a SharePoint site."""

    def __init__(self, digest_timeout_seconds: int = 1800) -> None:
        super().__init__()
        self.digest_timeout_seconds = digest_timeout_seconds
        self.lists: Dict[str, List[Dict[str, Any]]] = {}
        self.digests: set[str] = set()
        self.requests: List[PreparedRequest] = []
        self._next_id: Dict[str, int] = {}
        self.logger = get_logger(__name__)

    # ---------- adapter API ----------

    def send(self, request: PreparedRequest, stream=False, timeout=None, verify=True, cert=None, proxies=None) -> Response:
        self.requests.append(request)
        parts = urlsplit(request.url)
        path = unquote(parts.path)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        status, body = self._route(request, parts, path, query)
        self.logger.debug(f"mock SharePoint {request.method} {path} -> {status}")
        return self._build_response(request, status, body)

    def close(self) -> None:
        pass

    # ---------- routing ----------

    def _route(self, request: PreparedRequest, parts, path: str, query: Dict[str, str]) -> Tuple[int, Optional[dict]]:
        method = request.method.upper()
        if path.endswith("/_api/contextinfo") and method == "POST":
            return 200, self._contextinfo()

        match = LIST_PATH.search(path)
        if not match:
            return 404, self._error("Resource not found")
        title = match.group("title").replace("''", "'")
        rest = match.group("rest")
        items = self.lists.setdefault(title, [])

        if rest == "" and method == "GET":
            return 200, {"d": {"Title": title, "ListItemEntityTypeFullName": entity_type_for(title)}}

        if rest == "/items" and method == "GET":
            return 200, self._page(items, parts, query)

        if method == "POST" and request.headers.get("X-RequestDigest") not in self.digests:
            return 403, self._error("The security validation for this page is invalid.")

        if rest == "/items" and method == "POST":
            return self._create(title, items, self._json_body(request))

        item_match = ITEM_PATH.match(rest)
        if item_match and method == "POST" and request.headers.get("X-HTTP-Method", "").upper() == "MERGE":
            if request.headers.get("IF-MATCH") is None:
                return 400, self._error("IF-MATCH header is required for MERGE")
            return self._merge(title, items, int(item_match.group("id")), self._json_body(request))

        return 400, self._error(f"Unsupported call {method} {rest or '/'}")

    def _contextinfo(self) -> dict:
        digest = f"0x{secrets.token_hex(16).upper()},mock"
        self.digests.add(digest)
        return {
            "d": {
                "GetContextWebInformation": {
                    "FormDigestValue": digest,
                    "FormDigestTimeoutSeconds": self.digest_timeout_seconds,
                }
            }
        }

    def _page(self, items: List[Dict[str, Any]], parts, query: Dict[str, str]) -> dict:
        top = int(query.get("$top", 100))
        start = int(query.get("$skiptoken", 0))
        select = [f for f in query.get("$select", "").split(",") if f]
        page = items[start:start + top]
        if select:
            page = [{k: v for k, v in item.items() if k in select} for item in page]
        data: Dict[str, Any] = {"results": page}
        if start + top < len(items):
            next_query = {**query, "$skiptoken": str(start + top)}
            data["__next"] = f"{parts.scheme}://{parts.netloc}{parts.path}?{urlencode(next_query, safe='$,')}"
        return {"d": data}

    def _create(self, title: str, items: List[Dict[str, Any]], body: Optional[dict]) -> Tuple[int, dict]:
        if body is None:
            return 400, self._error("Invalid JSON body")
        metadata = body.pop("__metadata", {})
        if metadata.get("type") != entity_type_for(title):
            return 400, self._error("A type named '%s' could not be resolved by the model." % metadata.get("type"))
        item_id = self._next_id.get(title, 0) + 1
        self._next_id[title] = item_id
        item = {"Id": item_id, "ID": item_id, **body}
        items.append(item)
        return 201, {"d": {"__metadata": {"type": entity_type_for(title)}, **item}}

    def _merge(self, title: str, items: List[Dict[str, Any]], item_id: int, body: Optional[dict]) -> Tuple[int, Optional[dict]]:
        if body is None:
            return 400, self._error("Invalid JSON body")
        body.pop("__metadata", None)
        for item in items:
            if item["Id"] == item_id:
                item.update(body)
                return 204, None
        return 404, self._error("Item does not exist. It may have been deleted by another user.")

    # ---------- helpers ----------

    @staticmethod
    def _json_body(request: PreparedRequest) -> Optional[dict]:
        raw = request.body
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            body = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return body if isinstance(body, dict) else None

    @staticmethod
    def _error(message: str) -> dict:
        return {"error": {"code": "-1, Microsoft.SharePoint.Client.InvalidClientQueryException", "message": {"lang": "en-US", "value": message}}}

    @staticmethod
    def _build_response(request: PreparedRequest, status: int, body: Optional[dict]) -> Response:
        response = Response()
        response.status_code = status
        response.request = request
        response.url = request.url
        response.encoding = "utf-8"
        response.headers = CaseInsensitiveDict({"Content-Type": "application/json;odata=verbose;charset=utf-8"})
        response._content = json.dumps(body).encode("utf-8") if body is not None else b""
        response.reason = {200: "OK", 201: "Created", 204: "No Content", 400: "Bad Request", 403: "Forbidden", 404: "Not Found"}.get(status, "")
        return response
