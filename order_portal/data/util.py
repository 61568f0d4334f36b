from __future__ import annotations

from typing import Literal, Optional

import requests

from .backends.cloud_backend import SimulatedCloudOrderStore
from .backends.local_backend import LocalOrderStore
from .backends.sharepoint_backend import SharePointOrderStore
from .interface import OrderStore
from .local_storage import LocalStorage
from ..config import get_config
from ..sharepoint.auth import get_sharepoint_auth
from ..sharepoint.client import SharePointClient
from ..sharepoint.mock import MockSharePointAdapter

MOCK_SHAREPOINT_URL = "https://mock.sharepoint.local/sites/orders"

StoreKind = Literal["local", "cloud", "sharepoint", "sharepoint_mock"]


def get_order_store(kind: Optional[StoreKind] = None, storage: Optional[LocalStorage] = None) -> OrderStore:
    """Build the configured persistence backend."""
    config = get_config()
    kind = kind or config.storage_backend
    if kind == "local":
        return LocalOrderStore(storage=storage)
    if kind == "cloud":
        return SimulatedCloudOrderStore(storage=storage)
    if kind == "sharepoint":
        if not config.sharepoint_site_url:
            raise ValueError("sharepoint_site_url must be set for the sharepoint backend")
        client = SharePointClient(
            site_url=config.sharepoint_site_url,
            list_title=config.sharepoint_list_title,
            auth=get_sharepoint_auth(),
            timeout=config.request_timeout_seconds,
        )
        return SharePointOrderStore(client, page_size=config.sharepoint_page_size)
    if kind == "sharepoint_mock":
        session = requests.Session()
        session.mount(MOCK_SHAREPOINT_URL, MockSharePointAdapter())
        client = SharePointClient(
            site_url=MOCK_SHAREPOINT_URL,
            list_title=config.sharepoint_list_title,
            session=session,
            timeout=config.request_timeout_seconds,
        )
        return SharePointOrderStore(client, page_size=config.sharepoint_page_size)
    raise ValueError(f"Unknown order store kind: {kind}")
