import pytest
import requests

from order_portal.config import set_config_for_test
from order_portal.data.backends.sharepoint_backend import SharePointOrderStore
from order_portal.data.models import SalesOrder
from order_portal.data.sync import OrderSync
from order_portal.data.util import MOCK_SHAREPOINT_URL
from order_portal.errors import StorageError
from order_portal.sharepoint.auth import SharePointAuthentication
from order_portal.sharepoint.client import SharePointClient
from order_portal.sharepoint.mock import MockSharePointAdapter


@pytest.fixture(autouse=True)
def test_config():
    set_config_for_test(sync_interval_seconds=15)


class FlakyStore:
    """In-memory store whose reads and writes can be made to fail."""

    def __init__(self, orders=None):
        self.orders = list(orders or [])
        self.fail_reads = False
        self.fail_writes = False
        self.saved = []

    def list_orders(self):
        if self.fail_reads:
            raise StorageError("server unreachable")
        return list(self.orders)

    def save_orders(self, orders):
        if self.fail_writes:
            raise StorageError("server unreachable")
        self.saved.append(list(orders))
        self.orders = list(orders)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_first_refresh_loads_orders():
    store = FlakyStore([SalesOrder(id="a")])
    sync = OrderSync(store, clock=FakeClock())
    assert not sync.loaded
    assert [o.id for o in sync.refresh()] == ["a"]
    assert sync.loaded
    assert sync.last_error is None


def test_failed_refresh_keeps_last_good_copy():
    store = FlakyStore([SalesOrder(id="a")])
    sync = OrderSync(store, clock=FakeClock())
    sync.refresh()
    store.fail_reads = True
    assert [o.id for o in sync.refresh()] == ["a"]
    assert sync.last_error == "server unreachable"

    store.fail_reads = False
    sync.refresh()
    assert sync.last_error is None


def test_heartbeat_waits_for_interval():
    clock = FakeClock()
    store = FlakyStore([SalesOrder(id="a")])
    sync = OrderSync(store, clock=clock)
    sync.refresh_if_due()

    store.orders.append(SalesOrder(id="b"))
    clock.now += 14
    assert [o.id for o in sync.refresh_if_due()] == ["a"]
    clock.now += 1
    assert [o.id for o in sync.refresh_if_due()] == ["a", "b"]


def test_interval_comes_from_config():
    set_config_for_test(sync_interval_seconds=60)
    assert OrderSync(FlakyStore()).interval_seconds == 60
    assert OrderSync(FlakyStore(), interval_seconds=5).interval_seconds == 5


def test_push_writes_full_collection():
    store = FlakyStore()
    sync = OrderSync(store, clock=FakeClock())
    sync.push([SalesOrder(id="b"), SalesOrder(id="a")])
    assert [o.id for o in store.saved[-1]] == ["b", "a"]
    assert [o.id for o in sync.orders] == ["b", "a"]


def test_push_failure_propagates():
    store = FlakyStore()
    store.fail_writes = True
    sync = OrderSync(store, clock=FakeClock())
    with pytest.raises(StorageError):
        sync.push([SalesOrder(id="a")])
    assert [o.id for o in sync.orders] == ["a"]


# ---------- fallback over the SharePoint store ----------

class TokenSession:
    """Stands in for the ACS token endpoint; can be switched off."""

    def __init__(self):
        self.down = False

    def post(self, url, data=None, timeout=None):
        if self.down:
            raise requests.exceptions.ConnectionError("ACS unreachable")
        return TokenResponse()


class TokenResponse:
    def raise_for_status(self):
        pass

    def json(self):
        # Expires immediately, so every request asks for a new token.
        return {"access_token": "acs-token", "expires_in": 0}


def sharepoint_sync(auth=None):
    adapter = MockSharePointAdapter()
    session = requests.Session()
    session.mount(MOCK_SHAREPOINT_URL, adapter)
    client = SharePointClient(MOCK_SHAREPOINT_URL, "SalesOrders", session=session, auth=auth)
    return OrderSync(SharePointOrderStore(client), clock=FakeClock()), adapter


def test_token_failure_falls_back_to_cached_orders():
    set_config_for_test(
        sharepoint_site_url=MOCK_SHAREPOINT_URL,
        sharepoint_client_id="client-id",
        sharepoint_client_secret="client-secret",
        sharepoint_realm="realm-1",
    )
    token_session = TokenSession()
    sync, _ = sharepoint_sync(auth=SharePointAuthentication(session=token_session))
    sync.push([SalesOrder(id="a", serial_number="SO-000001")])
    sync.refresh()

    token_session.down = True
    assert [o.id for o in sync.refresh()] == ["a"]
    assert "ACS unreachable" in sync.last_error


def test_unreadable_item_does_not_duplicate_on_next_push():
    sync, adapter = sharepoint_sync()
    sync.push([SalesOrder(id=i, serial_number=f"SO-00000{n}") for n, i in enumerate("abc")])
    sync.refresh()

    items = adapter.lists["SalesOrders"]
    next(item for item in items if item["Id"] == 2)["OrderJson"] = "not json"
    assert [o.id for o in sync.refresh()] == ["a", "b", "c"]
    assert sync.last_error is not None

    sync.push(sync.orders)
    assert len(items) == 3
    creates = [r for r in adapter.requests if r.method == "POST" and r.url.endswith("/items")]
    assert len(creates) == 3
