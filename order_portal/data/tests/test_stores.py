import pytest

from order_portal.config import set_config_for_test
from order_portal.data.backends.cloud_backend import SimulatedCloudOrderStore
from order_portal.data.backends.local_backend import LocalOrderStore
from order_portal.data.local_storage import LocalStorage
from order_portal.data.models import OrderItem, OrderStatus, SalesOrder
from order_portal.data.util import get_order_store
from order_portal.errors import OrderNotFoundError, StorageError


@pytest.fixture(autouse=True)
def test_config(tmp_path):
    set_config_for_test(storage_dir=str(tmp_path), cloud_latency_ms=0, storage_backend="local")


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path)


def make_order(order_id, customer="Golden Loaf", status=OrderStatus.PENDING_ASSISTANT):
    return SalesOrder(
        id=order_id,
        serial_number=f"SO-{order_id}",
        customer_name=customer,
        area_location="Dokki, Giza",
        items=[OrderItem(item_name="Fino Flour 25kg", quantity=10)],
        status=status,
    )


@pytest.fixture(params=["local", "cloud", "sharepoint_mock"])
def store(request, storage):
    return get_order_store(request.param, storage=storage)


def test_empty_store_lists_nothing(store):
    assert store.list_orders() == []


def test_save_orders_replaces_collection(store):
    store.save_orders([make_order("b"), make_order("a")])
    assert [o.id for o in store.list_orders()] == ["b", "a"]


def test_save_order_prepends_new_orders(store):
    store.save_order(make_order("a"), is_new=True)
    store.save_order(make_order("b"), is_new=True)
    assert [o.id for o in store.list_orders()] == ["b", "a"]


def test_save_order_replaces_existing(store):
    store.save_orders([make_order("a")])
    store.save_order(make_order("a", customer="Delta Food Stores"), is_new=False)
    orders = store.list_orders()
    assert len(orders) == 1
    assert orders[0].customer_name == "Delta Food Stores"


def test_update_order_merges_camel_case_fields(store):
    store.save_orders([make_order("a"), make_order("b")])
    store.update_order("a", {"status": "Pending Finance", "overallNotes": "checked"})
    by_id = {o.id: o for o in store.list_orders()}
    assert by_id["a"].status == OrderStatus.PENDING_FINANCE
    assert by_id["a"].overall_notes == "checked"
    assert by_id["a"].items[0].quantity == 10
    assert by_id["b"].status == OrderStatus.PENDING_ASSISTANT


def test_local_store_uses_orders_key(storage):
    LocalOrderStore(storage).save_orders([make_order("a")])
    assert storage.get_json("ifcg_shared_db_v3")[0]["serialNumber"] == "SO-a"


def test_local_update_of_unknown_order_raises(storage):
    store = LocalOrderStore(storage)
    store.save_orders([make_order("a")])
    with pytest.raises(OrderNotFoundError):
        store.update_order("zzz", {"status": "Canceled"})


def test_cloud_store_keeps_its_own_key(storage):
    cloud = SimulatedCloudOrderStore(storage, latency_ms=0)
    cloud.save_orders([make_order("a")])
    assert storage.get_json("ifcg_cloud_db_v1") is not None
    assert storage.get_json("ifcg_shared_db_v3") is None


def test_cloud_update_of_unknown_order_is_ignored(storage):
    cloud = SimulatedCloudOrderStore(storage, latency_ms=0)
    cloud.save_orders([make_order("a")])
    cloud.update_order_status("zzz", {"status": "Canceled"})
    assert [o.status for o in cloud.get_orders()] == [OrderStatus.PENDING_ASSISTANT]


def test_cloud_read_waits_for_latency(storage, monkeypatch):
    slept = []
    monkeypatch.setattr("order_portal.data.backends.cloud_backend.time.sleep", slept.append)
    SimulatedCloudOrderStore(storage, latency_ms=500).list_orders()
    assert slept == [0.5]


def test_corrupt_collection_raises_storage_error(storage):
    storage.set_json("ifcg_shared_db_v3", {"not": "a list"})
    with pytest.raises(StorageError):
        LocalOrderStore(storage).list_orders()
    storage.set_json("ifcg_cloud_db_v1", [{"items": "nope"}])
    with pytest.raises(StorageError):
        SimulatedCloudOrderStore(storage, latency_ms=0).list_orders()


def test_sharepoint_mock_only_merges_changed_items():
    store = get_order_store("sharepoint_mock")
    adapter = store.client.session.get_adapter("https://mock.sharepoint.local/sites/orders")
    store.save_orders([make_order("a"), make_order("b")])
    writes_before = [r for r in adapter.requests if r.method == "POST" and "/items" in r.url]
    assert len(writes_before) == 2

    store.list_orders()
    store.save_orders([make_order("a", status=OrderStatus.PENDING_FINANCE), make_order("b")])
    merges = [r for r in adapter.requests if r.headers.get("X-HTTP-Method") == "MERGE"]
    assert len(merges) == 1


def test_sharepoint_mock_save_order_unknown_raises():
    store = get_order_store("sharepoint_mock")
    with pytest.raises(OrderNotFoundError):
        store.save_order(make_order("ghost"), is_new=False)


def test_unknown_backend_kind():
    with pytest.raises(ValueError):
        get_order_store("ftp")


def test_sharepoint_requires_site_url():
    set_config_for_test(sharepoint_site_url=None)
    with pytest.raises(ValueError):
        get_order_store("sharepoint")
