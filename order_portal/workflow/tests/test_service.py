from datetime import datetime

import pytest

from order_portal.auth.users import DEFAULT_USERS
from order_portal.config import set_config_for_test
from order_portal.data.backends.local_backend import LocalOrderStore
from order_portal.data.local_storage import LocalStorage
from order_portal.data.models import OrderItem, OrderStatus, Role, SalesOrder
from order_portal.data.sync import OrderSync
from order_portal.errors import (
    ActionNotAllowedError,
    InvalidTransitionError,
    OrderNotFoundError,
    OrderValidationError,
)
from order_portal.workflow.service import OrderWorkflow, blank_draft, validate_draft

BY_NAME = {u.name: u for u in DEFAULT_USERS}
SALES = BY_NAME["Omar Khaled"]
ASSISTANT = BY_NAME["Mona Said"]
FINANCE = BY_NAME["Tarek Fawzy"]
WAREHOUSE = BY_NAME["Sherif Lotfy"]
SUPERVISOR = BY_NAME["Hany Mostafa"]
DRIVER = BY_NAME["Mahmoud Adel"]
OTHER_DRIVER = BY_NAME["Hassan Fathy"]


@pytest.fixture(autouse=True)
def test_config(tmp_path):
    set_config_for_test(storage_dir=str(tmp_path))


@pytest.fixture
def store(tmp_path):
    return LocalOrderStore(LocalStorage(tmp_path))


@pytest.fixture
def workflow(store):
    sync = OrderSync(store)
    sync.refresh()
    return OrderWorkflow(sync, clock=lambda: datetime(2024, 5, 1, 8, 0, 0))


def make_draft(**fields):
    data = dict(
        customer_name="Al Nour Bakery",
        area_location="Nasr City, Cairo",
        items=[OrderItem(item_name="Bran 40kg", quantity=10), OrderItem(item_name="Fino Flour 25kg", quantity=6)],
    )
    data.update(fields)
    return SalesOrder(**data)


def ready_order(workflow):
    order = workflow.submit_order(make_draft(), SALES)
    workflow.approve_quantities(order.id, ASSISTANT)
    workflow.approve(order.id, FINANCE)
    return workflow.mark_ready(order.id, WAREHOUSE)


# ---------- drafts ----------

@pytest.mark.parametrize("fields", [
    {"customer_name": " "},
    {"area_location": ""},
    {"items": []},
    {"items": [OrderItem(item_name="", quantity=1)]},
    {"items": [OrderItem(item_name="Bran 40kg", quantity=0)]},
])
def test_invalid_drafts(fields):
    with pytest.raises(OrderValidationError):
        validate_draft(make_draft(**fields))


def test_blank_draft():
    draft = blank_draft()
    assert draft.id is None and draft.items == [] and draft.status is None


# ---------- sales ----------

def test_submit_creates_pending_order(workflow, store):
    order = workflow.submit_order(make_draft(), SALES)
    assert order.status == OrderStatus.PENDING_ASSISTANT
    assert order.id and order.serial_number.startswith("SO-")
    assert order.created_by == SALES.email
    assert order.creator_name == SALES.name
    assert [h.action for h in order.history] == ["Order Created"]
    assert store.list_orders()[0].id == order.id


def test_new_orders_are_listed_first(workflow, store):
    first = workflow.submit_order(make_draft(), SALES)
    second = workflow.submit_order(make_draft(customer_name="Golden Loaf"), SALES)
    assert [o.id for o in store.list_orders()] == [second.id, first.id]


def test_submit_rejects_invalid_draft(workflow, store):
    with pytest.raises(OrderValidationError):
        workflow.submit_order(make_draft(items=[]), SALES)
    assert store.list_orders() == []


def test_edit_keeps_status_and_identity(workflow):
    order = workflow.submit_order(make_draft(), SALES)
    workflow.approve_quantities(order.id, ASSISTANT)
    edited = workflow.submit_order(make_draft(customer_name="Al Nour Bakery 2"), ASSISTANT, editing_id=order.id)
    assert edited.id == order.id
    assert edited.serial_number == order.serial_number
    assert edited.status == OrderStatus.PENDING_FINANCE
    assert edited.customer_name == "Al Nour Bakery 2"
    assert edited.created_by == SALES.email
    assert edited.history[-1].action == "Order Modified"


def test_edit_unknown_order(workflow):
    with pytest.raises(OrderNotFoundError):
        workflow.submit_order(make_draft(), SALES, editing_id="missing")


def test_cancel(workflow):
    order = workflow.submit_order(make_draft(), SALES)
    canceled = workflow.cancel(order.id, SALES)
    assert canceled.status == OrderStatus.CANCELED
    with pytest.raises(InvalidTransitionError):
        workflow.cancel(order.id, SALES)


# ---------- reviewers ----------

def test_review_chain(workflow):
    order = workflow.submit_order(make_draft(), SALES)
    assert workflow.approve_quantities(order.id, ASSISTANT).status == OrderStatus.PENDING_FINANCE
    assert workflow.approve(order.id, FINANCE).status == OrderStatus.APPROVED
    assert workflow.put_on_hold(order.id, WAREHOUSE, "no stock").status == OrderStatus.ON_HOLD
    done = workflow.mark_ready(order.id, WAREHOUSE)
    assert done.status == OrderStatus.READY_FOR_DRIVER
    assert [h.action for h in done.history] == [
        "Order Created", "Qty Approved", "Finance Approved", "no stock", "Order Packed",
    ]


def test_rejections(workflow):
    first = workflow.submit_order(make_draft(), SALES)
    assert workflow.reject(first.id, ASSISTANT).status == OrderStatus.REJECTED
    second = workflow.submit_order(make_draft(), SALES)
    workflow.approve_quantities(second.id, ASSISTANT)
    assert workflow.refuse_credit(second.id, FINANCE, "over limit").status == OrderStatus.REJECTED


def test_reviewer_cannot_skip_queue(workflow):
    order = workflow.submit_order(make_draft(), SALES)
    with pytest.raises(InvalidTransitionError):
        workflow.approve(order.id, FINANCE)
    with pytest.raises(ActionNotAllowedError):
        workflow.approve_quantities(order.id, FINANCE)


def test_unknown_order(workflow):
    with pytest.raises(OrderNotFoundError):
        workflow.approve("nope", FINANCE)


# ---------- fleet ----------

def test_partial_then_full_dispatch(workflow):
    order = ready_order(workflow)
    partial = workflow.dispatch(order.id, SUPERVISOR, DRIVER.name, {"Bran 40kg": 4, "Fino Flour 25kg": 0}, warehouse="Giza Depot")
    assert partial.status == OrderStatus.PARTIALLY_SHIPPED
    shipment = partial.shipments[0]
    assert shipment.driver_name == DRIVER.name
    assert shipment.truck == "ن ق ر 4821"
    assert shipment.warehouse == "Giza Depot"
    assert [(i.item_name, i.quantity) for i in shipment.items] == [("Bran 40kg", 4)]
    assert partial.remaining_quantities() == {"Bran 40kg": 6, "Fino Flour 25kg": 6}

    full = workflow.dispatch(order.id, SUPERVISOR, OTHER_DRIVER.name, {"Bran 40kg": 6, "Fino Flour 25kg": 6})
    assert full.status == OrderStatus.IN_TRANSIT
    assert full.history[-1].action == "Shipment Dispatched"


@pytest.mark.parametrize("driver, quantities", [
    ("", {"Bran 40kg": 1}),
    ("Mahmoud Adel", {}),
    ("Mahmoud Adel", {"Bran 40kg": 0}),
    ("Mahmoud Adel", {"Bran 40kg": 11}),
    ("Mahmoud Adel", {"Cake Flour 10kg": 1}),
])
def test_invalid_dispatch(workflow, driver, quantities):
    order = ready_order(workflow)
    with pytest.raises(OrderValidationError):
        workflow.dispatch(order.id, SUPERVISOR, driver, quantities)


def test_dispatch_requires_ready_order(workflow):
    order = workflow.submit_order(make_draft(), SALES)
    with pytest.raises(InvalidTransitionError):
        workflow.dispatch(order.id, SUPERVISOR, DRIVER.name, {"Bran 40kg": 1})


def test_delivery_completes_order(workflow):
    order = ready_order(workflow)
    workflow.dispatch(order.id, SUPERVISOR, DRIVER.name, {"Bran 40kg": 10})
    workflow.dispatch(order.id, SUPERVISOR, OTHER_DRIVER.name, {"Fino Flour 25kg": 6})

    first = workflow.confirm_delivery(order.id, DRIVER)
    assert first.status == OrderStatus.IN_TRANSIT
    assert [s.delivered for s in first.shipments] == [True, False]

    with pytest.raises(ActionNotAllowedError):
        workflow.confirm_delivery(order.id, DRIVER)

    done = workflow.confirm_delivery(order.id, OTHER_DRIVER)
    assert done.status == OrderStatus.COMPLETED


def test_delivery_of_partial_shipment_stays_partial(workflow):
    order = ready_order(workflow)
    workflow.dispatch(order.id, SUPERVISOR, DRIVER.name, {"Bran 40kg": 10})
    assert workflow.confirm_delivery(order.id, DRIVER).status == OrderStatus.PARTIALLY_SHIPPED


def test_emergency_round_trip(workflow):
    order = ready_order(workflow)
    workflow.dispatch(order.id, SUPERVISOR, DRIVER.name, {"Bran 40kg": 10, "Fino Flour 25kg": 6})

    with pytest.raises(ActionNotAllowedError):
        workflow.report_emergency(order.id, OTHER_DRIVER, "flat tire")
    with pytest.raises(OrderValidationError):
        workflow.report_emergency(order.id, DRIVER, "   ")

    reported = workflow.report_emergency(order.id, DRIVER, "flat tire")
    assert reported.status == OrderStatus.EMERGENCY
    assert reported.emergency.reason == "flat tire"
    assert reported.emergency.reported_by == DRIVER.name
    assert reported.history[-1].action == "flat tire"

    resolved = workflow.resolve_emergency(order.id, SUPERVISOR)
    assert resolved.status == OrderStatus.IN_TRANSIT
    assert resolved.emergency is None
    assert resolved.history[-1].action == "Emergency Resolved"


def test_changes_are_persisted(workflow, store):
    order = ready_order(workflow)
    stored = store.list_orders()[0]
    assert stored.id == order.id
    assert stored.status == OrderStatus.READY_FOR_DRIVER
    assert len(stored.history) == 4
