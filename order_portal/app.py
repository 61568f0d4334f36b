from datetime import date

import pandas as pd
import streamlit as st

# Configuration
from order_portal.config import get_config
from order_portal.logging import get_logger

# Persistence, workflow and parsing layers
from order_portal.ai.parser import OrderTextParser, apply_parsed
from order_portal.auth.session import SessionStore
from order_portal.auth.users import UserDirectory
from order_portal.data.catalog import CUSTOMER_LIST, PRODUCT_CATALOG, WAREHOUSES, client_fields
from order_portal.data.export import orders_to_csv
from order_portal.data.local_storage import LocalStorage
from order_portal.data.models import DeliveryShift, DeliveryType, OrderItem, Role, SalesOrder, new_id
from order_portal.data.sync import OrderSync
from order_portal.data.util import get_order_store
from order_portal.errors import OrderPortalError, OrderValidationError, StorageError
from order_portal.i18n import role_label, shift_label, status_label, translator
from order_portal.workflow.service import OrderWorkflow, blank_draft
from order_portal.workflow.transitions import Action, allowed_actions
from order_portal.workflow.views import notification_count, pending_counts, visible_orders

config = get_config()
logger = get_logger(__name__)

st.set_page_config(page_title=config.app_title, page_icon="🌾", layout="centered")

# -----------------------------------------------------------------------------
# Shared resources (one per server process; every browser session polls them)
# -----------------------------------------------------------------------------
@st.cache_resource
def get_storage() -> LocalStorage:
    return LocalStorage()

@st.cache_resource
def get_sync() -> OrderSync:
    store = get_order_store(storage=get_storage())
    logger.info(f"Using '{config.storage_backend}' order store")
    return OrderSync(store)

@st.cache_resource
def get_parser() -> OrderTextParser:
    return OrderTextParser()

@st.cache_resource
def get_users() -> UserDirectory:
    return UserDirectory()

sync = get_sync()
workflow = OrderWorkflow(sync)
sessions = SessionStore(get_storage())
users = get_users()

# -----------------------------------------------------------------------------
# Per-browser state
# -----------------------------------------------------------------------------
state = st.session_state
if "user" not in state:
    state.user = sessions.load_user()
if "lang" not in state:
    state.lang = sessions.load_language()
state.setdefault("tab", "pending")
state.setdefault("editing_id", None)
state.setdefault("draft", blank_draft())
state.setdefault("form_version", 0)
state.setdefault("flash", None)
state.setdefault("login_role", None)

t = translator(state.lang)

if state.lang == "ar":
    st.markdown("<style>.main .block-container { direction: rtl; text-align: right; }</style>", unsafe_allow_html=True)

# Heartbeat: poll the store once the sync interval has elapsed.
if not sync.loaded:
    with st.spinner("Synchronizing data..."):
        sync.refresh()
else:
    sync.refresh_if_due()


def reset_form(draft: SalesOrder = None, editing_id: str = None) -> None:
    state.draft = draft or blank_draft()
    state.editing_id = editing_id
    state.form_version += 1


def rows_to_items(rows) -> list:
    """Line items from the data editor; blank product rows are dropped."""
    items = []
    for row in rows:
        name = row.get("item_name")
        if name is None or pd.isna(name) or not str(name).strip():
            continue
        qty = row.get("quantity")
        row_id = row.get("id")
        items.append(OrderItem(
            id=row_id if isinstance(row_id, str) and row_id else new_id(),
            item_name=str(name).strip(),
            quantity=0 if qty is None or pd.isna(qty) else int(qty),
        ))
    return items


def run_action(fn, *args, **kwargs) -> None:
    """Call a workflow handler and turn portal errors into UI messages."""
    try:
        fn(*args, **kwargs)
    except StorageError as e:
        logger.error(f"Push failed: {e}")
        st.error(t["syncError"])
        return
    except OrderPortalError as e:
        st.error(str(e))
        return
    st.rerun()


# -----------------------------------------------------------------------------
# Login
# -----------------------------------------------------------------------------
if state.user is None:
    st.title(f"🌾 {config.app_title}")
    st.subheader(t["loginTitle"])
    st.caption(t["loginSubtitle"])
    for role in Role:
        if st.button(role_label(role, state.lang), key=f"role_{role.value}", use_container_width=True):
            state.login_role = role
    if state.login_role is not None:
        with st.form("pin_form"):
            st.markdown(f"**{t['enterPin']}** · {role_label(state.login_role, state.lang)}")
            pin = st.text_input("PIN", type="password", max_chars=4, label_visibility="collapsed")
            if st.form_submit_button(t["login"], use_container_width=True):
                try:
                    state.user = users.login(state.login_role, pin)
                except OrderPortalError:
                    st.error(t["invalidCode"])
                else:
                    sessions.save_user(state.user)
                    state.login_role = None
                    state.tab = "pending"
                    st.rerun()
    st.stop()

user = state.user

# -----------------------------------------------------------------------------
# Header
# -----------------------------------------------------------------------------
left, lang_col, out_col = st.columns([6, 2, 2])
left.markdown(f"### 🌾 IFCG CLOUD\n{role_label(user.role, state.lang)} · {user.name}")
if lang_col.button(t["language"], use_container_width=True):
    state.lang = "en" if state.lang == "ar" else "ar"
    sessions.save_language(state.lang)
    st.rerun()
if out_col.button(t["logout"], use_container_width=True):
    sessions.save_user(None)
    state.user = None
    reset_form()
    st.rerun()

if sync.last_error:
    st.warning(t["syncError"])
if st.button(f"🔄 {t['refresh']}"):
    sync.refresh()
    st.rerun()

count = notification_count(sync.orders, user.role)
if count:
    st.info(f"🔔 {t['notificationMsg']} ({count})")

# -----------------------------------------------------------------------------
# Tabs
# -----------------------------------------------------------------------------
if user.role == Role.SALES:
    tab_labels = {"pending": t["newOrder"], "history": t["myHistory"]}
elif user.role == Role.TRUCK_DRIVER:
    tab_labels = {"pending": t["shipments"]}
else:
    queue_size = pending_counts(sync.orders).get(user.role, 0)
    tab_labels = {"pending": f"{t['tab_reviewPending']} ({queue_size})", "history": t["tab_fullHistory"]}
state.tab = st.radio(
    "tab", list(tab_labels), format_func=tab_labels.get, horizontal=True,
    index=list(tab_labels).index(state.tab) if state.tab in tab_labels else 0,
    label_visibility="collapsed",
)

if state.flash:
    st.success(state.flash)
    state.flash = None

# -----------------------------------------------------------------------------
# Order form (new order for sales, or any role adjusting an existing order)
# -----------------------------------------------------------------------------
show_form = (user.role == Role.SALES and state.tab == "pending") or state.editing_id is not None
if show_form:
    v = state.form_version
    draft: SalesOrder = state.draft
    st.markdown(f"## {t['editingOrder'] if state.editing_id else t['newOrder']}")

    parser = get_parser()
    with st.expander(f"✨ {t['magicAi']}"):
        text = st.text_area(t["magicHint"], key=f"magic_{v}")
        if st.button(t["parse"], disabled=not parser.enabled, key=f"parse_{v}"):
            try:
                reset_form(apply_parsed(draft, parser.parse(text)), state.editing_id)
                st.rerun()
            except OrderPortalError as e:
                st.error(str(e))
        if not parser.enabled:
            st.caption(t["aiDisabled"])

    names = [c.name for c in CUSTOMER_LIST]

    state.setdefault(f"customer_{v}", draft.customer_name)
    state.setdefault(f"location_{v}", draft.area_location)

    def pick_client() -> None:
        # Writes only the two text inputs, leaving item rows and other fields as typed.
        chosen = state[f"client_pick_{v}"]
        if chosen:
            state[f"customer_{v}"], state[f"location_{v}"] = client_fields(chosen, state[f"location_{v}"])

    st.selectbox(t["selectClient"], [""] + names, key=f"client_pick_{v}", on_change=pick_client)
    c1, c2 = st.columns(2)
    customer_name = c1.text_input(t["clientName"], key=f"customer_{v}")
    area_location = c2.text_input(t["location"], key=f"location_{v}")
    receiving = c1.date_input(
        t["receivingDate"],
        value=date.fromisoformat(draft.receiving_date) if draft.receiving_date else None,
        key=f"receiving_{v}",
    )
    shifts = list(DeliveryShift)
    shift = c2.selectbox(
        t["deliveryShift"], shifts, index=shifts.index(draft.delivery_shift),
        format_func=lambda s: shift_label(s, state.lang), key=f"shift_{v}",
    )
    types = list(DeliveryType)
    delivery_type = c1.selectbox(t["deliveryType"], types, index=types.index(draft.delivery_type), format_func=lambda d: d.value, key=f"dtype_{v}")

    st.markdown(f"#### {t['orderItems']}")
    items_df = pd.DataFrame(
        [{"id": i.id, "item_name": i.item_name, "quantity": i.quantity} for i in draft.items],
        columns=["id", "item_name", "quantity"],
    )
    edited = st.data_editor(
        items_df,
        num_rows="dynamic",
        use_container_width=True,
        hide_index=True,
        key=f"items_{v}",
        column_config={
            "id": None,
            "item_name": st.column_config.SelectboxColumn(t["searchProduct"], options=sorted(set(PRODUCT_CATALOG) | {i.item_name for i in draft.items if i.item_name})),
            "quantity": st.column_config.NumberColumn(t["quantity"], min_value=0, step=1, default=1),
        },
    )
    notes = st.text_area(t["overallNotes"], value=draft.overall_notes, placeholder=t["overallNotesPlaceholder"], key=f"notes_{v}")

    submit_col, cancel_col = st.columns([3, 1])
    if submit_col.button(t["updateOrder"] if state.editing_id else t["submitOrder"], type="primary", use_container_width=True):
        items = rows_to_items(edited.to_dict("records"))
        submitted = draft.model_copy(update={
            "customer_name": customer_name,
            "area_location": area_location,
            "receiving_date": receiving.isoformat() if receiving else "",
            "delivery_shift": shift,
            "delivery_type": delivery_type,
            "items": items,
            "overall_notes": notes,
        })
        try:
            with st.spinner(""):
                workflow.submit_order(submitted, user, editing_id=state.editing_id)
        except StorageError:
            st.error(t["syncError"])
        except OrderValidationError:
            st.error(t["validationItemDetails"])
        except OrderPortalError as e:
            st.error(str(e))
        else:
            state.flash = f"✅ {t['successTitle']}: {t['successMsg']}"
            state.tab = "history"
            reset_form()
            st.rerun()
    if state.editing_id and cancel_col.button(t["cancel"], use_container_width=True):
        reset_form()
        st.rerun()

# -----------------------------------------------------------------------------
# Order list / history
# -----------------------------------------------------------------------------
if not show_form:
    search = st.text_input("search", placeholder=t["searchPlaceholder"], label_visibility="collapsed")
    filtered = visible_orders(sync.orders, user, tab=state.tab, search=search)

    if filtered:
        st.download_button(f"⬇️ {t['exportCsv']}", orders_to_csv(filtered), file_name="orders.csv", mime="text/csv")
    else:
        st.info(t["emptySearch"])

    for o in filtered:
        with st.container(border=True):
            head, side = st.columns([3, 1])
            head.markdown(f"`#{o.serial_number}` **{status_label(o.status, state.lang) if o.status else ''}**")
            head.markdown(f"### {o.customer_name}\n📍 {o.area_location}")
            side.markdown(f"{o.receiving_date or '—'}\n\n{shift_label(o.delivery_shift, state.lang)}")

            st.dataframe(
                pd.DataFrame([{t["searchProduct"]: i.item_name, t["quantity"]: i.quantity} for i in o.items]),
                hide_index=True, use_container_width=True,
            )
            st.markdown(f"**{t['totalQty']}: {o.total_quantity}**")
            if o.overall_notes:
                st.caption(f"📝 “{o.overall_notes}”")
            if o.emergency:
                st.error(f"🚨 {o.emergency.reason} ({o.emergency.reported_by}, {o.emergency.date})")

            if o.shipments:
                with st.expander(t["shipments"]):
                    for s in o.shipments:
                        lines = ", ".join(f"{line.item_name} x{line.quantity}" for line in s.items)
                        st.write(f"🚚 {s.driver_name} {s.truck or ''} · {lines} · {t['delivered'] if s.delivered else t['onTheWay']}")
            with st.expander(t["history"]):
                st.table(pd.DataFrame([h.model_dump() for h in o.history]))

            actions = allowed_actions(user.role, o.status)
            if not actions:
                continue
            note = ""
            if user.role != Role.SALES:
                note = st.text_area(t["addNote"], key=f"note_{o.id}", height=70)

            cols = st.columns(3)
            if Action.MODIFY in actions and cols[0].button(t["editOrder"] if user.role == Role.SALES else t["adjust"], key=f"edit_{o.id}", use_container_width=True):
                reset_form(o.model_copy(deep=True), o.id)
                st.rerun()
            if Action.CANCEL in actions and cols[1].button(t["cancelOrder"], key=f"cancel_{o.id}", use_container_width=True):
                run_action(workflow.cancel, o.id, user)
            if Action.APPROVE_QUANTITIES in actions and cols[2].button(t["approveQty"], key=f"aq_{o.id}", type="primary", use_container_width=True):
                run_action(workflow.approve_quantities, o.id, user, note)
            if Action.REJECT in actions and cols[1].button(t["reject"], key=f"rej_{o.id}", use_container_width=True):
                run_action(workflow.reject, o.id, user, note)
            if Action.APPROVE in actions and cols[2].button(t["approveOrder"], key=f"ap_{o.id}", type="primary", use_container_width=True):
                run_action(workflow.approve, o.id, user, note)
            if Action.REFUSE_CREDIT in actions and cols[1].button(t["refuseCredit"], key=f"rc_{o.id}", use_container_width=True):
                run_action(workflow.refuse_credit, o.id, user, note)
            if Action.MARK_READY in actions and cols[2].button(f"📦 {t['markReady']}", key=f"ready_{o.id}", type="primary", use_container_width=True):
                run_action(workflow.mark_ready, o.id, user, note)
            if Action.PUT_ON_HOLD in actions and cols[1].button(t["putOnHold"], key=f"hold_{o.id}", use_container_width=True):
                run_action(workflow.put_on_hold, o.id, user, note)

            if Action.DISPATCH in actions:
                remaining = {name: qty for name, qty in o.remaining_quantities().items() if qty > 0}
                with st.expander(f"🚚 {t['dispatch']}"):
                    driver = st.selectbox(t["selectDriver"], [d.name for d in users.drivers()], key=f"driver_{o.id}")
                    warehouse = st.selectbox(t["warehouse"], WAREHOUSES, key=f"wh_{o.id}")
                    quantities = {
                        name: st.number_input(f"{name} ({qty} {t['remaining']})", min_value=0, max_value=qty, value=qty, step=1, key=f"q_{o.id}_{name}")
                        for name, qty in remaining.items()
                    }
                    if st.button(t["dispatch"], key=f"dispatch_{o.id}", type="primary"):
                        run_action(workflow.dispatch, o.id, user, driver, quantities, warehouse=warehouse, note=note)
            if Action.RESOLVE_EMERGENCY in actions and st.button(t["resolveEmergency"], key=f"resolve_{o.id}"):
                run_action(workflow.resolve_emergency, o.id, user, note)

            if Action.CONFIRM_DELIVERY in actions:
                mine_open = any(s.driver_name == user.name and not s.delivered for s in o.shipments)
                if mine_open and st.button(f"✅ {t['confirmDelivery']}", key=f"deliver_{o.id}", type="primary", use_container_width=True):
                    run_action(workflow.confirm_delivery, o.id, user, note)
            if Action.REPORT_EMERGENCY in actions:
                with st.expander(f"🚨 {t['reportEmergency']}"):
                    reason = st.text_input(t["emergencyReason"], key=f"reason_{o.id}")
                    if st.button(t["reportEmergency"], key=f"emerg_{o.id}"):
                        run_action(workflow.report_emergency, o.id, user, reason)
