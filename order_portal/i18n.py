"""UI strings in Arabic (default) and English."""
from __future__ import annotations

from typing import Dict

from order_portal.data.models import DeliveryShift, OrderStatus, Role

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "loginTitle": "Welcome to the IFCG Portal",
        "loginSubtitle": "Choose your role to sign in",
        "enterPin": "Enter your PIN",
        "invalidCode": "Invalid code for this role",
        "cancel": "Cancel",
        "login": "Sign in",
        "logout": "Log out",
        "language": "العربية",
        "role_sales": "Sales Supervisor",
        "role_assistant": "Sales Assistant",
        "role_finance": "Finance",
        "role_warehouse": "Warehouse",
        "role_driver_supervisor": "Driver Supervisor",
        "role_truck_driver": "Truck Driver",
        "notificationMsg": "Orders are waiting for your review",
        "newOrder": "New Order",
        "editingOrder": "Editing Order",
        "myHistory": "My Orders",
        "tab_reviewPending": "Pending Review",
        "tab_fullHistory": "Full History",
        "clientName": "Client Name",
        "selectClient": "Select or type a client",
        "location": "Location",
        "areaAddress": "Area / address",
        "orderDate": "Order Date",
        "receivingDate": "Receiving Date",
        "deliveryShift": "Delivery Shift",
        "deliveryType": "Delivery Type",
        "shift_First": "First Trip",
        "shift_Second": "Second Trip",
        "shift_Night": "Night Trip",
        "orderItems": "Order Items",
        "addItem": "Add Item",
        "removeItem": "Remove",
        "searchProduct": "Product",
        "quantity": "Qty",
        "overallNotes": "Notes",
        "overallNotesPlaceholder": "Anything the team should know",
        "submitOrder": "Submit Order",
        "updateOrder": "Update Order",
        "validationItemDetails": "Please fill client name, location and at least one item",
        "successTitle": "Order Sent",
        "successMsg": "Your order is on its way to review",
        "searchPlaceholder": "Search by client or serial number",
        "emptySearch": "No orders found",
        "totalQty": "Total Quantity",
        "editOrder": "Edit",
        "cancelOrder": "Cancel Order",
        "addNote": "Add a note (optional)",
        "adjust": "Adjust",
        "reject": "Reject",
        "approveQty": "Approve Quantities",
        "approveOrder": "Approve Order",
        "refuseCredit": "Refuse Credit",
        "markReady": "Mark Ready for Driver",
        "putOnHold": "Put On Hold",
        "dispatch": "Dispatch Shipment",
        "selectDriver": "Driver",
        "warehouse": "Warehouse",
        "remaining": "remaining",
        "confirmDelivery": "Confirm Delivery",
        "reportEmergency": "Report Emergency",
        "emergencyReason": "What happened?",
        "resolveEmergency": "Resolve Emergency",
        "history": "History",
        "shipments": "Shipments",
        "delivered": "Delivered",
        "onTheWay": "On the way",
        "exportCsv": "Export CSV",
        "magicAi": "Magic AI",
        "magicHint": "Paste a WhatsApp message and let AI fill the form",
        "parse": "Parse",
        "aiDisabled": "AI parsing is not configured",
        "refresh": "Refresh",
        "syncError": "Could not reach the server. Showing the last synchronized data.",
        "status_pendingAssistant": "Pending Assistant",
        "status_pendingFinance": "Pending Finance",
        "status_approved": "Approved",
        "status_readyDriver": "Ready for Driver",
        "status_partiallyShipped": "Partially Shipped",
        "status_inTransit": "In Transit",
        "status_completed": "Completed",
        "status_rejected": "Rejected",
        "status_onHold": "On Hold",
        "status_emergency": "Emergency",
        "status_canceled": "Canceled",
    },
    "ar": {
        "loginTitle": "مرحباً بك في بوابة IFCG",
        "loginSubtitle": "اختر دورك لتسجيل الدخول",
        "enterPin": "أدخل الرمز السري",
        "invalidCode": "رمز غير صحيح لهذا الدور",
        "cancel": "إلغاء",
        "login": "دخول",
        "logout": "خروج",
        "language": "English",
        "role_sales": "مشرف المبيعات",
        "role_assistant": "مساعد المبيعات",
        "role_finance": "المالية",
        "role_warehouse": "المخزن",
        "role_driver_supervisor": "مشرف السائقين",
        "role_truck_driver": "سائق",
        "notificationMsg": "توجد طلبات بانتظار مراجعتك",
        "newOrder": "طلب جديد",
        "editingOrder": "تعديل الطلب",
        "myHistory": "طلباتي",
        "tab_reviewPending": "بانتظار المراجعة",
        "tab_fullHistory": "السجل الكامل",
        "clientName": "اسم العميل",
        "selectClient": "اختر أو اكتب اسم العميل",
        "location": "المنطقة",
        "areaAddress": "المنطقة / العنوان",
        "orderDate": "تاريخ الطلب",
        "receivingDate": "تاريخ الاستلام",
        "deliveryShift": "النقلة",
        "deliveryType": "نوع التوصيل",
        "shift_First": "أول نقلة",
        "shift_Second": "ثانى نقلة",
        "shift_Night": "نقلة ليلية",
        "orderItems": "الأصناف",
        "addItem": "إضافة صنف",
        "removeItem": "حذف",
        "searchProduct": "الصنف",
        "quantity": "الكمية",
        "overallNotes": "ملاحظات",
        "overallNotesPlaceholder": "أي معلومات يحتاجها الفريق",
        "submitOrder": "إرسال الطلب",
        "updateOrder": "تحديث الطلب",
        "validationItemDetails": "يرجى إدخال اسم العميل والمنطقة وصنف واحد على الأقل",
        "successTitle": "تم إرسال الطلب",
        "successMsg": "طلبك في طريقه للمراجعة",
        "searchPlaceholder": "ابحث باسم العميل أو رقم الطلب",
        "emptySearch": "لا توجد طلبات",
        "totalQty": "إجمالي الكمية",
        "editOrder": "تعديل",
        "cancelOrder": "إلغاء الطلب",
        "addNote": "أضف ملاحظة (اختياري)",
        "adjust": "تعديل",
        "reject": "رفض",
        "approveQty": "اعتماد الكميات",
        "approveOrder": "اعتماد الطلب",
        "refuseCredit": "رفض الائتمان",
        "markReady": "جاهز للسائق",
        "putOnHold": "تعليق",
        "dispatch": "شحن",
        "selectDriver": "السائق",
        "warehouse": "المخزن",
        "remaining": "متبقي",
        "confirmDelivery": "تأكيد التسليم",
        "reportEmergency": "بلاغ طارئ",
        "emergencyReason": "ماذا حدث؟",
        "resolveEmergency": "إنهاء البلاغ",
        "history": "السجل",
        "shipments": "الشحنات",
        "delivered": "تم التسليم",
        "onTheWay": "في الطريق",
        "exportCsv": "تصدير CSV",
        "magicAi": "الذكاء الاصطناعي",
        "magicHint": "الصق رسالة واتساب وسيملأ الذكاء الاصطناعي النموذج",
        "parse": "تحليل",
        "aiDisabled": "خدمة الذكاء الاصطناعي غير مفعلة",
        "refresh": "تحديث",
        "syncError": "تعذر الاتصال بالخادم. يتم عرض آخر بيانات متزامنة.",
        "status_pendingAssistant": "بانتظار المساعد",
        "status_pendingFinance": "بانتظار المالية",
        "status_approved": "معتمد",
        "status_readyDriver": "جاهز للسائق",
        "status_partiallyShipped": "شحن جزئي",
        "status_inTransit": "في الطريق",
        "status_completed": "مكتمل",
        "status_rejected": "مرفوض",
        "status_onHold": "معلق",
        "status_emergency": "طارئ",
        "status_canceled": "ملغي",
    },
}

STATUS_KEYS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING_ASSISTANT: "status_pendingAssistant",
    OrderStatus.PENDING_FINANCE: "status_pendingFinance",
    OrderStatus.APPROVED: "status_approved",
    OrderStatus.READY_FOR_DRIVER: "status_readyDriver",
    OrderStatus.PARTIALLY_SHIPPED: "status_partiallyShipped",
    OrderStatus.IN_TRANSIT: "status_inTransit",
    OrderStatus.COMPLETED: "status_completed",
    OrderStatus.REJECTED: "status_rejected",
    OrderStatus.ON_HOLD: "status_onHold",
    OrderStatus.EMERGENCY: "status_emergency",
    OrderStatus.CANCELED: "status_canceled",
}

SHIFT_KEYS: Dict[DeliveryShift, str] = {
    DeliveryShift.FIRST: "shift_First",
    DeliveryShift.SECOND: "shift_Second",
    DeliveryShift.NIGHT: "shift_Night",
}


def translator(lang: str) -> Dict[str, str]:
    return TRANSLATIONS.get(lang, TRANSLATIONS["en"])


def status_label(status: OrderStatus, lang: str) -> str:
    return translator(lang).get(STATUS_KEYS[status], status.value)


def role_label(role: Role, lang: str) -> str:
    return translator(lang).get(f"role_{role.value}", role.value)


def shift_label(shift: DeliveryShift, lang: str) -> str:
    return translator(lang).get(SHIFT_KEYS[shift], shift.value)
