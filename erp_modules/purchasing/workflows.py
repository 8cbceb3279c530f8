"""
Purchasing Workflows.

State machines for purchase requests, their RFQ items and purchase
orders.  ORM transition methods resolve every status change through
these definitions; nothing writes a status column directly.
"""

from erp_kernel.domain.workflow import Guard, Transition, Workflow
from erp_modules.purchasing.models import (
    PurchaseOrderStatus,
    PurchaseRequestStatus,
    RfqItemStatus,
)

# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

VENDORS_ARE_SUPPLIERS = Guard(
    name="vendors_are_suppliers",
    description="Every RFQ recipient is an active VENDOR or OUTSOURCE company",
)

ITEM_HAS_REPLIED = Guard(
    name="item_has_replied",
    description="The chosen RFQ item carries a vendor quote",
)

# -----------------------------------------------------------------------------
# Purchase request
# -----------------------------------------------------------------------------

PURCHASE_REQUEST_WORKFLOW = Workflow(
    name="purchase_request",
    description="Purchase request through RFQ and vendor selection",
    initial_state=PurchaseRequestStatus.DRAFT.value,
    states=tuple(s.value for s in PurchaseRequestStatus),
    transitions=(
        Transition("DRAFT", "RFQ_SENT", action="send_rfq", guard=VENDORS_ARE_SUPPLIERS),
        Transition("RFQ_SENT", "VENDOR_SELECTED", action="select_vendor", guard=ITEM_HAS_REPLIED),
        Transition("VENDOR_SELECTED", "CLOSED", action="close"),
        Transition("VENDOR_SELECTED", "RFQ_SENT", action="revert_vendor_selection"),
        Transition("DRAFT", "CANCELED", action="cancel"),
        Transition("RFQ_SENT", "CANCELED", action="cancel"),
        Transition("VENDOR_SELECTED", "CANCELED", action="cancel"),
    ),
    terminal_states=("CLOSED", "CANCELED"),
)

# -----------------------------------------------------------------------------
# RFQ item
# -----------------------------------------------------------------------------

RFQ_ITEM_WORKFLOW = Workflow(
    name="rfq_item",
    description="One vendor's quote request",
    initial_state=RfqItemStatus.SENT.value,
    states=tuple(s.value for s in RfqItemStatus),
    transitions=(
        Transition("SENT", "REPLIED", action="record_reply"),
        Transition("SENT", "NO_RESPONSE", action="mark_no_response"),
        Transition("REPLIED", "SELECTED", action="select"),
        Transition("REPLIED", "REJECTED", action="reject"),
        Transition("SELECTED", "REPLIED", action="deselect"),
        Transition("REJECTED", "REPLIED", action="unreject"),
    ),
    terminal_states=("NO_RESPONSE",),
)

# -----------------------------------------------------------------------------
# Purchase order
# -----------------------------------------------------------------------------

PURCHASE_ORDER_WORKFLOW = Workflow(
    name="purchase_order",
    description="Purchase order from draft to goods received",
    initial_state=PurchaseOrderStatus.DRAFT.value,
    states=tuple(s.value for s in PurchaseOrderStatus),
    transitions=(
        Transition("DRAFT", "SENT", action="send"),
        Transition("SENT", "CONFIRMED", action="confirm"),
        Transition("CONFIRMED", "RECEIVED", action="receive"),
        Transition("DRAFT", "CANCELED", action="cancel"),
        Transition("SENT", "CANCELED", action="cancel"),
        Transition("CONFIRMED", "CANCELED", action="cancel"),
    ),
    terminal_states=("RECEIVED", "CANCELED"),
)
