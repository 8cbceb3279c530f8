"""
Tax invoice workflow.

Payments resolve their transition by target state (PARTIALLY_PAID or
PAID, whichever the new paid total implies).
"""

from erp_kernel.domain.workflow import Transition, Workflow
from erp_modules.invoice.models import InvoiceStatus

INVOICE_WORKFLOW = Workflow(
    name="tax_invoice",
    description="Customer tax invoice from draft to settlement",
    initial_state=InvoiceStatus.DRAFT.value,
    states=tuple(s.value for s in InvoiceStatus),
    transitions=(
        Transition("DRAFT", "ISSUED", action="issue"),
        Transition("DRAFT", "CANCELLED", action="cancel"),
        Transition("ISSUED", "CANCELLED", action="cancel"),
        Transition("ISSUED", "PARTIALLY_PAID", action="record_payment"),
        Transition("ISSUED", "PAID", action="record_payment"),
        Transition("PARTIALLY_PAID", "PARTIALLY_PAID", action="record_payment"),
        Transition("PARTIALLY_PAID", "PAID", action="record_payment"),
        Transition("OVERDUE", "PARTIALLY_PAID", action="record_payment"),
        Transition("OVERDUE", "PAID", action="record_payment"),
        Transition("ISSUED", "OVERDUE", action="mark_overdue"),
        Transition("PARTIALLY_PAID", "OVERDUE", action="mark_overdue"),
    ),
    terminal_states=("PAID", "CANCELLED"),
)
