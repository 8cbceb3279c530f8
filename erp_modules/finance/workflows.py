"""
Accounts payable workflow.

Payment transitions are resolved by target state: the service computes
the status the payments imply and asks the workflow for the transition
that reaches it.
"""

from erp_kernel.domain.workflow import Guard, Transition, Workflow
from erp_modules.finance.models import APStatus

NO_PAYMENTS_RECORDED = Guard(
    name="no_payments_recorded",
    description="A payable with recorded payments cannot be cancelled",
)

ACCOUNTS_PAYABLE_WORKFLOW = Workflow(
    name="accounts_payable",
    description="Vendor payable from confirmation to settlement",
    initial_state=APStatus.PENDING.value,
    states=tuple(s.value for s in APStatus),
    transitions=(
        Transition("PENDING", "PARTIALLY_PAID", action="record_payment"),
        Transition("PENDING", "PAID", action="record_payment"),
        Transition("PARTIALLY_PAID", "PARTIALLY_PAID", action="record_payment"),
        Transition("PARTIALLY_PAID", "PAID", action="record_payment"),
        Transition("PENDING", "CANCELLED", action="cancel", guard=NO_PAYMENTS_RECORDED),
    ),
    terminal_states=("PAID", "CANCELLED"),
)
