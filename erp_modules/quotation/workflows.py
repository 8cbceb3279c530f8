"""
Quotation Workflows.

    DRAFT --submit--> PENDING --approve--> APPROVED --mark_sending--> SENDING
                        |                     |                          |
                        +--reject--> REJECTED |                    mark_sent
                                              |                          v
                                              +-----accept-----+       SENT
                                                               v         |
                                                           ACCEPTED <----+

SENT may also go back to SENDING to resend the quotation.
"""

from erp_kernel.domain.workflow import Guard, Transition, Workflow
from erp_modules.quotation.models import QuotationStatus

HAS_LINE_ITEMS = Guard(
    name="has_line_items",
    description="Quotation carries at least one line item",
)

QUOTATION_WORKFLOW = Workflow(
    name="quotation",
    description="Customer quotation approval and delivery lifecycle",
    initial_state=QuotationStatus.DRAFT.value,
    states=tuple(s.value for s in QuotationStatus),
    transitions=(
        Transition("DRAFT", "PENDING", action="submit", guard=HAS_LINE_ITEMS),
        Transition("PENDING", "APPROVED", action="approve"),
        Transition("PENDING", "REJECTED", action="reject"),
        Transition("APPROVED", "SENDING", action="mark_sending"),
        Transition("SENT", "SENDING", action="mark_sending"),
        Transition("SENDING", "SENT", action="mark_sent"),
        Transition("APPROVED", "ACCEPTED", action="accept"),
        Transition("SENT", "ACCEPTED", action="accept"),
    ),
    terminal_states=("REJECTED", "ACCEPTED"),
)
