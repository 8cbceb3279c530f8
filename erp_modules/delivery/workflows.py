"""Delivery Workflows."""

from erp_kernel.domain.workflow import Transition, Workflow
from erp_modules.delivery.models import DeliveryStatus

DELIVERY_WORKFLOW = Workflow(
    name="delivery",
    description="Customer delivery lifecycle",
    initial_state=DeliveryStatus.PENDING.value,
    states=tuple(s.value for s in DeliveryStatus),
    transitions=(
        Transition("PENDING", "DELIVERED", action="mark_delivered"),
        Transition("DELIVERED", "RETURNED", action="mark_returned"),
    ),
    terminal_states=("RETURNED",),
)
