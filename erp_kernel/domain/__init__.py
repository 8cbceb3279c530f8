"""Pure kernel domain types: clock, workflow state machines, value objects."""

from erp_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from erp_kernel.domain.values import CommandResult, quantize_money, to_decimal
from erp_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "CommandResult",
    "quantize_money",
    "to_decimal",
    "Guard",
    "Transition",
    "Workflow",
]
