"""
Project Workflows.

DRAFT -> ACTIVE -> COMPLETED, with ARCHIVED reachable from every
non-archived state.
"""

from erp_kernel.domain.workflow import Guard, Transition, Workflow
from erp_modules.project.models import ProjectStatus

CUSTOMER_HAS_ACCEPTED_QUOTATION = Guard(
    name="customer_has_accepted_quotation",
    description="Activated automatically when a quotation is accepted",
)

PROJECT_WORKFLOW = Workflow(
    name="project",
    description="Customer project lifecycle",
    initial_state=ProjectStatus.DRAFT.value,
    states=tuple(s.value for s in ProjectStatus),
    transitions=(
        Transition("DRAFT", "ACTIVE", action="activate",
                   guard=CUSTOMER_HAS_ACCEPTED_QUOTATION),
        Transition("DRAFT", "ARCHIVED", action="archive"),
        Transition("ACTIVE", "COMPLETED", action="complete"),
        Transition("ACTIVE", "ARCHIVED", action="archive"),
        Transition("COMPLETED", "ARCHIVED", action="archive"),
    ),
    terminal_states=("ARCHIVED",),
)
