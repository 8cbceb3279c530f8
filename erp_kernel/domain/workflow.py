"""
Canonical workflow types (``erp_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for the document state machines (project, quotation,
purchase request, RFQ item, purchase order, payable, invoice).  Every
module declares its lifecycle once as a ``Workflow`` and its ORM
transition methods resolve the next state through ``Workflow.advance``,
so an illegal action fails the same way everywhere.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* An action that has no transition from the current state raises
  ``InvalidStatusTransitionError``; repeating a completed transition is
  therefore rejected, never silently accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from erp_kernel.exceptions import InvalidStatusTransitionError


def _state(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


@dataclass(frozen=True)
class Guard:
    """A condition checked by the owning service before a transition fires.

    Descriptive only; the workflow does not evaluate it.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    ``terminal_states`` are states with no outgoing transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state} "
                "is not a declared state"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action} "
                    f"{t.from_state}->{t.to_state} references an unknown state"
                )

    def find(self, current_state: Any, action: str) -> Transition | None:
        current = _state(current_state)
        for t in self.transitions:
            if t.from_state == current and t.action == action:
                return t
        return None

    def can(self, current_state: Any, action: str) -> bool:
        return self.find(current_state, action) is not None

    def advance(
        self,
        entity: str,
        entity_id: Any,
        current_state: Any,
        action: str,
    ) -> str:
        """Return the target state of ``action`` or raise if it is illegal here."""
        transition = self.find(current_state, action)
        if transition is None:
            raise InvalidStatusTransitionError(
                entity=entity,
                entity_id=entity_id,
                current_status=_state(current_state),
                action=action,
            )
        return transition.to_state

    def transition_to(
        self,
        entity: str,
        entity_id: Any,
        current_state: Any,
        target_state: Any,
    ) -> Transition:
        """Find the transition reaching ``target_state`` from the current state."""
        current, target = _state(current_state), _state(target_state)
        for t in self.transitions:
            if t.from_state == current and t.to_state == target:
                return t
        raise InvalidStatusTransitionError(
            entity=entity,
            entity_id=entity_id,
            current_status=current,
            action=f"move to {target}",
        )
