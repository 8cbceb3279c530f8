"""Events published by the Quotation module."""

from dataclasses import dataclass
from uuid import UUID

from erp_kernel.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class QuotationAcceptedEvent(DomainEvent):
    """The customer accepted a quotation."""
    quotation_id: UUID
    project_id: UUID
    accepted_by_id: UUID | None
