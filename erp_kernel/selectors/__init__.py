"""Read-side base for module selectors."""

from erp_kernel.selectors.aging import (
    AgingBand,
    AgingBucket,
    AgingSummary,
    build_aging_summary,
    days_overdue,
)
from erp_kernel.selectors.base import BaseSelector

__all__ = [
    "AgingBand",
    "AgingBucket",
    "AgingSummary",
    "BaseSelector",
    "build_aging_summary",
    "days_overdue",
]
