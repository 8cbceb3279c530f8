"""Kernel write-side helpers: service base, document numbers, project lock."""

from erp_kernel.services.base import BaseService
from erp_kernel.services.locks import NoOpProjectLock, ProjectLock
from erp_kernel.services.numbering import DocumentNumberFormat, next_document_number

__all__ = [
    "BaseService",
    "DocumentNumberFormat",
    "next_document_number",
    "ProjectLock",
    "NoOpProjectLock",
]
