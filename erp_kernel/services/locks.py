"""
Project-level locking seam.

Deliveries and invoices for one project must not be written concurrently
by two commands.  The lock service itself lives outside this codebase, so
services depend only on ``ProjectLock``; the default does nothing and
relies on the unit of work and unique constraints.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from uuid import UUID


class ProjectLock(ABC):
    """Serialises writers of one project for the duration of ``hold``."""

    @abstractmethod
    def hold(self, project_id: UUID, operation: str) -> AbstractContextManager[None]:
        ...


class NoOpProjectLock(ProjectLock):

    @contextmanager
    def hold(self, project_id: UUID, operation: str) -> Iterator[None]:
        yield
