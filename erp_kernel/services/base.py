"""
BaseService -- abstract base for every ERP command service.

Responsibility:
    Holds the caller's ``Session``, the event publisher and the clock, and
    provides the lookup helper every service uses to turn a missing row
    into ``ResourceNotFoundError``.

Invariants enforced:
    Services flush within the caller's transaction and never commit or
    roll back.  ``session_scope()`` owns the boundary, so an entity change
    and every handler write it triggers commit or roll back together.
"""

import functools
from abc import ABC
from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from erp_kernel.db.base import Base
from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.events import DomainEvent, DomainEventPublisher, InProcessEventBus
from erp_kernel.exceptions import ErpError, ResourceNotFoundError
from erp_kernel.logging_config import LogContext, get_logger

logger = get_logger("services")

ModelType = TypeVar("ModelType", bound=Base)
CommandMethod = TypeVar("CommandMethod", bound=Callable[..., Any])


def command(method: CommandMethod) -> CommandMethod:
    """
    Mark a public service method as a command.

    Records logged while it runs carry ``command`` (the method name) and
    ``actor_id`` when passed by keyword.  A command called from inside
    another keeps the outer name.  Rejections are logged once, at the
    outermost command, and re-raised unchanged.
    """

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        if "command" in LogContext.current():
            return method(self, *args, **kwargs)
        with LogContext.bind(command=method.__name__, actor_id=kwargs.get("actor_id")):
            try:
                return method(self, *args, **kwargs)
            except ErpError:
                logger.info("command_rejected", exc_info=True)
                raise

    return wrapper  # type: ignore[return-value]


class BaseService(ABC):
    """
    Abstract base class for command services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide read views; those belong in selectors.
    """

    def __init__(
        self,
        session: Session,
        publisher: DomainEventPublisher | None = None,
        clock: Clock | None = None,
    ):
        self.session = session
        self.publisher = publisher or InProcessEventBus()
        self.clock = clock or SystemClock()

    def _get_or_raise(
        self,
        model: type[ModelType],
        entity_id: UUID,
        resource: str,
        *,
        for_update: bool = False,
    ) -> ModelType:
        """Load a row by primary key or raise ResourceNotFoundError."""
        options: dict[str, Any] = {}
        if for_update:
            options["with_for_update"] = True
        entity = self.session.get(model, entity_id, **options)
        if entity is None:
            raise ResourceNotFoundError(resource, entity_id)
        return entity

    def _publish(self, event: DomainEvent) -> None:
        self.publisher.publish(event)
