"""
Domain events and the in-process event bus.

A ``DomainEvent`` is an immutable record of a fact that already happened
inside one module ("purchase order confirmed").  It carries identifiers and
a few scalars, never ORM objects, so that the consuming module re-reads
whatever it needs through its own session.

``DomainEventPublisher`` is the only thing a service sees.  The default
implementation, ``InProcessEventBus``, dispatches synchronously:

    service.confirm_purchase_order(po_id)
        -> po.confirm(); session.flush()
        -> bus.publish(PurchaseOrderConfirmedEvent(...))
            -> AccountsPayableEventHandler.on_purchase_order_confirmed(event)
               (same session, before commit)
        <- returns; caller commits the unit of work

A handler exception is not caught here.  It reaches the publishing service,
then ``session_scope()``, which rolls back the triggering write together
with every handler write.  Handlers registered after the failing one do not
run.  There is no retry and no compensation.

Swapping in an external broker means providing another
``DomainEventPublisher``; services do not change.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from erp_kernel.logging_config import LogContext, get_logger

logger = get_logger("events")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for every domain event."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return type(self).__name__


EventHandler = Callable[[DomainEvent], None]


class DomainEventPublisher(ABC):
    """Publishing seam used by application services."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        ...


class InProcessEventBus(DomainEventPublisher):
    """
    Synchronous, ordered dispatch to handlers subscribed per event type.

    Handlers are matched on the exact event class.  One bus is built per
    unit of work, so ``published`` lists only this command's events.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = {}
        self.published: list[DomainEvent] = []

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "domain_event_subscribed",
            extra={
                "event_type": event_type.__name__,
                "handler": _handler_name(handler),
            },
        )

    def handlers_for(self, event_type: type[DomainEvent]) -> tuple[EventHandler, ...]:
        return tuple(self._handlers.get(event_type, ()))

    def publish(self, event: DomainEvent) -> None:
        self.published.append(event)
        handlers = self.handlers_for(type(event))

        with LogContext.bind(event_id=event.event_id):
            if not handlers:
                logger.info(
                    "domain_event_no_subscribers",
                    extra={"event_type": event.event_type},
                )
                return

            logger.info(
                "domain_event_published",
                extra={
                    "event_type": event.event_type,
                    "handler_count": len(handlers),
                },
            )
            for handler in handlers:
                handler(event)
                logger.debug(
                    "domain_event_handled",
                    extra={
                        "event_type": event.event_type,
                        "handler": _handler_name(handler),
                    },
                )


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
